"""Unit tests for search query parser."""

from __future__ import annotations

import re

import pytest

from outline_search.exceptions import QueryParseError
from outline_search.search.ast_nodes import (
    AlwaysMatch,
    AncestorExpr,
    AndExpr,
    AttributeDateExpr,
    AttributeExpr,
    ChildExpr,
    ChildrenExpr,
    DateExpr,
    DepthExpr,
    DescendantExpr,
    FilterType,
    FuzzyExpr,
    NotExpr,
    OrExpr,
    ParentExpr,
    Quantifier,
    RefExpr,
    SiblingExpr,
    TextExpr,
)
from outline_search.search.dates import ComparisonOp
from outline_search.search.parser import parse_filter, parse_query

# ---------------------------------------------------------------------------
# Text terms
# ---------------------------------------------------------------------------


class TestTextTerms:
    def test_empty_query_matches_everything(self) -> None:
        assert parse_query("") == AlwaysMatch()
        assert parse_query("   ") == AlwaysMatch()

    def test_single_word(self) -> None:
        assert parse_query("hello") == TextExpr("hello")

    def test_two_words_anded(self) -> None:
        assert parse_query("dark psy") == AndExpr(TextExpr("dark"), TextExpr("psy"))

    def test_quoted_phrase(self) -> None:
        assert parse_query('"dark psy"') == TextExpr("dark psy")

    def test_negated_word(self) -> None:
        assert parse_query("-ambient") == NotExpr(TextExpr("ambient"))

    def test_double_negation(self) -> None:
        assert parse_query("--x") == NotExpr(NotExpr(TextExpr("x")))


# ---------------------------------------------------------------------------
# Boolean structure and precedence
# ---------------------------------------------------------------------------


class TestBooleanStructure:
    def test_explicit_and(self) -> None:
        assert parse_query("a + b") == AndExpr(TextExpr("a"), TextExpr("b"))

    def test_or(self) -> None:
        assert parse_query("a | b") == OrExpr(TextExpr("a"), TextExpr("b"))

    def test_and_binds_tighter_than_or(self) -> None:
        assert parse_query("a b | c") == OrExpr(
            AndExpr(TextExpr("a"), TextExpr("b")),
            TextExpr("c"),
        )
        assert parse_query("a | b c") == OrExpr(
            TextExpr("a"),
            AndExpr(TextExpr("b"), TextExpr("c")),
        )

    def test_not_binds_tighter_than_and(self) -> None:
        assert parse_query("-a b") == AndExpr(NotExpr(TextExpr("a")), TextExpr("b"))

    def test_left_associative(self) -> None:
        assert parse_query("a | b | c") == OrExpr(
            OrExpr(TextExpr("a"), TextExpr("b")),
            TextExpr("c"),
        )
        assert parse_query("a b c") == AndExpr(
            AndExpr(TextExpr("a"), TextExpr("b")),
            TextExpr("c"),
        )

    def test_parentheses_group(self) -> None:
        assert parse_query("(task | project) d:>0") == AndExpr(
            OrExpr(TextExpr("task"), TextExpr("project")),
            DepthExpr(ComparisonOp.GT, 0),
        )

    def test_negated_group(self) -> None:
        assert parse_query("-(a | b)") == NotExpr(OrExpr(TextExpr("a"), TextExpr("b")))

    def test_adjacent_groups_are_anded(self) -> None:
        assert parse_query("(a)(b)") == AndExpr(TextExpr("a"), TextExpr("b"))

    def test_pipe_without_spaces(self) -> None:
        assert parse_query("a|b") == OrExpr(TextExpr("a"), TextExpr("b"))

    def test_plus_without_spaces(self) -> None:
        assert parse_query("task+project") == AndExpr(TextExpr("task"), TextExpr("project"))

    def test_plus_joins_filters(self) -> None:
        assert parse_query("@a=1+@b=2") == AndExpr(
            AttributeExpr("a", ComparisonOp.EQ, "1"),
            AttributeExpr("b", ComparisonOp.EQ, "2"),
        )

    def test_plus_sign_of_relative_date_is_kept(self) -> None:
        assert parse_query("c:>+7d") == DateExpr(FilterType.CREATED, ComparisonOp.GT, "+7d")


# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------


class TestNumericFilters:
    @pytest.mark.parametrize(
        ("query", "op", "value"),
        [
            ("d:>2", ComparisonOp.GT, 2),
            ("d:>=1", ComparisonOp.GTE, 1),
            ("d:<2", ComparisonOp.LT, 2),
            ("d:<=0", ComparisonOp.LTE, 0),
            ("d:=3", ComparisonOp.EQ, 3),
            ("d:!=3", ComparisonOp.NEQ, 3),
            ("d:3", ComparisonOp.EQ, 3),
        ],
    )
    def test_depth(self, query: str, op: ComparisonOp, value: int) -> None:
        assert parse_query(query) == DepthExpr(op, value)

    def test_children(self) -> None:
        assert parse_query("children:>=3") == ChildrenExpr(ComparisonOp.GTE, 3)
        assert parse_query("children:0") == ChildrenExpr(ComparisonOp.EQ, 0)

    @pytest.mark.parametrize("query", ["d:abc", "d:", "d:>", "d:1.5", "d:>2x"])
    def test_invalid_depth(self, query: str) -> None:
        with pytest.raises(QueryParseError, match="invalid depth value"):
            parse_query(query)

    def test_invalid_children_count(self) -> None:
        with pytest.raises(QueryParseError, match="invalid children count: many"):
            parse_query("children:many")


class TestAttributeFilters:
    def test_exists(self) -> None:
        assert parse_query("@status") == AttributeExpr("status")

    def test_equals(self) -> None:
        assert parse_query("@status=done") == AttributeExpr("status", ComparisonOp.EQ, "done")

    def test_not_equals(self) -> None:
        assert parse_query("@status!=done") == AttributeExpr("status", ComparisonOp.NEQ, "done")

    def test_empty_value(self) -> None:
        assert parse_query("@status=") == AttributeExpr("status", ComparisonOp.EQ, "")

    def test_quoted_value(self) -> None:
        expr = parse_query('@title="two words"')
        assert expr == AttributeExpr("title", ComparisonOp.EQ, "two words")

    def test_quoted_value_with_escapes(self) -> None:
        expr = parse_query(r'@title="say \"hi\""')
        assert expr == AttributeExpr("title", ComparisonOp.EQ, 'say "hi"')

    def test_key_with_dash_and_dot(self) -> None:
        assert parse_query("@due-date") == AttributeExpr("due-date")
        assert parse_query("@meta.kind=x") == AttributeExpr("meta.kind", ComparisonOp.EQ, "x")

    @pytest.mark.parametrize(
        ("query", "op", "value"),
        [
            ("@due>-7d", ComparisonOp.GT, "-7d"),
            ("@due<=+2w", ComparisonOp.LTE, "+2w"),
            ("@due>=2025-01-01", ComparisonOp.GTE, "2025-01-01"),
            ("@due=2025-10-10", ComparisonOp.EQ, "2025-10-10"),
            ("@due!=3m", ComparisonOp.NEQ, "3m"),
        ],
    )
    def test_date_values(self, query: str, op: ComparisonOp, value: str) -> None:
        assert parse_query(query) == AttributeDateExpr("due", op, value)

    def test_ordering_operator_requires_date(self) -> None:
        with pytest.raises(QueryParseError, match="needs a date value"):
            parse_query("@priority>high")

    def test_impossible_day_is_still_a_date_literal(self) -> None:
        expr = parse_query("@due>2025-02-30")
        assert expr == AttributeDateExpr("due", ComparisonOp.GT, "2025-02-30")
        expr = parse_query("c:2025-02-30")
        assert expr == DateExpr(FilterType.CREATED, ComparisonOp.EQ, "2025-02-30")

    def test_bare_at_is_error(self) -> None:
        with pytest.raises(QueryParseError, match="invalid filter"):
            parse_query("@")


class TestDateFilters:
    def test_created(self) -> None:
        assert parse_query("c:>=-7d") == DateExpr(FilterType.CREATED, ComparisonOp.GTE, "-7d")

    def test_modified_defaults_to_equals(self) -> None:
        expr = parse_query("m:2025-01-31")
        assert expr == DateExpr(FilterType.MODIFIED, ComparisonOp.EQ, "2025-01-31")

    @pytest.mark.parametrize("query", ["c:yesterday", "m:>7x", "c:", "m:2025-1-1"])
    def test_invalid_date_value(self, query: str) -> None:
        with pytest.raises(QueryParseError, match="invalid date value"):
            parse_query(query)


class TestTextLikeFilters:
    def test_fuzzy(self) -> None:
        assert parse_query("~tsk") == FuzzyExpr("tsk")

    def test_fuzzy_quoted(self) -> None:
        assert parse_query('~"pl tu"') == FuzzyExpr("pl tu")

    def test_empty_fuzzy_is_error(self) -> None:
        with pytest.raises(QueryParseError):
            parse_query("~")

    def test_ref(self) -> None:
        assert parse_query("ref:item_42") == RefExpr("item_42")

    def test_empty_ref_is_error(self) -> None:
        with pytest.raises(QueryParseError):
            parse_query("ref:")


class TestRelationshipFilters:
    def test_parent(self) -> None:
        assert parse_query("parent:project") == ParentExpr(TextExpr("project"))

    def test_ancestor(self) -> None:
        assert parse_query("parent*:project") == AncestorExpr(TextExpr("project"))

    def test_child_default_quantifier(self) -> None:
        assert parse_query("child:task") == ChildExpr(TextExpr("task"), Quantifier.SOME)

    def test_descendant(self) -> None:
        expr = parse_query("child*:@status=done")
        assert expr == DescendantExpr(AttributeExpr("status", ComparisonOp.EQ, "done"))

    def test_sibling(self) -> None:
        assert parse_query("sibling:~xy") == SiblingExpr(FuzzyExpr("xy"))

    def test_plus_sign_means_all(self) -> None:
        assert parse_query("+child:task") == ChildExpr(TextExpr("task"), Quantifier.ALL)

    def test_minus_sign_means_none(self) -> None:
        assert parse_query("-child:task") == ChildExpr(TextExpr("task"), Quantifier.NONE)

    def test_signed_ancestor(self) -> None:
        expr = parse_query("+parent*:project")
        assert expr == AncestorExpr(TextExpr("project"), Quantifier.ALL)

    def test_minus_parent_is_negation(self) -> None:
        assert parse_query("-parent:x") == NotExpr(ParentExpr(TextExpr("x")))

    def test_inner_filter(self) -> None:
        assert parse_query("parent:d:0") == ParentExpr(DepthExpr(ComparisonOp.EQ, 0))

    def test_inner_negation(self) -> None:
        expr = parse_query("child:-@done")
        assert expr == ChildExpr(NotExpr(AttributeExpr("done")))

    def test_inner_quoted_term(self) -> None:
        assert parse_query('child:"two words"') == ChildExpr(TextExpr("two words"))

    def test_nested_relationships(self) -> None:
        expr = parse_query("parent*:child:@status=todo")
        assert expr == AncestorExpr(ChildExpr(AttributeExpr("status", ComparisonOp.EQ, "todo")))

    def test_inner_word_starting_with_filter_letter(self) -> None:
        assert parse_query("child:done") == ChildExpr(TextExpr("done"))

    def test_empty_inner_is_error(self) -> None:
        with pytest.raises(QueryParseError, match="invalid filter: child:"):
            parse_query("child:")

    def test_inner_value_error_propagates(self) -> None:
        with pytest.raises(QueryParseError, match="invalid depth value"):
            parse_query("parent:d:x")

    def test_relationship_in_boolean_context(self) -> None:
        assert parse_query("task -child:done | @x") == OrExpr(
            AndExpr(TextExpr("task"), ChildExpr(TextExpr("done"), Quantifier.NONE)),
            AttributeExpr("x"),
        )


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class TestParseErrors:
    @pytest.mark.parametrize(
        ("query", "message"),
        [
            ("(a", "expected ')'"),
            ("a)", "unexpected ')'"),
            ("()", "empty parentheses"),
            ("a |", "missing operand after '|'"),
            ("a | | b", "missing operand after '|'"),
            ("a +", "missing operand after '+'"),
            ("-", "missing operand after '-'"),
            ("| a", "unexpected token: |"),
            ("+ a", "unexpected token: +"),
            ("((a)", "expected ')'"),
        ],
    )
    def test_syntax_errors(self, query: str, message: str) -> None:
        with pytest.raises(QueryParseError, match=re.escape(message)):
            parse_query(query)

    def test_error_carries_query_and_position(self) -> None:
        with pytest.raises(QueryParseError) as exc_info:
            parse_query("task d:oops")
        err = exc_info.value
        assert err.query == "task d:oops"
        assert err.position == 5
        assert err.fragment == "oops"

    def test_syntax_error_position(self) -> None:
        with pytest.raises(QueryParseError) as exc_info:
            parse_query("a b)")
        assert exc_info.value.position == 3

    def test_no_partial_result_on_late_error(self) -> None:
        # The valid prefix does not produce a result
        with pytest.raises(QueryParseError):
            parse_query("a b c d:x")


def test_parse_filter_direct() -> None:
    assert parse_filter("d:>1") == DepthExpr(ComparisonOp.GT, 1)
    with pytest.raises(QueryParseError):
        parse_filter("nonsense")
