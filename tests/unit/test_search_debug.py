"""Unit tests for query explanation helpers."""

from __future__ import annotations

import pytest

from outline_search.model import Outline
from outline_search.search.ast_nodes import AlwaysMatch, RegexExpr
from outline_search.search.dates import format_day
from outline_search.search.debug import (
    DebugInfo,
    debug_match,
    evaluate_with_reason,
    expression_string,
    format_debug_info,
)
from outline_search.search.parser import parse_query


class TestExpressionString:
    def test_leaf(self) -> None:
        assert expression_string(parse_query("d:>2")) == "depth(>2)"

    def test_nested(self) -> None:
        assert expression_string(parse_query("task -d:0")) == (
            "(and\n"
            '  text("task")\n'
            "  (not\n"
            "    depth(=0)\n"
            "  )\n"
            ")"
        )

    def test_or_inside_and(self) -> None:
        expr = parse_query("(a | b) c")
        assert expression_string(expr) == (
            '(and\n  (or\n    text("a")\n    text("b")\n  )\n  text("c")\n)'
        )

    def test_relationship_leaf_uses_compact_form(self) -> None:
        assert expression_string(parse_query("+child:@x")) == "child(all,attr(x))"
        assert expression_string(parse_query("parent*:p")) == 'ancestor(text("p"))'

    @pytest.mark.parametrize("query", ["", "a b | -c", "+child:x (d:1 | @k=v)"])
    def test_stable(self, query: str) -> None:
        first = expression_string(parse_query(query))
        assert expression_string(parse_query(query)) == first


class TestReasons:
    def test_text(self, sample_outline: Outline) -> None:
        item = sample_outline.find_item_by_id("t1")
        assert evaluate_with_reason(item, parse_query("draft")) == 'Text contains "draft"'
        assert evaluate_with_reason(item, parse_query("zzz")) == 'Text does not contain "zzz"'

    def test_depth(self, sample_outline: Outline) -> None:
        item = sample_outline.find_item_by_id("t1")
        assert evaluate_with_reason(item, parse_query("d:>1")) == "Depth 2 matches condition >1"
        assert (
            evaluate_with_reason(item, parse_query("d:0"))
            == "Depth 2 does not match condition =0"
        )

    def test_children(self, sample_outline: Outline) -> None:
        item = sample_outline.find_item_by_id("w1")
        reason = evaluate_with_reason(item, parse_query("children:>=3"))
        assert reason == "Has 2 children, does not match >=3"

    def test_attributes(self, sample_outline: Outline) -> None:
        item = sample_outline.find_item_by_id("t1")
        assert evaluate_with_reason(item, parse_query("@status")) == (
            'Has attribute "status" = "done"'
        )
        assert evaluate_with_reason(item, parse_query("@status=done")) == (
            'Attribute "status" = "done" (value: "done")'
        )
        assert evaluate_with_reason(item, parse_query("@status!=done")) == (
            'Attribute "status" = "done" does not match != "done"'
        )
        assert evaluate_with_reason(item, parse_query("@owner")) == 'No attribute "owner"'

    def test_no_attributes(self, sample_outline: Outline) -> None:
        item = sample_outline.find_item_by_id("c1")
        assert evaluate_with_reason(item, parse_query("@status")) == "No attributes defined"

    def test_dates(self, sample_outline: Outline) -> None:
        item = sample_outline.find_item_by_id("w1")
        day = format_day(item.metadata.created)
        assert evaluate_with_reason(item, parse_query("c:>2025-09-01")) == (
            f"Created date {day} matches >2025-09-01"
        )
        assert evaluate_with_reason(item, parse_query("c:<2025-09-01")) == (
            f"Created date {day} does not match <2025-09-01"
        )
        garden = sample_outline.find_item_by_id("g1")
        assert evaluate_with_reason(garden, parse_query("c:>-1d")) == "No created date"

    def test_parent(self, sample_outline: Outline) -> None:
        item = sample_outline.find_item_by_id("t1")
        assert evaluate_with_reason(item, parse_query("parent:website")) == (
            'Parent matches: Text contains "website"'
        )
        root = sample_outline.find_item_by_id("p1")
        assert evaluate_with_reason(root, parse_query("parent:x")) == "No parent"

    def test_ancestor(self, sample_outline: Outline) -> None:
        item = sample_outline.find_item_by_id("t1")
        assert evaluate_with_reason(item, parse_query("parent*:@type=project")) == (
            'Ancestor at level 2 matches: Attribute "type" = "project" (value: "project")'
        )
        assert evaluate_with_reason(item, parse_query("parent*:inbox")) == "No ancestor matches"
        root = sample_outline.find_item_by_id("p1")
        assert evaluate_with_reason(root, parse_query("+parent*:x")) == (
            "No ancestors (all trivially match)"
        )

    def test_quantified_children(self, sample_outline: Outline) -> None:
        item = sample_outline.find_item_by_id("w1")
        assert evaluate_with_reason(item, parse_query("+child:task")) == (
            '2 of 2 children match text("task"), all required'
        )
        assert evaluate_with_reason(item, parse_query("-child:draft")) == (
            '1 of 2 children match text("draft"), none allowed'
        )
        assert evaluate_with_reason(item, parse_query("child:review")) == (
            'Child matches: Text contains "review"'
        )
        assert evaluate_with_reason(item, parse_query("child:zzz")) == "No child matches"
        leaf = sample_outline.find_item_by_id("t1")
        assert evaluate_with_reason(leaf, parse_query("child:x")) == "No children"
        assert evaluate_with_reason(leaf, parse_query("sibling:review")) == (
            'Sibling matches: Text contains "review"'
        )

    def test_boolean(self, sample_outline: Outline) -> None:
        item = sample_outline.find_item_by_id("t1")
        assert evaluate_with_reason(item, parse_query("draft list")) == (
            'Both conditions match: Text contains "draft" AND Text contains "list"'
        )
        assert evaluate_with_reason(item, parse_query("zzz list")) == (
            'Left condition fails: Text does not contain "zzz"'
        )
        assert evaluate_with_reason(item, parse_query("draft zzz")) == (
            'Right condition fails: Text does not contain "zzz"'
        )
        assert evaluate_with_reason(item, parse_query("zzz | list")) == (
            'Right condition matches: Text contains "list"'
        )
        assert evaluate_with_reason(item, parse_query("-zzz")) == (
            'Condition is false (inverted): Text does not contain "zzz"'
        )

    def test_fuzzy_regex_ref_always(self, sample_outline: Outline) -> None:
        item = sample_outline.find_item_by_id("t2")
        assert evaluate_with_reason(item, parse_query("~rvw")) == (
            'Text fuzzy-matches "rvw" at [0, 2, 5]'
        )
        assert evaluate_with_reason(item, RegexExpr("^Review")) == "Text matches /^Review/"
        assert evaluate_with_reason(item, parse_query("ref:g1")) == "Links to [[g1]]"
        assert evaluate_with_reason(item, AlwaysMatch()) == "Empty query matches everything"


class TestDebugMatch:
    def test_matched_item(self, sample_outline: Outline) -> None:
        item = sample_outline.find_item_by_id("w1")
        info = debug_match(item, parse_query("website @status=active"))
        assert isinstance(info, DebugInfo)
        assert info.matched is True
        assert info.reason.startswith("Both conditions match")
        assert info.details["text"] == "Website redesign"
        assert info.details["depth"] == "1"
        assert info.details["children_count"] == "2"
        assert info.details["parent"] == "Projects"
        assert info.details["created"] == format_day(item.metadata.created)
        assert info.details["tags"] == "work"
        assert info.details["attributes"] == "status=active, due=2025-10-20"

    def test_root_item_details(self, sample_outline: Outline) -> None:
        info = debug_match(sample_outline.find_item_by_id("i1"), parse_query("task"))
        assert info.matched is False
        assert info.details["parent"] == "(root)"
        assert info.details["created"] == ""
        assert "tags" not in info.details
        assert "attributes" not in info.details

    def test_matched_flag_agrees_with_matches(self, sample_outline: Outline) -> None:
        expr = parse_query("(task | garden) -@status=done")
        for item in sample_outline.get_all_items():
            assert debug_match(item, expr).matched == expr.matches(item)

    def test_format(self, sample_outline: Outline) -> None:
        info = debug_match(sample_outline.find_item_by_id("c1"), parse_query("bob"))
        assert format_debug_info(info) == (
            "Item: Call Bob\n"
            "Matched: true\n"
            'Reason: Text contains "bob"\n'
            "\n"
            "Details:\n"
            "  text: Call Bob\n"
            "  depth: 1\n"
            "  children_count: 0\n"
            "  parent: Inbox\n"
            "  created: \n"
            "  modified: \n"
        )
