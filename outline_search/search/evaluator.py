"""Evaluate filter expressions against outline items.

Evaluation is a pure read of the item graph. Missing data (no such
attribute, unset timestamp, unparsable stored date) resolves to a boolean
instead of raising.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from outline_search.links import parse_links
from outline_search.search import dates
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
    FilterExpr,
    FilterType,
    FuzzyExpr,
    NotExpr,
    OrExpr,
    ParentExpr,
    Quantifier,
    RefExpr,
    RegexExpr,
    SiblingExpr,
    TextExpr,
)
from outline_search.search.dates import ComparisonOp

if TYPE_CHECKING:
    from outline_search.model import Item


def fuzzy_match(term: str, text: str) -> bool:
    """Greedy case-insensitive subsequence test."""
    lowered = text.lower()
    start = 0
    for ch in term.lower():
        idx = lowered.find(ch, start)
        if idx == -1:
            return False
        start = idx + 1
    return True


def _quantify(
    inner: FilterExpr,
    candidates: Iterable[Item],
    quantifier: Quantifier,
    *,
    empty_all: bool,
) -> bool:
    """Apply ``quantifier`` to ``inner`` over ``candidates``.

    ``empty_all`` is the result of ALL over an empty candidate set: true
    for ancestors, false for children, descendants and siblings.
    """
    members = list(candidates)
    if quantifier is Quantifier.SOME:
        return any(inner.matches(m) for m in members)
    if quantifier is Quantifier.ALL:
        if not members:
            return empty_all
        return all(inner.matches(m) for m in members)
    if quantifier is Quantifier.NONE:
        return not any(inner.matches(m) for m in members)
    return False


def _attribute_matches(expr: AttributeExpr, item: Item) -> bool:
    attributes = item.metadata.attributes if item.metadata else {}
    exists = expr.key in attributes
    if expr.op is None:
        return exists
    if not exists:
        return expr.op is ComparisonOp.NEQ
    if expr.op is ComparisonOp.EQ:
        return attributes[expr.key] == expr.value
    if expr.op is ComparisonOp.NEQ:
        return attributes[expr.key] != expr.value
    return False


def _attribute_date_matches(expr: AttributeDateExpr, item: Item) -> bool:
    attributes = item.metadata.attributes if item.metadata else {}
    stored = attributes.get(expr.key)
    if stored is None:
        return False
    reference = dates.now()
    stored_date = dates.parse_stored_date(stored, reference)
    if stored_date is None:
        return False
    compare_date = dates.resolve_date(expr.value, reference)
    if compare_date is None:
        return False
    return dates.compare_dates(stored_date, expr.op, compare_date)


def _date_matches(expr: DateExpr, item: Item) -> bool:
    if item.metadata is None:
        return False
    if expr.filter_type is FilterType.CREATED:
        target = item.metadata.created
    else:
        target = item.metadata.modified
    if target is None:
        return False
    compare_date = dates.resolve_date(expr.value, dates.now())
    if compare_date is None:
        return False
    return dates.compare_dates(target, expr.op, compare_date)


def evaluate(expr: FilterExpr, item: Item) -> bool:
    """Return whether ``item`` satisfies ``expr``.

    Raises:
        TypeError: If ``expr`` is not a known filter expression node.
    """
    if isinstance(expr, AndExpr):
        return expr.left.matches(item) and expr.right.matches(item)
    if isinstance(expr, OrExpr):
        return expr.left.matches(item) or expr.right.matches(item)
    if isinstance(expr, NotExpr):
        return not expr.expr.matches(item)
    if isinstance(expr, AlwaysMatch):
        return True

    if isinstance(expr, TextExpr):
        return expr.term.lower() in item.text.lower()
    if isinstance(expr, FuzzyExpr):
        return fuzzy_match(expr.term, item.text)
    if isinstance(expr, RegexExpr):
        return expr.compiled.search(item.text) is not None
    if isinstance(expr, RefExpr):
        return any(link.id == expr.target_id for link in parse_links(item.text))

    if isinstance(expr, AttributeExpr):
        return _attribute_matches(expr, item)
    if isinstance(expr, AttributeDateExpr):
        return _attribute_date_matches(expr, item)
    if isinstance(expr, DateExpr):
        return _date_matches(expr, item)
    if isinstance(expr, DepthExpr):
        return dates.compare(item.depth, expr.op, expr.value)
    if isinstance(expr, ChildrenExpr):
        return dates.compare(len(item.children), expr.op, expr.value)

    if isinstance(expr, ParentExpr):
        return item.parent is not None and expr.inner.matches(item.parent)
    if isinstance(expr, AncestorExpr):
        return _quantify(expr.inner, item.ancestors(), expr.quantifier, empty_all=True)
    if isinstance(expr, ChildExpr):
        return _quantify(expr.inner, item.children, expr.quantifier, empty_all=False)
    if isinstance(expr, DescendantExpr):
        return _quantify(expr.inner, item.descendants(), expr.quantifier, empty_all=False)
    if isinstance(expr, SiblingExpr):
        return _quantify(expr.inner, item.siblings(), expr.quantifier, empty_all=False)

    raise TypeError(f"Unknown filter expression: {expr!r}")
