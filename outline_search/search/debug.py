"""Explain why a query does or does not match an item.

Nothing here affects matching; it narrates the same evaluation for
``outline-search explain`` and for troubleshooting queries.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

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
from outline_search.search.dates import format_day

if TYPE_CHECKING:
    from outline_search.model import Item

_INDENT = "  "


def expression_string(expr: FilterExpr, indent: int = 0) -> str:
    """Pretty-print an expression tree, one boolean operator per level.

    Example output for ``task -d:0``::

        (and
          text("task")
          (not
            depth(=0)
          )
        )
    """
    pad = _INDENT * indent
    if isinstance(expr, (AndExpr, OrExpr)):
        name = "and" if isinstance(expr, AndExpr) else "or"
        left = expression_string(expr.left, indent + 1)
        right = expression_string(expr.right, indent + 1)
        return f"{pad}({name}\n{left}\n{right}\n{pad})"
    if isinstance(expr, NotExpr):
        inner = expression_string(expr.expr, indent + 1)
        return f"{pad}(not\n{inner}\n{pad})"
    return pad + str(expr)


@dataclass
class DebugInfo:
    """Outcome of matching one item against one expression."""

    item: Item
    expr: FilterExpr
    matched: bool
    reason: str
    details: dict[str, str] = field(default_factory=dict)


def debug_match(item: Item, expr: FilterExpr) -> DebugInfo:
    """Evaluate ``expr`` on ``item`` and explain the result."""
    info = DebugInfo(
        item=item,
        expr=expr,
        matched=expr.matches(item),
        reason=evaluate_with_reason(item, expr),
    )
    _add_item_details(item, info)
    return info


def _relation_reason(
    name: str,
    inner: FilterExpr,
    quantifier: Quantifier,
    candidates: list[Item],
) -> str:
    plural = "children" if name == "child" else f"{name}s"
    if not candidates:
        return f"No {plural}"
    hits = [c for c in candidates if inner.matches(c)]
    if quantifier is Quantifier.ALL:
        return f"{len(hits)} of {len(candidates)} {plural} match {inner}, all required"
    if quantifier is Quantifier.NONE:
        return f"{len(hits)} of {len(candidates)} {plural} match {inner}, none allowed"
    if hits:
        return f"{name.capitalize()} matches: {evaluate_with_reason(hits[0], inner)}"
    return f"No {name} matches"


def evaluate_with_reason(item: Item, expr: FilterExpr) -> str:
    """Describe the outcome of ``expr`` on ``item`` in one line."""
    if isinstance(expr, AlwaysMatch):
        return "Empty query matches everything"

    if isinstance(expr, TextExpr):
        if expr.matches(item):
            return f'Text contains "{expr.term}"'
        return f'Text does not contain "{expr.term}"'

    if isinstance(expr, FuzzyExpr):
        if expr.matches(item):
            positions = expr.get_match_positions(item.text)
            return f'Text fuzzy-matches "{expr.term}" at {positions}'
        return f'Text does not fuzzy-match "{expr.term}"'

    if isinstance(expr, RegexExpr):
        if expr.matches(item):
            return f"Text matches /{expr.pattern}/"
        return f"Text does not match /{expr.pattern}/"

    if isinstance(expr, RefExpr):
        if expr.matches(item):
            return f"Links to [[{expr.target_id}]]"
        return f"No link to [[{expr.target_id}]]"

    if isinstance(expr, DepthExpr):
        verdict = "matches" if expr.matches(item) else "does not match"
        return f"Depth {item.depth} {verdict} condition {expr.op}{expr.value}"

    if isinstance(expr, ChildrenExpr):
        verdict = "matches" if expr.matches(item) else "does not match"
        return f"Has {len(item.children)} children, {verdict} {expr.op}{expr.value}"

    if isinstance(expr, (AttributeExpr, AttributeDateExpr)):
        attributes = item.metadata.attributes
        if not attributes:
            return "No attributes defined"
        if expr.key not in attributes:
            return f'No attribute "{expr.key}"'
        stored = attributes[expr.key]
        if isinstance(expr, AttributeExpr) and expr.op is None:
            return f'Has attribute "{expr.key}" = "{stored}"'
        if expr.matches(item):
            return f'Attribute "{expr.key}" {expr.op} "{expr.value}" (value: "{stored}")'
        return f'Attribute "{expr.key}" = "{stored}" does not match {expr.op} "{expr.value}"'

    if isinstance(expr, DateExpr):
        if expr.filter_type is FilterType.CREATED:
            stamp = item.metadata.created
        else:
            stamp = item.metadata.modified
        name = expr.filter_type.value
        if stamp is None:
            return f"No {name} date"
        verdict = "matches" if expr.matches(item) else "does not match"
        return f"{name.capitalize()} date {format_day(stamp)} {verdict} {expr.op}{expr.value}"

    if isinstance(expr, ParentExpr):
        if item.parent is None:
            return "No parent"
        return f"Parent matches: {evaluate_with_reason(item.parent, expr.inner)}"

    if isinstance(expr, AncestorExpr):
        ancestors = item.ancestors()
        if expr.quantifier is Quantifier.SOME:
            for level, ancestor in enumerate(ancestors, start=1):
                if expr.inner.matches(ancestor):
                    reason = evaluate_with_reason(ancestor, expr.inner)
                    return f"Ancestor at level {level} matches: {reason}"
            return "No ancestor matches"
        if not ancestors and expr.quantifier is Quantifier.ALL:
            return "No ancestors (all trivially match)"
        return _relation_reason("ancestor", expr.inner, expr.quantifier, ancestors)

    if isinstance(expr, ChildExpr):
        return _relation_reason("child", expr.inner, expr.quantifier, item.children)
    if isinstance(expr, DescendantExpr):
        return _relation_reason("descendant", expr.inner, expr.quantifier, item.descendants())
    if isinstance(expr, SiblingExpr):
        return _relation_reason("sibling", expr.inner, expr.quantifier, item.siblings())

    if isinstance(expr, AndExpr):
        left_match = expr.left.matches(item)
        right_match = expr.right.matches(item)
        if left_match and right_match:
            return (
                f"Both conditions match: {evaluate_with_reason(item, expr.left)}"
                f" AND {evaluate_with_reason(item, expr.right)}"
            )
        if not left_match:
            return f"Left condition fails: {evaluate_with_reason(item, expr.left)}"
        return f"Right condition fails: {evaluate_with_reason(item, expr.right)}"

    if isinstance(expr, OrExpr):
        if expr.left.matches(item):
            return f"Left condition matches: {evaluate_with_reason(item, expr.left)}"
        if expr.right.matches(item):
            return f"Right condition matches: {evaluate_with_reason(item, expr.right)}"
        return (
            f"Neither condition matches: {evaluate_with_reason(item, expr.left)}"
            f" OR {evaluate_with_reason(item, expr.right)}"
        )

    if isinstance(expr, NotExpr):
        if expr.expr.matches(item):
            return f"Condition is true (inverted): {evaluate_with_reason(item, expr.expr)}"
        return f"Condition is false (inverted): {evaluate_with_reason(item, expr.expr)}"

    return str(expr)


def _add_item_details(item: Item, info: DebugInfo) -> None:
    details = info.details
    details["text"] = item.text
    details["depth"] = str(item.depth)
    details["children_count"] = str(len(item.children))
    details["parent"] = item.parent.text if item.parent is not None else "(root)"

    metadata = item.metadata
    details["created"] = format_day(metadata.created)
    details["modified"] = format_day(metadata.modified)
    if metadata.tags:
        details["tags"] = ", ".join(metadata.tags)
    if metadata.attributes:
        details["attributes"] = ", ".join(f"{k}={v}" for k, v in metadata.attributes.items())


def format_debug_info(info: DebugInfo) -> str:
    """Render a :class:`DebugInfo` as a multi-line report."""
    lines = [
        f"Item: {info.item.text}",
        f"Matched: {'true' if info.matched else 'false'}",
        f"Reason: {info.reason}",
    ]
    if info.details:
        lines.append("")
        lines.append("Details:")
        lines.extend(f"  {key}: {value}" for key, value in info.details.items())
    return "\n".join(lines) + "\n"
