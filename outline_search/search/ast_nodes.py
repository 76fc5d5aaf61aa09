"""Filter expression tree for parsed search queries.

Every node is an immutable dataclass. ``expr.matches(item)`` evaluates the
tree against an outline item (see :mod:`outline_search.search.evaluator`)
and ``str(expr)`` renders a compact debug form.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from outline_search.exceptions import QueryParseError
from outline_search.search.dates import ComparisonOp, is_date_literal

if TYPE_CHECKING:
    from outline_search.model import Item


class Quantifier(Enum):
    """How many related items must satisfy an inner filter."""

    SOME = "some"
    ALL = "all"
    NONE = "none"

    def __str__(self) -> str:
        return self.value


class FilterType(Enum):
    """Which item timestamp a date filter compares."""

    CREATED = "created"
    MODIFIED = "modified"


class FilterExpr:
    """Base class of all filter expression nodes."""

    def matches(self, item: Item) -> bool:
        """Return whether ``item`` satisfies this expression."""
        from outline_search.search.evaluator import evaluate

        return evaluate(self, item)


@dataclass(frozen=True)
class AlwaysMatch(FilterExpr):
    """Matches every item (the empty query)."""

    def __str__(self) -> str:
        return "always-match"


@dataclass(frozen=True)
class TextExpr(FilterExpr):
    """Case-insensitive substring match on item text."""

    term: str

    def __str__(self) -> str:
        return f'text("{self.term.lower()}")'


@dataclass(frozen=True)
class FuzzyExpr(FilterExpr):
    """Case-insensitive subsequence match on item text (``~term``)."""

    term: str

    def get_match_positions(self, text: str) -> list[int]:
        """Indices in ``text`` consumed by the greedy subsequence scan.

        Uses the same left-to-right scan as matching, so the result is only
        complete when the expression matches ``text``.
        """
        positions: list[int] = []
        lowered = text.lower()
        start = 0
        for ch in self.term.lower():
            idx = lowered.find(ch, start)
            if idx == -1:
                break
            positions.append(idx)
            start = idx + 1
        return positions

    def __str__(self) -> str:
        return f'fuzzy("{self.term.lower()}")'


@dataclass(frozen=True)
class RegexExpr(FilterExpr):
    """Regular expression search on item text.

    Raises:
        QueryParseError: If ``pattern`` does not compile.
    """

    pattern: str
    compiled: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        try:
            compiled = re.compile(self.pattern)
        except re.error as e:
            raise QueryParseError(f"invalid regex pattern: {e}", fragment=self.pattern) from e
        object.__setattr__(self, "compiled", compiled)

    def __str__(self) -> str:
        return f"regex(/{self.pattern}/)"


@dataclass(frozen=True)
class RefExpr(FilterExpr):
    """Matches items whose text links to ``target_id`` via ``[[id]]``."""

    target_id: str

    def __str__(self) -> str:
        return f"ref({self.target_id})"


@dataclass(frozen=True)
class AttributeExpr(FilterExpr):
    """Attribute existence (``op`` is None) or string (in)equality."""

    key: str
    op: ComparisonOp | None = None
    value: str = ""

    def __post_init__(self) -> None:
        if self.op not in (None, ComparisonOp.EQ, ComparisonOp.NEQ):
            raise QueryParseError(
                f"operator {self.op} needs a date value for attribute {self.key}: {self.value!r}",
                fragment=f"@{self.key}{self.op}{self.value}",
            )

    def __str__(self) -> str:
        if self.op is None:
            return f"attr({self.key})"
        return f"attr({self.key}{self.op}{self.value})"


@dataclass(frozen=True)
class AttributeDateExpr(FilterExpr):
    """Compares an attribute holding a date against a date literal."""

    key: str
    op: ComparisonOp
    value: str

    def __post_init__(self) -> None:
        if not is_date_literal(self.value):
            raise QueryParseError(
                f"invalid date value for attribute filter: {self.value}",
                fragment=self.value,
            )

    def __str__(self) -> str:
        return f"attr({self.key}{self.op}{self.value})"


@dataclass(frozen=True)
class DateExpr(FilterExpr):
    """Compares an item's created or modified timestamp (``c:``/``m:``)."""

    filter_type: FilterType
    op: ComparisonOp
    value: str

    def __post_init__(self) -> None:
        if not is_date_literal(self.value):
            raise QueryParseError(f"invalid date value: {self.value}", fragment=self.value)

    def __str__(self) -> str:
        return f"{self.filter_type.value}({self.op}{self.value})"


@dataclass(frozen=True)
class DepthExpr(FilterExpr):
    """Compares the item's distance from the forest root."""

    op: ComparisonOp
    value: int

    def __str__(self) -> str:
        return f"depth({self.op}{self.value})"


@dataclass(frozen=True)
class ChildrenExpr(FilterExpr):
    """Compares the number of direct children."""

    op: ComparisonOp
    value: int

    def __str__(self) -> str:
        return f"children({self.op}{self.value})"


@dataclass(frozen=True)
class ParentExpr(FilterExpr):
    """Matches when the immediate parent matches ``inner``."""

    inner: FilterExpr

    def __str__(self) -> str:
        return f"parent({self.inner})"


@dataclass(frozen=True)
class AncestorExpr(FilterExpr):
    """Quantified match over the parent chain (``parent*:``).

    ``ALL`` is vacuously true for root items.
    """

    inner: FilterExpr
    quantifier: Quantifier = Quantifier.SOME

    def __str__(self) -> str:
        if self.quantifier is Quantifier.SOME:
            return f"ancestor({self.inner})"
        return f"ancestor({self.quantifier},{self.inner})"


@dataclass(frozen=True)
class ChildExpr(FilterExpr):
    """Quantified match over direct children (``child:``)."""

    inner: FilterExpr
    quantifier: Quantifier = Quantifier.SOME

    def __str__(self) -> str:
        return f"child({self.quantifier},{self.inner})"


@dataclass(frozen=True)
class DescendantExpr(FilterExpr):
    """Quantified match over the whole subtree (``child*:``)."""

    inner: FilterExpr
    quantifier: Quantifier = Quantifier.SOME

    def __str__(self) -> str:
        return f"descendant({self.quantifier},{self.inner})"


@dataclass(frozen=True)
class SiblingExpr(FilterExpr):
    """Quantified match over same-parent items, excluding the item itself."""

    inner: FilterExpr
    quantifier: Quantifier = Quantifier.SOME

    def __str__(self) -> str:
        return f"sibling({self.quantifier},{self.inner})"


@dataclass(frozen=True)
class AndExpr(FilterExpr):
    left: FilterExpr
    right: FilterExpr

    def __str__(self) -> str:
        return f"(and {self.left} {self.right})"


@dataclass(frozen=True)
class OrExpr(FilterExpr):
    left: FilterExpr
    right: FilterExpr

    def __str__(self) -> str:
        return f"(or {self.left} {self.right})"


@dataclass(frozen=True)
class NotExpr(FilterExpr):
    expr: FilterExpr

    def __str__(self) -> str:
        return f"(not {self.expr})"


# Relationship filters that carry a quantifier
QuantifiedExpr = AncestorExpr | ChildExpr | DescendantExpr | SiblingExpr
