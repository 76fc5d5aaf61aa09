"""Search query language: parsing, filter expressions and evaluation."""

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
from outline_search.search.debug import (
    DebugInfo,
    debug_match,
    expression_string,
    format_debug_info,
)
from outline_search.search.parser import parse_query
from outline_search.search.query import (
    get_all_by_query,
    get_first_by_query,
    get_first_matching_item,
    get_matching_items,
)

__all__ = [
    "AlwaysMatch",
    "AncestorExpr",
    "AndExpr",
    "AttributeDateExpr",
    "AttributeExpr",
    "ChildExpr",
    "ChildrenExpr",
    "ComparisonOp",
    "DateExpr",
    "DebugInfo",
    "DepthExpr",
    "DescendantExpr",
    "FilterExpr",
    "FilterType",
    "FuzzyExpr",
    "NotExpr",
    "OrExpr",
    "ParentExpr",
    "Quantifier",
    "QueryParseError",
    "RefExpr",
    "RegexExpr",
    "SiblingExpr",
    "TextExpr",
    "debug_match",
    "expression_string",
    "format_debug_info",
    "get_all_by_query",
    "get_first_by_query",
    "get_first_matching_item",
    "get_matching_items",
    "parse_query",
]
