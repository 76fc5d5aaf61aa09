"""Run filter expressions over a whole outline."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from outline_search.search.parser import parse_query

if TYPE_CHECKING:
    from outline_search.model import Item, Outline
    from outline_search.search.ast_nodes import FilterExpr

logger = logging.getLogger(__name__)


def get_matching_items(outline: Outline, expr: FilterExpr) -> list[Item]:
    """Return every item matching ``expr`` in depth-first outline order."""
    matches = [item for item in outline.get_all_items() if expr.matches(item)]
    logger.debug("%s matched %d items", expr, len(matches))
    return matches


def get_first_matching_item(outline: Outline, expr: FilterExpr) -> Item | None:
    """Return the first item (depth-first) matching ``expr``, or None."""
    for item in outline.get_all_items():
        if expr.matches(item):
            return item
    return None


def get_all_by_query(outline: Outline, query: str) -> list[Item]:
    """Parse ``query`` and return all matching items.

    Raises:
        QueryParseError: If the query is malformed.
    """
    return get_matching_items(outline, parse_query(query))


def get_first_by_query(outline: Outline, query: str) -> Item | None:
    """Parse ``query`` and return the first matching item, or None.

    Raises:
        QueryParseError: If the query is malformed.
    """
    return get_first_matching_item(outline, parse_query(query))
