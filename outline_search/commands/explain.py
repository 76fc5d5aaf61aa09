"""Show how a query is parsed and why items match."""

from __future__ import annotations

import click
from rich.markup import escape

from outline_search.cli import Context, pass_context
from outline_search.commands import (
    EXIT_OUTLINE_ERROR,
    EXIT_PARSE_ERROR,
    EXIT_SUCCESS,
    require_outline,
)
from outline_search.commands.search import parse_error_hint
from outline_search.exceptions import QueryParseError
from outline_search.search.debug import debug_match, expression_string, format_debug_info
from outline_search.search.parser import parse_query
from outline_search.search.query import get_matching_items
from outline_search.utils.output import error, info, pager_print


@click.command("explain")
@click.argument("query", nargs=-1)
@click.option(
    "--item",
    "-i",
    "item_id",
    default=None,
    help="Explain the result for the item with this ID",
)
@click.option(
    "--all",
    "-a",
    "all_items",
    is_flag=True,
    default=False,
    help="Explain the result for every item, matching or not",
)
@pass_context
def cli(
    ctx: Context,
    query: tuple[str, ...],
    item_id: str | None,
    all_items: bool,
) -> None:
    """Print the parsed form of a query and explain matches.

    Always prints the expression tree. When an outline is available the
    matching items are explained too; use --item to explain a single item
    (matching or not) or --all to explain every item.

    \b
    Examples:
      outline-search explain 'task -@done'
      outline-search explain -- -@done
      outline-search explain '+child:@status=done' --item item_42
      outline-search --outline notes.json explain 'd:>1' --all
    """
    query_string = " ".join(query)

    try:
        expr = parse_query(query_string)
    except QueryParseError as e:
        error(f"Invalid search query: {escape(str(e))}", hint=parse_error_hint(e))
        raise SystemExit(EXIT_PARSE_ERROR)

    click.echo(expression_string(expr))

    if ctx.outline_path is None and item_id is None and not all_items:
        raise SystemExit(EXIT_SUCCESS)

    outline = require_outline(ctx)

    if item_id is not None:
        item = outline.find_item_by_id(item_id)
        if item is None:
            error(f"Item not found: {escape(item_id)}")
            raise SystemExit(EXIT_OUTLINE_ERROR)
        items = [item]
    elif all_items:
        items = outline.get_all_items()
    else:
        items = get_matching_items(outline, expr)
        if not items:
            if not ctx.quiet:
                info("No matching items")
            raise SystemExit(EXIT_SUCCESS)

    reports = [format_debug_info(debug_match(item, expr)) for item in items]
    pager_print("\n" + "\n".join(reports))

    raise SystemExit(EXIT_SUCCESS)
