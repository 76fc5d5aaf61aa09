"""Search an outline document with the query language."""

from __future__ import annotations

import io

import click
from rich.console import Console
from rich.markup import escape
from rich.text import Text

from outline_search.cli import Context, pass_context
from outline_search.commands import (
    EXIT_NO_RESULTS,
    EXIT_PARSE_ERROR,
    EXIT_SUCCESS,
    require_outline,
)
from outline_search.config import OUTPUT_FORMATS
from outline_search.exceptions import QueryParseError
from outline_search.formatter import (
    format_fields,
    format_json,
    format_jsonl,
    is_known_field,
    parse_fields,
)
from outline_search.model import Item
from outline_search.search.ast_nodes import (
    AndExpr,
    FilterExpr,
    FuzzyExpr,
    OrExpr,
    TextExpr,
)
from outline_search.search.evaluator import fuzzy_match
from outline_search.search.parser import parse_query
from outline_search.search.query import get_first_matching_item, get_matching_items
from outline_search.utils.output import (
    THEME,
    console,
    create_table,
    error,
    info,
    pager_print,
    verbose,
)


def parse_error_hint(e: QueryParseError) -> str | None:
    """Point at the offending fragment of the query, when known."""
    if e.position is None or e.query is None:
        return None
    return f"{escape(e.query)}\n        {' ' * e.position}^"


def _match_positions(expr: FilterExpr, text: str) -> set[int]:
    """Character positions in ``text`` matched by positive text/fuzzy terms.

    Terms under a negation or inside relationship filters are not
    highlighted.
    """
    if isinstance(expr, (AndExpr, OrExpr)):
        return _match_positions(expr.left, text) | _match_positions(expr.right, text)
    if isinstance(expr, FuzzyExpr) and fuzzy_match(expr.term, text):
        return set(expr.get_match_positions(text))
    if isinstance(expr, TextExpr) and expr.term:
        positions: set[int] = set()
        lowered = text.lower()
        term = expr.term.lower()
        start = lowered.find(term)
        while start != -1:
            positions.update(range(start, start + len(term)))
            start = lowered.find(term, start + 1)
        return positions
    return set()


def _styled_text(item: Item, expr: FilterExpr, highlight: bool) -> Text:
    rendered = Text(item.text, style="item.text")
    if highlight:
        for pos in sorted(_match_positions(expr, item.text)):
            rendered.stylize("match", pos, pos + 1)
    return rendered


@click.command("search")
@click.argument("query", nargs=-1)
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(list(OUTPUT_FORMATS)),
    default=None,
    help="Output format (default: search.default_format from config, else table)",
)
@click.option(
    "--fields",
    "-F",
    default=None,
    help="Comma-separated fields for fields/json/jsonl output. "
    "Available: id, text, attributes, created, modified, tags, depth, path, "
    "parent_id, children, attr:NAME",
)
@click.option(
    "--limit",
    "-l",
    type=click.IntRange(min=1),
    default=None,
    help="Limit number of results",
)
@click.option(
    "--first",
    is_flag=True,
    default=False,
    help="Only print the first match (depth-first order)",
)
@pass_context
def cli(
    ctx: Context,
    query: tuple[str, ...],
    output_format: str | None,
    fields: str | None,
    limit: int | None,
    first: bool,
) -> None:
    """Search outline items.

    QUERY is a search string. Multiple arguments are joined with spaces;
    an empty query lists every item. Put -- before a query argument that
    starts with '-' so it is not read as an option.

    \b
    Syntax examples:
      outline-search search meeting notes
      outline-search search '"exact phrase"'
      outline-search search '~prjct'
      outline-search search '@status=done | @status=wip'
      outline-search search 'task -@done d:>1'
      outline-search search '@due<=+7d'
      outline-search search 'c:>-7d'
      outline-search search '+child:@status=done'
      outline-search search 'parent*:project ref:item_42'

    \b
    Output formats:
      --format table   Rich table (default)
      --format text    One item per line with its parent path
      --format fields  Tab-separated --fields (for piping)
      --format json    JSON array
      --format jsonl   One JSON object per line
    """
    config = ctx.config
    output_format = output_format or (config.default_format if config else "table")
    field_list = parse_fields(fields)
    if not field_list and output_format == "fields" and config is not None:
        field_list = list(config.default_fields)
    for name in field_list:
        if not is_known_field(name):
            error(f"Unknown field: {name}", hint="Run 'outline-search search --help'")
            raise SystemExit(EXIT_PARSE_ERROR)

    query_string = " ".join(query)

    try:
        expr = parse_query(query_string)
    except QueryParseError as e:
        error(f"Invalid search query: {escape(str(e))}", hint=parse_error_hint(e))
        raise SystemExit(EXIT_PARSE_ERROR)

    verbose(f"Parsed query: {escape(str(expr))}")

    outline = require_outline(ctx)

    if first:
        found = get_first_matching_item(outline, expr)
        items = [found] if found is not None else []
    else:
        items = get_matching_items(outline, expr)
        if limit is not None:
            items = items[:limit]

    if not items:
        if not ctx.quiet:
            info(f"No results for: {escape(query_string)}")
        raise SystemExit(EXIT_NO_RESULTS)

    if output_format == "table":
        highlight = config.highlight_matches if config else True
        _print_table(items, expr, query_string, highlight, quiet=ctx.quiet)
    elif output_format == "text":
        _print_text(items)
    elif output_format == "fields":
        click.echo(format_fields(items, field_list))
    elif output_format == "json":
        click.echo(format_json(items, field_list))
    elif output_format == "jsonl":
        click.echo(format_jsonl(items, field_list))

    raise SystemExit(EXIT_SUCCESS)


def _print_table(
    items: list[Item],
    expr: FilterExpr,
    query_string: str,
    highlight: bool,
    *,
    quiet: bool = False,
) -> None:
    """Print results as a Rich table, using pager when appropriate."""
    if not quiet:
        info(f"Search: {escape(query_string) or '(all)'} ({len(items)} results)")

    table = create_table(show_header=True, header_style="bold")
    table.add_column("ID", style="item.id", no_wrap=True)
    table.add_column("Text")
    table.add_column("Path", style="path")
    table.add_column("Attributes", style="item.attr")

    for item in items:
        parents = " > ".join(p.text for p in item.ancestors()[::-1])
        attrs = " ".join(f"@{k}={v}" for k, v in item.metadata.attributes.items())
        table.add_row(
            Text(item.id),
            _styled_text(item, expr, highlight),
            Text(parents),
            Text(attrs),
        )

    buf = io.StringIO()
    render_console = Console(
        file=buf,
        theme=THEME,
        force_terminal=not console.no_color,
        width=max(console.width, 120),
        no_color=console.no_color,
    )
    render_console.print(table)

    # Table header = top border + header + header border
    pager_print(buf.getvalue(), header_lines=3)


def _print_text(items: list[Item]) -> None:
    """Print one line per item: its parent path, then its text."""
    for item in items:
        parents = [p.text for p in item.ancestors()[::-1]]
        click.echo(" > ".join(parents + [item.text]))
