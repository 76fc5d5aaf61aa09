"""Command-line interface for outline-search."""

from __future__ import annotations

import os
from pathlib import Path

import click

from outline_search import __version__
from outline_search.config import Config, load_config
from outline_search.exceptions import ConfigError
from outline_search.utils.output import (
    error,
    set_color,
    set_pager,
    set_verbosity,
    warning,
)


class Context:
    """Shared context for all commands."""

    def __init__(self) -> None:
        self.config: Config | None = None
        self.outline_path: Path | None = None
        self.verbose: bool = False
        self.debug: bool = False
        self.quiet: bool = False
        self.pager: bool | None = None  # None = auto


pass_context = click.make_pass_decorator(Context, ensure=True)


@click.group()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=False, path_type=Path),
    help="Path to config file (default: ~/.config/outline-search/config.toml)",
)
@click.option(
    "--outline",
    "-O",
    type=click.Path(exists=False, dir_okay=False, path_type=Path),
    help="Outline document to search (overrides config)",
)
@click.option(
    "--no-color",
    is_flag=True,
    default=False,
    help="Disable colored output",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    default=False,
    help="Enable verbose output",
)
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug output (implies --verbose)",
)
@click.option(
    "--quiet",
    "-q",
    is_flag=True,
    default=False,
    help="Suppress non-error output",
)
@click.option(
    "--pager/--no-pager",
    default=None,
    help="Force pager on/off (default: auto-detect)",
)
@click.version_option(version=__version__, prog_name="outline-search")
@click.pass_context
def cli(
    ctx: click.Context,
    config: Path | None,
    outline: Path | None,
    no_color: bool,
    verbose: bool,
    debug: bool,
    quiet: bool,
    pager: bool | None,
) -> None:
    """outline-search: Query outline documents from the command line.

    Runs the outliner's search language (text, fuzzy, attribute, date and
    relationship filters combined with |, + and -) over an outline file.

    Configuration is loaded from ~/.config/outline-search/config.toml by default.
    Use --config to specify an alternative configuration file.

    Examples:

        # Open tasks below a project
        outline-search search 'task -@status=done parent*:project'

        # Show how a query is parsed
        outline-search explain '(task | todo) d:>0'
    """
    ctx.ensure_object(Context)
    app_ctx = ctx.obj
    app_ctx.verbose = verbose or debug
    app_ctx.debug = debug
    app_ctx.quiet = quiet
    app_ctx.pager = pager

    set_verbosity(verbose=verbose, debug=debug)
    set_pager(pager)

    # Color is disabled by --no-color, NO_COLOR env, or config
    disable_color = no_color or os.environ.get("NO_COLOR") is not None
    if disable_color:
        set_color(False)

    try:
        loaded_config, warnings = load_config(config)
    except ConfigError as e:
        error(str(e))
        ctx.exit(1)
        return

    app_ctx.config = loaded_config
    app_ctx.outline_path = (
        outline.expanduser().resolve() if outline is not None else loaded_config.outline
    )

    if not disable_color and not loaded_config.colored_output:
        set_color(False)

    if not quiet:
        for warn in warnings:
            warning(warn)


@cli.command("help")
@click.argument("command", required=False, nargs=-1)
@click.pass_context
def help_cmd(ctx: click.Context, command: tuple[str, ...]) -> None:
    """Show help for a command."""
    group = cli
    for name in command:
        cmd = group.get_command(ctx, name)
        if cmd is None:
            error(f"Unknown command: {name}")
            ctx.exit(1)
            return
        if isinstance(cmd, click.Group):
            group = cmd
        else:
            click.echo(cmd.get_help(ctx))
            return
    click.echo(group.get_help(ctx))


def register_commands() -> None:
    """Register all commands from the commands package."""
    from outline_search.commands import discover_commands

    for command in discover_commands():
        cli.add_command(command)


# Register commands on import
register_commands()
