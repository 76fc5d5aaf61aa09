"""Command discovery and registration."""

from __future__ import annotations

import importlib
import pkgutil
from typing import TYPE_CHECKING

import click

from outline_search.exceptions import OutlineError
from outline_search.storage import load_outline
from outline_search.utils.output import error

if TYPE_CHECKING:
    from collections.abc import Iterator

    from outline_search.cli import Context
    from outline_search.model import Outline

EXIT_SUCCESS = 0
EXIT_NO_RESULTS = 0
EXIT_PARSE_ERROR = 1
EXIT_OUTLINE_ERROR = 2


def discover_commands() -> Iterator[click.Command]:
    """Discover and yield all command objects from this package.

    Commands are discovered by scanning all modules in this package
    and looking for a 'cli' attribute that is a Click command.

    Yields:
        Click Command objects found in submodules.
    """
    import outline_search.commands as commands_pkg

    for module_info in pkgutil.iter_modules(commands_pkg.__path__):
        if module_info.name.startswith("_"):
            continue  # Skip private modules

        module = importlib.import_module(f"outline_search.commands.{module_info.name}")

        if hasattr(module, "cli"):
            cmd = getattr(module, "cli")
            if isinstance(cmd, click.Command):
                yield cmd


def require_outline(ctx: Context) -> Outline:
    """Load the outline selected by ``--outline`` or the config.

    Exits with EXIT_OUTLINE_ERROR when none is configured or it cannot be read.
    """
    if ctx.outline_path is None:
        error(
            "No outline document given",
            hint="Pass --outline PATH or set paths.outline in the config file",
        )
        raise SystemExit(EXIT_OUTLINE_ERROR)
    try:
        return load_outline(ctx.outline_path)
    except OutlineError as e:
        error(str(e))
        raise SystemExit(EXIT_OUTLINE_ERROR)
