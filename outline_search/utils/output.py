"""Rich console output helpers for outline-search."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import sys
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich.theme import Theme

# Module-level verbosity flag (set by cli.py after argument parsing)
_verbose_enabled: bool = False

# Module-level pager setting (None = auto, True = forced, False = disabled)
_pager_mode: bool | None = None

THEME = Theme(
    {
        "info": "cyan",
        "warning": "yellow",
        "error": "bold red",
        "success": "bold green",
        "path": "blue underline",
        "item.id": "dim",
        "item.text": "bold",
        "item.attr": "magenta",
        "match": "black on yellow",
    }
)

# Global console instances
console = Console(theme=THEME, stderr=False)
error_console = Console(theme=THEME, stderr=True)


def set_verbosity(*, verbose: bool = False, debug: bool = False) -> None:
    """Configure module-level verbosity flags.

    Called from the CLI entry point after argument parsing. Debug mode also
    routes library ``logging`` records to stderr.
    """
    global _verbose_enabled
    _verbose_enabled = verbose or debug  # debug implies verbose
    if debug:
        setup_logging(logging.DEBUG)


def setup_logging(level: int) -> None:
    """Send ``outline_search`` log records through a rich handler on stderr."""
    logger = logging.getLogger("outline_search")
    logger.setLevel(level)
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        logger.addHandler(RichHandler(console=error_console, show_path=False))


def set_color(enabled: bool) -> None:
    """Enable or disable color on both console instances."""
    console.no_color = not enabled
    error_console.no_color = not enabled


def set_pager(mode: bool | None) -> None:
    """Configure pager mode.

    Args:
        mode: True = always, False = never, None = auto (TTY + content > height).
    """
    global _pager_mode
    _pager_mode = mode


def _find_pager() -> list[str]:
    pager_env = os.environ.get("PAGER")
    if pager_env:
        return pager_env.split()
    return ["less", "-RFS"]


def pager_print(content: str, *, header_lines: int = 0) -> None:
    """Print content through a pager if appropriate.

    Pages only if stdout is a TTY and content exceeds the terminal height,
    unless the pager mode was forced either way.

    Args:
        content: ANSI-formatted string to display.
        header_lines: Number of header lines to keep sticky (for less --header).
    """
    lines = content.count("\n")
    term_height = shutil.get_terminal_size().lines

    use_pager = _pager_mode
    if use_pager is None:
        use_pager = sys.stdout.isatty() and lines > term_height

    if not use_pager:
        sys.stdout.write(content)
        sys.stdout.flush()
        return

    cmd = _find_pager()
    if cmd[0] == "less" and header_lines > 0:
        cmd.append(f"--header={header_lines}")

    try:
        env = os.environ.copy()
        env.setdefault("LESSCHARSET", "utf-8")
        proc = subprocess.Popen(
            cmd,
            stdin=subprocess.PIPE,
            encoding="utf-8",
            errors="replace",
            env=env,
        )
        proc.communicate(input=content)
    except (OSError, subprocess.SubprocessError):
        # Pager failed, fall back to direct output
        sys.stdout.write(content)
        sys.stdout.flush()


def info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]{message}[/info]")


def warning(message: str) -> None:
    """Print a warning message to stderr."""
    error_console.print(f"[warning]Warning:[/warning] {message}")


def error(message: str, hint: str | None = None) -> None:
    """Print an error message to stderr.

    Args:
        message: The error message.
        hint: Optional hint for resolution.
    """
    error_console.print(f"[error]Error:[/error] {message}")
    if hint:
        error_console.print(f"  [info]Hint:[/info] {hint}")


def success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{message}[/success]")


def verbose(message: str) -> None:
    """Print a message only when verbose mode is enabled."""
    if _verbose_enabled:
        console.print(f"[info]{message}[/info]")


def create_table(title: str | None = None, **kwargs: Any) -> Table:
    """Create a styled table.

    Args:
        title: Optional table title.
        **kwargs: Additional Table arguments.

    Returns:
        Rich Table instance.
    """
    return Table(title=title, **kwargs)

