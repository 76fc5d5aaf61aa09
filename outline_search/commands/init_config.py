"""Initialize configuration file for outline-search."""

from __future__ import annotations

from importlib import resources
from pathlib import Path

import click

from outline_search.cli import Context, pass_context
from outline_search.config import Config, get_default_config_path, save_config
from outline_search.utils.output import error, info, success


def _load_example_config() -> str:
    """Load the example configuration from package data."""
    return resources.files("outline_search").joinpath("config.example.toml").read_text()


@click.command("init-config")
@click.option(
    "--force",
    "-f",
    is_flag=True,
    default=False,
    help="Overwrite existing config file",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    default=None,
    help="Output path for config file (default: ~/.config/outline-search/config.toml)",
)
@click.option(
    "--outline",
    type=click.Path(path_type=Path),
    default=None,
    help="Write a default config with paths.outline set to this outline",
)
@pass_context
def cli(ctx: Context, force: bool, output: Path | None, outline: Path | None) -> None:
    """Create a new configuration file with default settings.

    Creates a configuration file at the default location
    (~/.config/outline-search/config.toml) or at a custom path
    specified with --output.

    Examples:

    \b
      # Create config at default location
      outline-search init-config

    \b
      # Create config at custom location
      outline-search init-config --output ./my-config.toml

    \b
      # Overwrite existing config
      outline-search init-config --force

    \b
      # Point the config at an outline
      outline-search init-config --outline ~/notes/outline.json
    """
    config_path = output if output is not None else get_default_config_path()
    config_path = config_path.expanduser().resolve()

    if config_path.exists() and not force:
        error(
            f"Config file already exists: {config_path}",
            hint="Use --force to overwrite",
        )
        raise SystemExit(1)

    try:
        if outline is not None:
            save_config(Config(outline=outline.expanduser().resolve()), config_path)
        else:
            config_path.parent.mkdir(parents=True, exist_ok=True)
            config_path.write_text(_load_example_config())
    except OSError as e:
        error(f"Failed to write config file: {e}")
        raise SystemExit(1)

    success(f"Created config file: {config_path}")
    if outline is None and not ctx.quiet:
        info("Set paths.outline to search an outline without passing --outline.")
