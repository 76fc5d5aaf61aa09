"""Configuration management for outline-search."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import tomli_w

from outline_search.exceptions import (
    ConfigParseError,
    ConfigValidationError,
)

OUTPUT_FORMATS: tuple[str, ...] = ("table", "text", "fields", "json", "jsonl")

DEFAULT_FIELDS: list[str] = ["id", "text", "attributes"]


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    return Path.home() / ".config" / "outline-search" / "config.toml"


@dataclass
class Config:
    """Application configuration.

    Attributes:
        outline: Default outline document for commands (None if unset).
        colored_output: Whether to use colored terminal output.
        highlight_matches: Highlight text and fuzzy matches in table output.
        default_format: Output format used when ``--format`` is not given.
        default_fields: Fields shown by the ``fields`` output format.
        config_path: Path where config was loaded from (None if defaults).
    """

    outline: Path | None = None
    colored_output: bool = True
    highlight_matches: bool = True
    default_format: str = "table"
    default_fields: list[str] = field(default_factory=lambda: list(DEFAULT_FIELDS))
    config_path: Path | None = None

    def validate(self) -> list[str]:
        """Validate configuration values.

        Returns:
            List of warning messages for non-fatal issues.

        Raises:
            ConfigValidationError: If a critical validation fails.
        """
        warnings: list[str] = []

        if self.outline is not None:
            self.outline = self.outline.expanduser().resolve()
            if not self.outline.exists():
                warnings.append(f"Outline not found: {self.outline}")

        if self.default_format not in OUTPUT_FORMATS:
            raise ConfigValidationError(
                "search.default_format",
                self.default_format,
                f"must be one of: {', '.join(OUTPUT_FORMATS)}",
            )

        if not self.default_fields:
            warnings.append("search.default_fields is empty, using id,text,attributes")
            self.default_fields = list(DEFAULT_FIELDS)

        return warnings


def load_config(config_path: Path | None = None) -> tuple[Config, list[str]]:
    """Load configuration from file or use defaults.

    Args:
        config_path: Explicit config file path. If None, uses default location.

    Returns:
        Tuple of (Config object, list of warning messages).

    Raises:
        ConfigParseError: If config file exists but has invalid syntax.
        ConfigValidationError: If config values are invalid.
    """
    warnings: list[str] = []

    if config_path is None:
        config_path = get_default_config_path()

    config_path = config_path.expanduser().resolve()

    if not config_path.exists():
        config = Config()
        warnings.append(
            f"No config file found at {config_path}. Using defaults. "
            f"Create config with: outline-search init-config"
        )
        return config, warnings + config.validate()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(config_path, str(e)) from e

    config = _parse_config_dict(data, config_path)
    return config, warnings + config.validate()


def _parse_fields(value: Any) -> list[str]:
    if isinstance(value, str):
        return [f.strip() for f in value.split(",") if f.strip()]
    if isinstance(value, list) and all(isinstance(f, str) for f in value):
        return [f.strip() for f in value if f.strip()]
    raise ConfigValidationError(
        "search.default_fields", value, "must be a comma-separated string or list of strings"
    )


def _parse_config_dict(data: dict[str, Any], config_path: Path) -> Config:
    """Parse configuration dictionary into Config object."""
    config = Config(config_path=config_path)

    # Parse [paths] section
    paths = data.get("paths", {})
    if "outline" in paths:
        value = paths["outline"]
        if not isinstance(value, str):
            raise ConfigValidationError("paths.outline", value, "must be a string path")
        config.outline = Path(value)

    # Parse [display] section
    display = data.get("display", {})
    if "colored_output" in display:
        value = display["colored_output"]
        if not isinstance(value, bool):
            raise ConfigValidationError("display.colored_output", value, "must be a boolean")
        config.colored_output = value

    if "highlight_matches" in display:
        value = display["highlight_matches"]
        if not isinstance(value, bool):
            raise ConfigValidationError("display.highlight_matches", value, "must be a boolean")
        config.highlight_matches = value

    # Parse [search] section
    search = data.get("search", {})
    if "default_format" in search:
        value = search["default_format"]
        if not isinstance(value, str):
            raise ConfigValidationError("search.default_format", value, "must be a string")
        config.default_format = value

    if "default_fields" in search:
        config.default_fields = _parse_fields(search["default_fields"])

    return config


def save_config(config: Config, config_path: Path | None = None) -> None:
    """Save configuration to file.

    Args:
        config: Configuration to save.
        config_path: Path to save to. If None, uses config.config_path or default.
    """
    if config_path is None:
        config_path = config.config_path or get_default_config_path()

    config_path = config_path.expanduser().resolve()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    data: dict[str, Any] = {
        "display": {
            "colored_output": config.colored_output,
            "highlight_matches": config.highlight_matches,
        },
        "search": {
            "default_format": config.default_format,
            "default_fields": ",".join(config.default_fields),
        },
    }

    if config.outline is not None:
        data["paths"] = {"outline": str(config.outline)}

    with open(config_path, "wb") as f:
        tomli_w.dump(data, f)
