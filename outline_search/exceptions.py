"""Exception hierarchy for outline-search."""

from pathlib import Path


class OutlineSearchError(Exception):
    """Base exception for all outline-search errors.

    All exceptions in this package inherit from this class,
    allowing callers to catch all outline-search errors with
    a single except clause.
    """

    pass


# Configuration Errors
class ConfigError(OutlineSearchError):
    """Configuration-related errors."""

    pass


class ConfigNotFoundError(ConfigError):
    """Configuration file not found (non-fatal, defaults used)."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"Config file not found: {path}")


class ConfigParseError(ConfigError):
    """Configuration file has invalid syntax."""

    def __init__(self, path: Path, detail: str) -> None:
        self.path = path
        self.detail = detail
        super().__init__(f"Invalid config at {path}: {detail}")


class ConfigValidationError(ConfigError):
    """Configuration value is invalid."""

    def __init__(self, key: str, value: object, reason: str) -> None:
        self.key = key
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid config value for '{key}': {reason}")


# Outline Errors
class OutlineError(OutlineSearchError):
    """Outline document errors."""

    pass


class OutlineNotFoundError(OutlineError):
    """Outline file doesn't exist."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"Outline not found: {path}")


class OutlineParseError(OutlineError):
    """Outline file is not a valid outline document."""

    def __init__(self, path: Path, detail: str) -> None:
        self.path = path
        self.detail = detail
        super().__init__(f"Invalid outline at {path}: {detail}")


# Query Errors
class QueryError(OutlineSearchError):
    """Search query errors."""

    pass


class QueryParseError(QueryError):
    """A search query could not be parsed.

    Raised for syntax errors (unbalanced parentheses, dangling operators,
    empty filter payloads) as well as invalid values (non-numeric depth,
    malformed date literal, bad regex pattern). Parsing stops at the first
    error; no partial expression is returned.

    Attributes:
        message: Human-readable description of the problem.
        fragment: The offending piece of the query, when known.
        position: Offset of ``fragment`` in the query, when known.
        query: The full query string, when known.
    """

    def __init__(
        self,
        message: str,
        *,
        fragment: str | None = None,
        position: int | None = None,
        query: str | None = None,
    ) -> None:
        self.message = message
        self.fragment = fragment
        self.position = position
        self.query = query
        super().__init__(message)
