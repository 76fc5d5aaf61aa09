"""outline-search: query language and search tools for outline documents."""

__version__ = "0.4.0"
