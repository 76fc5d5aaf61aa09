"""Render search results as tab-separated fields, JSON or JSON Lines."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from outline_search.model import Item

# Default fields per format when none are requested
FIELDS_DEFAULT: list[str] = ["id", "text", "attributes"]
JSON_DEFAULT: list[str] = [
    "id",
    "text",
    "attributes",
    "created",
    "modified",
    "tags",
    "depth",
    "path",
]

KNOWN_FIELDS: tuple[str, ...] = (
    "id",
    "text",
    "attributes",
    "created",
    "modified",
    "tags",
    "depth",
    "path",
    "parent_id",
    "children",
)


def parse_fields(value: str | None) -> list[str]:
    """Split a comma-separated ``--fields`` value, dropping blanks."""
    if not value:
        return []
    return [f.strip() for f in value.split(",") if f.strip()]


def is_known_field(name: str) -> bool:
    return name in KNOWN_FIELDS or (name.startswith("attr:") and len(name) > len("attr:"))


def _path_nodes(item: Item) -> list[dict[str, Any]]:
    nodes: list[dict[str, Any]] = []
    for node in item.path():
        entry: dict[str, Any] = {"id": node.id, "text": node.text}
        if node.metadata.attributes:
            entry["attributes"] = dict(node.metadata.attributes)
        nodes.append(entry)
    return nodes


def field_value(item: Item, name: str) -> Any:
    """Extract one output field from ``item``.

    Unknown field names yield an empty string; ``attr:NAME`` yields that
    attribute's value (empty when unset).
    """
    metadata = item.metadata
    if name.startswith("attr:"):
        return metadata.attributes.get(name[len("attr:") :], "")

    if name == "id":
        return item.id
    if name == "text":
        return item.text
    if name == "attributes":
        return dict(metadata.attributes)
    if name == "created":
        return metadata.created.isoformat() if metadata.created else ""
    if name == "modified":
        return metadata.modified.isoformat() if metadata.modified else ""
    if name == "tags":
        return list(metadata.tags)
    if name == "depth":
        return item.depth
    if name == "path":
        return _path_nodes(item)
    if name == "parent_id":
        return item.parent.id if item.parent is not None else ""
    if name == "children":
        return len(item.children)
    return ""


def _field_as_text(name: str, value: Any) -> str:
    if name == "path":
        return " > ".join(node["text"] for node in value)
    if isinstance(value, list):
        return ",".join(value)
    if isinstance(value, dict):
        return " ".join(f"@{k}={v}" for k, v in value.items())
    return str(value)


def item_as_object(item: Item, fields: list[str]) -> dict[str, Any]:
    return {name: field_value(item, name) for name in fields}


def format_fields(items: list[Item], fields: list[str] | None = None) -> str:
    """One line per item, field values separated by tabs."""
    fields = fields or FIELDS_DEFAULT
    lines = [
        "\t".join(_field_as_text(name, field_value(item, name)) for name in fields)
        for item in items
    ]
    return "\n".join(lines)


def format_json(items: list[Item], fields: list[str] | None = None) -> str:
    """An indented JSON array of item objects."""
    fields = fields or JSON_DEFAULT
    return json.dumps([item_as_object(item, fields) for item in items], indent=2)


def format_jsonl(items: list[Item], fields: list[str] | None = None) -> str:
    """One compact JSON object per line."""
    fields = fields or JSON_DEFAULT
    return "\n".join(json.dumps(item_as_object(item, fields)) for item in items)
