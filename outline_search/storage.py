"""Read outline documents from their JSON representation."""

from __future__ import annotations

import json
import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Any

from outline_search.exceptions import OutlineNotFoundError, OutlineParseError
from outline_search.model import Item, Metadata, Outline

logger = logging.getLogger(__name__)

# Fractional seconds longer than microseconds (nanosecond timestamps)
_LONG_FRACTION = re.compile(r"(\.\d{6})\d+")


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an RFC 3339 timestamp as written by the outline editor.

    The zero time (year 1) and empty values mean "unset" and yield None.
    """
    if not value or not isinstance(value, str):
        return None
    text = _LONG_FRACTION.sub(r"\1", value.strip())
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        logger.debug("Ignoring unparsable timestamp %r", value)
        return None
    if parsed.year <= 1:
        return None
    return parsed


def _build_metadata(raw_meta: Any, item_id: str) -> Metadata:
    if raw_meta is None:
        raw_meta = {}
    if not isinstance(raw_meta, dict):
        raise ValueError(f"item {item_id!r}: 'metadata' must be an object")
    attributes = raw_meta.get("attributes")
    if attributes is None:
        attributes = {}
    if not isinstance(attributes, dict):
        raise ValueError(f"item {item_id!r}: 'attributes' must be an object")
    tags = raw_meta.get("tags")
    if tags is None:
        tags = []
    if not isinstance(tags, list):
        raise ValueError(f"item {item_id!r}: 'tags' must be a list")
    return Metadata(
        attributes={str(k): str(v) for k, v in attributes.items()},
        tags=[str(t) for t in tags],
        notes=str(raw_meta.get("notes") or ""),
        created=parse_timestamp(raw_meta.get("created")),
        modified=parse_timestamp(raw_meta.get("modified")),
    )


def _new_item(data: Any, parent: Item | None) -> Item:
    if not isinstance(data, dict):
        raise ValueError(f"item must be an object, got {type(data).__name__}")
    item_id = str(data.get("id", ""))
    item = Item(
        id=item_id,
        text=str(data.get("text", "")),
        metadata=_build_metadata(data.get("metadata"), item_id),
    )
    item.parent = parent
    return item


def _build_item(data: dict[str, Any], parent: Item | None) -> Item:
    # Explicit stack: outlines can nest deeper than the recursion limit
    root = _new_item(data, parent)
    stack = [(root, data)]
    while stack:
        item, item_data = stack.pop()
        children = item_data.get("children")
        if children is None:
            children = []
        if not isinstance(children, list):
            raise ValueError(f"item {item.id!r}: 'children' must be a list")
        for child_data in children:
            child = _new_item(child_data, item)
            item.children.append(child)
            stack.append((child, child_data))
    return root


def outline_from_dict(data: dict[str, Any]) -> Outline:
    """Build an Outline from decoded JSON, restoring parent links.

    Raises:
        ValueError: If the structure is not an outline document.
    """
    if not isinstance(data, dict):
        raise ValueError("outline document must be a JSON object")
    items = data.get("items") or []
    if not isinstance(items, list):
        raise ValueError("'items' must be a list")
    return Outline(items=[_build_item(entry, None) for entry in items])


def load_outline(path: Path) -> Outline:
    """Load an outline from a JSON file.

    Args:
        path: Path to the outline JSON document.

    Returns:
        The outline with parent links restored.

    Raises:
        OutlineNotFoundError: If the file does not exist.
        OutlineParseError: If the file is not valid outline JSON.
    """
    path = path.expanduser()
    if not path.exists():
        raise OutlineNotFoundError(path)

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        outline = outline_from_dict(data)
    except (json.JSONDecodeError, ValueError) as e:
        raise OutlineParseError(path, str(e)) from e

    logger.debug("Loaded %d root items from %s", len(outline.items), path)
    return outline
