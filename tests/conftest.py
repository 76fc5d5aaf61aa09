"""Shared pytest fixtures."""

from __future__ import annotations

import json
import shutil
import tempfile
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

import pytest

from outline_search.model import Item, Metadata, Outline

if TYPE_CHECKING:
    from collections.abc import Callable, Generator


def make_item(
    item_id: str,
    text: str = "",
    *,
    children: list[Item] | None = None,
    attributes: dict[str, str] | None = None,
    tags: list[str] | None = None,
    created: datetime | None = None,
    modified: datetime | None = None,
) -> Item:
    """Build an item and attach ``children`` to it."""
    item = Item(
        id=item_id,
        text=text,
        metadata=Metadata(
            attributes=dict(attributes or {}),
            tags=list(tags or []),
            created=created,
            modified=modified,
        ),
    )
    for child in children or []:
        item.add_child(child)
    return item


# Outline used across search, debug and command tests:
#
#   Projects                      p1  @type=project
#     Website redesign            w1  @status=active @due=2025-10-20  #work
#       Draft task list           t1  @status=done
#       Review task [[g1]]        t2  @status=todo
#     Garden                      g1
#       Plant tulips task         t3  @status=todo
#   Inbox                         i1
#     Call Bob                    c1
SAMPLE_OUTLINE: dict[str, Any] = {
    "items": [
        {
            "id": "p1",
            "text": "Projects",
            "metadata": {"attributes": {"type": "project"}},
            "children": [
                {
                    "id": "w1",
                    "text": "Website redesign",
                    "metadata": {
                        "tags": ["work"],
                        "attributes": {"status": "active", "due": "2025-10-20"},
                        "created": "2025-10-01T09:00:00Z",
                        "modified": "2025-10-12T17:30:00.123456789+02:00",
                    },
                    "children": [
                        {
                            "id": "t1",
                            "text": "Draft task list",
                            "metadata": {"attributes": {"status": "done"}},
                        },
                        {
                            "id": "t2",
                            "text": "Review task [[g1|garden plan]]",
                            "metadata": {"attributes": {"status": "todo"}},
                        },
                    ],
                },
                {
                    "id": "g1",
                    "text": "Garden",
                    "metadata": {"created": "0001-01-01T00:00:00Z"},
                    "children": [
                        {
                            "id": "t3",
                            "text": "Plant tulips task",
                            "metadata": {"attributes": {"status": "todo"}},
                        },
                    ],
                },
            ],
        },
        {
            "id": "i1",
            "text": "Inbox",
            "children": [{"id": "c1", "text": "Call Bob"}],
        },
    ]
}


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    path = Path(tempfile.mkdtemp())
    try:
        yield path
    finally:
        shutil.rmtree(path, ignore_errors=True)


@pytest.fixture
def item_factory() -> Callable[..., Item]:
    """Factory building items with metadata and children (see make_item)."""
    return make_item


@pytest.fixture
def sample_outline_file(temp_dir: Path) -> Path:
    """Write the sample outline document to disk."""
    path = temp_dir / "outline.json"
    path.write_text(json.dumps(SAMPLE_OUTLINE), encoding="utf-8")
    return path


@pytest.fixture
def sample_outline() -> Outline:
    """The sample outline as model objects."""
    from outline_search.storage import outline_from_dict

    return outline_from_dict(SAMPLE_OUTLINE)


@pytest.fixture
def sample_config(temp_dir: Path, sample_outline_file: Path) -> Path:
    """Create a sample config file pointing at the sample outline."""
    config_path = temp_dir / "config.toml"
    config_path.write_text(f"""[paths]
outline = "{sample_outline_file.as_posix()}"

[display]
colored_output = false
highlight_matches = false

[search]
default_format = "fields"
default_fields = "id,text"
""")
    return config_path
