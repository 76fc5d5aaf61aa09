"""Wiki-style ``[[item_id]]`` links inside item text."""

from __future__ import annotations

import re
from dataclasses import dataclass

# [[item_id]] or [[item_id|display text]]
_LINK_PATTERN = re.compile(r"\[\[([^\]|]+)(?:\|([^\]]+))?\]\]")


@dataclass(frozen=True)
class Link:
    """A link reference found in item text.

    ``start`` is inclusive and ``end`` exclusive, both offsets into the
    original text.
    """

    id: str
    display_text: str
    start: int
    end: int


def parse_links(text: str) -> list[Link]:
    """Extract all wiki-style links from ``text``.

    Args:
        text: Item text to scan.

    Returns:
        Links in order of appearance. Ids and display texts are stripped.
    """
    links: list[Link] = []
    for match in _LINK_PATTERN.finditer(text):
        display = match.group(2) or ""
        links.append(
            Link(
                id=match.group(1).strip(),
                display_text=display.strip(),
                start=match.start(),
                end=match.end(),
            )
        )
    return links
