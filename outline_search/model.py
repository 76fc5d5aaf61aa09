"""Outline data model consumed by the search engine.

The engine only ever reads ``text``, ``parent``, ``children`` and
``metadata``; editing operations live with the outline editor.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class Metadata:
    """Rich information attached to an outline item."""

    attributes: dict[str, str] = field(default_factory=dict)
    tags: list[str] = field(default_factory=list)
    notes: str = ""
    created: datetime | None = None
    modified: datetime | None = None


@dataclass(eq=False)
class Item:
    """A single node in the outline tree.

    Items compare by identity: two nodes with the same text are still
    different nodes (sibling filters rely on this).
    """

    id: str
    text: str = ""
    children: list[Item] = field(default_factory=list)
    metadata: Metadata = field(default_factory=Metadata)
    parent: Item | None = field(default=None, repr=False)

    def add_child(self, child: Item) -> Item:
        """Append ``child`` and point its parent link at this item."""
        child.parent = self
        self.children.append(child)
        return child

    @property
    def depth(self) -> int:
        """Number of parent hops to the forest root (roots are 0)."""
        depth = 0
        current = self.parent
        while current is not None:
            depth += 1
            current = current.parent
        return depth

    def ancestors(self) -> list[Item]:
        """Parent chain, nearest first."""
        result: list[Item] = []
        current = self.parent
        while current is not None:
            result.append(current)
            current = current.parent
        return result

    def descendants(self) -> list[Item]:
        """All items below this one, pre-order."""
        result: list[Item] = []
        stack = list(reversed(self.children))
        while stack:
            item = stack.pop()
            result.append(item)
            stack.extend(reversed(item.children))
        return result

    def siblings(self) -> list[Item]:
        """Items sharing this item's parent, excluding the item itself."""
        if self.parent is None:
            return []
        return [s for s in self.parent.children if s is not self]

    def path(self) -> list[Item]:
        """Items from the root down to and including this item."""
        return list(reversed(self.ancestors())) + [self]


@dataclass
class Outline:
    """A whole outline document: an ordered forest of root items."""

    items: list[Item] = field(default_factory=list)

    def get_all_items(self) -> list[Item]:
        """Return every item depth-first, parents before their children."""
        result: list[Item] = []
        for item in self.items:
            result.append(item)
            result.extend(item.descendants())
        return result

    def find_item_by_id(self, item_id: str) -> Item | None:
        for item in self.get_all_items():
            if item.id == item_id:
                return item
        return None
