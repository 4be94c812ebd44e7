"""Navigation tree builder.

Builds navigation trees from the route index for UI presentation.
Navigation is a view layer over the manifest's document hierarchy, titled
from each document's front matter.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import TypedDict

from docshelf.core.content import ContentLoader
from docshelf.core.site import RouteEntry, RouteIndex
from docshelf.core.types import URLPath

logger = logging.getLogger(__name__)


class NavItemDict(TypedDict, total=False):
    """Dictionary representation of a navigation item."""

    title: str
    path: str
    children: list[NavItemDict]


@dataclass(frozen=True)
class NavItem:
    """Navigation item with children for UI tree."""

    title: str
    path: URLPath
    children: tuple[NavItem, ...] = field(default_factory=tuple)

    def to_dict(self) -> NavItemDict:
        """Convert to dictionary for JSON serialization."""
        result: NavItemDict = {"title": self.title, "path": self.path}
        if self.children:
            result["children"] = [child.to_dict() for child in self.children]
        return result


@dataclass(frozen=True)
class NavigationTree:
    """Complete navigation tree."""

    items: tuple[NavItem, ...] = field(default_factory=tuple)

    def __iter__(self) -> Iterator[NavItem]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __getitem__(self, idx: int) -> NavItem:
        return self.items[idx]

    def find(self, path: str) -> NavItem | None:
        """Find the item for a URL path (leading slash optional)."""
        target = path.strip("/")
        stack = list(reversed(self.items))
        while stack:
            item = stack.pop()
            if item.path == target:
                return item
            stack.extend(reversed(item.children))
        return None

    def to_dict(self) -> list[NavItemDict]:
        """Convert to list of dictionaries for JSON serialization."""
        return [item.to_dict() for item in self.items]


def build_navigation(index: RouteIndex, title_for: Callable[[RouteEntry], str]) -> NavigationTree:
    """Build navigation tree from a route index.

    Visits entries pre-order, so depth and child order mirror the manifest.

    Args:
        index: Route index to build navigation from
        title_for: Returns the navigation title for a route entry

    Returns:
        NavigationTree for navigation UI
    """
    items = tuple(_build_nav_item(index, entry, title_for) for entry in index.roots())
    return NavigationTree(items=items)


def _build_nav_item(
    index: RouteIndex,
    entry: RouteEntry,
    title_for: Callable[[RouteEntry], str],
) -> NavItem:
    """Recursively build NavItem from a route entry."""
    title = title_for(entry)
    children = index.get_children(entry.url_path)
    return NavItem(
        title=title,
        path=entry.url_path,
        children=tuple(_build_nav_item(index, child, title_for) for child in children),
    )


class NavigationBuilder:
    """Builds the navigation tree once per route index.

    Titles come from each document's front matter; bodies are never read.
    The first build is serialized, later calls return the same tree.
    """

    def __init__(self, index: RouteIndex, loader: ContentLoader) -> None:
        """Initialize builder.

        Args:
            index: Route index of the manifest
            loader: Content loader used to read front matter
        """
        self._index = index
        self._loader = loader
        self._tree: NavigationTree | None = None
        self._lock = threading.Lock()

    def build(self) -> NavigationTree:
        """Return the navigation tree, building it on first call.

        Raises:
            SourceNotFoundError: If a document can't be read
            FrontMatterParseError: If a document header is malformed
            FrontMatterMissingTitleError: If a document has no title
        """
        with self._lock:
            if self._tree is None:
                self._tree = build_navigation(self._index, self._title_for)
                logger.debug(f"Built navigation for {len(self._index)} routes")
            return self._tree

    def _title_for(self, entry: RouteEntry) -> str:
        return self._loader.read_front_matter(entry.source_path).title
