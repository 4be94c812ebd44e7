"""Route index for the manifest's content tree.

Maps URL paths to source documents with O(1) lookups while keeping the
route tree structure (parents and ordered children) for traversal.
Separate from navigation, which is built from the index for UI
presentation.
"""

from collections.abc import Iterator
from dataclasses import dataclass

from docshelf.core.errors import RouteCollisionError
from docshelf.core.manifest import Manifest, Route
from docshelf.core.paths import normalize, strip_trailing_slash
from docshelf.core.types import NavigationMode, SourcePath, URLPath


@dataclass(frozen=True)
class RouteEntry:
    """Resolved route: where a document is served and where it lives."""

    url_path: URLPath
    source_path: SourcePath


class RouteIndex:
    """URL path to source path index.

    Stores entries in a flat list (manifest pre-order) with parent/children
    relationships tracked by indices. Immutable once built, so it can be
    shared across threads.
    """

    __slots__ = ("_children", "_entries", "_parents", "_path_index", "_roots")

    def __init__(
        self,
        entries: list[RouteEntry],
        children: list[list[int]],
        parents: list[int | None],
        roots: list[int],
    ) -> None:
        """Initialize route index.

        Args:
            entries: Flat list of all route entries
            children: Children indices for each entry
            parents: Parent index for each entry (None for roots)
            roots: Indices of top-level entries
        """
        self._entries = tuple(entries)
        self._children = tuple(tuple(c) for c in children)
        self._parents = tuple(parents)
        self._roots = tuple(roots)
        self._path_index = {entry.url_path: i for i, entry in enumerate(entries)}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, url_path: object) -> bool:
        if not isinstance(url_path, str):
            return False
        return self._normalize_path(url_path) in self._path_index

    def get_entry(self, url_path: str) -> RouteEntry | None:
        """Get route entry by URL path.

        Args:
            url_path: URL path (e.g., "guides/deploy" or "/guides/deploy")

        Returns:
            RouteEntry if found, None otherwise
        """
        idx = self._path_index.get(self._normalize_path(url_path))
        if idx is None:
            return None
        return self._entries[idx]

    def get_source(self, url_path: str) -> SourcePath | None:
        """Get source path for a URL path, None if not indexed."""
        entry = self.get_entry(url_path)
        return entry.source_path if entry is not None else None

    def get_children(self, url_path: str) -> list[RouteEntry]:
        """Get child entries in manifest order, empty if not found."""
        idx = self._path_index.get(self._normalize_path(url_path))
        if idx is None:
            return []
        return [self._entries[i] for i in self._children[idx]]

    def get_parent(self, url_path: str) -> RouteEntry | None:
        """Get parent entry, None for top-level or unknown paths."""
        idx = self._path_index.get(self._normalize_path(url_path))
        if idx is None:
            return None
        parent = self._parents[idx]
        return self._entries[parent] if parent is not None else None

    def roots(self) -> list[RouteEntry]:
        """Get top-level entries."""
        return [self._entries[i] for i in self._roots]

    def entries(self) -> list[RouteEntry]:
        """Get all entries in manifest pre-order."""
        return list(self._entries)

    def url_paths(self) -> list[URLPath]:
        """Get all URL paths in manifest pre-order."""
        return [entry.url_path for entry in self._entries]

    def items(self) -> Iterator[tuple[URLPath, SourcePath]]:
        """Iterate (url_path, source_path) pairs in manifest pre-order."""
        for entry in self._entries:
            yield entry.url_path, entry.source_path

    def _normalize_path(self, url_path: str) -> str:
        """Normalize path to have no leading or trailing slash."""
        return strip_trailing_slash(url_path.lstrip("/"))


class RouteIndexBuilder:
    """Builder for constructing RouteIndex instances."""

    def __init__(self) -> None:
        self._entries: list[RouteEntry] = []
        self._children: list[list[int]] = []
        self._parents: list[int | None] = []
        self._roots: list[int] = []
        self._seen: dict[str, int] = {}

    def add_route(
        self,
        url_path: URLPath,
        source_path: SourcePath,
        parent_idx: int | None = None,
    ) -> int:
        """Add a route to the index.

        Args:
            url_path: Normalized URL path
            source_path: Document path relative to the content root
            parent_idx: Index of parent route, None for top level

        Returns:
            Index of the added route

        Raises:
            RouteCollisionError: If url_path is already indexed
        """
        existing = self._seen.get(url_path)
        if existing is not None:
            raise RouteCollisionError(
                url_path,
                self._entries[existing].source_path,
                source_path,
            )

        idx = len(self._entries)
        self._entries.append(RouteEntry(url_path=url_path, source_path=source_path))
        self._children.append([])
        self._parents.append(parent_idx)
        self._seen[url_path] = idx

        if parent_idx is None:
            self._roots.append(idx)
        else:
            self._children[parent_idx].append(idx)

        return idx

    def build(self) -> RouteIndex:
        """Build the RouteIndex instance."""
        return RouteIndex(
            entries=self._entries,
            children=self._children,
            parents=self._parents,
            roots=self._roots,
        )


def build_index(
    manifest: Manifest,
    mode: NavigationMode = NavigationMode.ABSOLUTE,
) -> RouteIndex:
    """Build the route index from a manifest.

    Visits routes depth-first, pre-order.

    In absolute mode a route's URL path is the normalized route path. In
    relative mode a child route's path is resolved against its parent's URL
    path, so ``{"path": "guides.md", "children": [{"path": "deploy.md"}]}``
    yields ``guides`` and ``guides/deploy``.

    Each entry stores the document path the route resolved to. In absolute
    mode that is the route's own ``path``; in relative mode a child stores
    ``<parent url>/<path>`` (e.g. ``guides/deploy.md``), since that is the
    file the content loader reads.

    Args:
        manifest: Parsed manifest
        mode: Addressing mode for nested routes

    Returns:
        RouteIndex for every route in the manifest

    Raises:
        RouteCollisionError: If two routes resolve to the same URL path
    """
    builder = RouteIndexBuilder()

    def add_routes(
        routes: tuple[Route, ...],
        parent_idx: int | None,
        parent_url: URLPath | None,
    ) -> None:
        for route in routes:
            source_path = _resolve_source_path(route.path, parent_url, mode)
            url_path = normalize(source_path)
            idx = builder.add_route(url_path, source_path, parent_idx)
            add_routes(route.children, idx, url_path)

    add_routes(manifest.routes, None, None)
    return builder.build()


def _resolve_source_path(
    path: str,
    parent_url: URLPath | None,
    mode: NavigationMode,
) -> SourcePath:
    """Resolve a route path to a document path under the content root."""
    if mode != NavigationMode.RELATIVE or parent_url is None:
        return SourcePath(path)
    local = path.removeprefix("./")
    if not parent_url:
        return SourcePath(local)
    return SourcePath(f"{parent_url}/{local}")
