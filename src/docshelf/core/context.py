"""Build context tying the manifest, route index and navigation together.

A BuildContext is created once per build invocation and handed to every page
resolution. Its caches are filled during warm_up() under a single lock;
afterwards they are only read, so resolve() is safe to call from a thread
pool.
"""

import logging
import threading
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from docshelf.core.content import ContentLoader, FrontMatter, Heading, Link
from docshelf.core.errors import PageNotFoundError
from docshelf.core.manifest import MANIFEST_FILENAME, Manifest, ManifestLoader
from docshelf.core.navigation import NavigationBuilder, NavigationTree
from docshelf.core.paths import url_path_from_segments
from docshelf.core.site import RouteIndex, build_index
from docshelf.core.static import enumerate_static_paths
from docshelf.core.types import NavigationMode, URLPath

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Page:
    """Resolved page ready for the render layer."""

    path: URLPath
    content: str
    attributes: FrontMatter
    navigation: NavigationTree
    version: str
    toc: list[Heading] = field(default_factory=list)
    links: list[Link] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "path": self.path,
            "content": self.content,
            "attributes": self.attributes.to_dict(),
            "navigation": self.navigation.to_dict(),
            "version": self.version,
            "toc": [heading.to_dict() for heading in self.toc],
            "links": [link.to_dict() for link in self.links],
        }


@dataclass(frozen=True)
class _Warmed:
    manifest: Manifest
    index: RouteIndex
    navigation: NavigationTree


class BuildContext:
    """Per-build state: manifest, route index and navigation tree."""

    def __init__(
        self,
        content_dir: Path,
        *,
        manifest_name: str = MANIFEST_FILENAME,
        mode: NavigationMode = NavigationMode.ABSOLUTE,
    ) -> None:
        """Initialize build context.

        Args:
            content_dir: Root directory containing the manifest and documents
            manifest_name: Manifest file name inside content_dir
            mode: Addressing mode for nested routes
        """
        self._loader = ContentLoader(content_dir)
        self._manifest_loader = ManifestLoader(content_dir / manifest_name)
        self._mode = NavigationMode(mode)
        self._warmed: _Warmed | None = None
        self._lock = threading.Lock()

    @property
    def content_dir(self) -> Path:
        """Root directory containing the manifest and documents."""
        return self._loader.content_dir

    @property
    def mode(self) -> NavigationMode:
        """Addressing mode for nested routes."""
        return self._mode

    def warm_up(self) -> None:
        """Load the manifest, build the route index and navigation.

        Idempotent. Must complete before page resolution is parallelized.

        Raises:
            DocshelfError: Any build error; the build can't continue
        """
        self._ensure_warm()

    @property
    def manifest(self) -> Manifest:
        return self._ensure_warm().manifest

    @property
    def index(self) -> RouteIndex:
        return self._ensure_warm().index

    @property
    def navigation(self) -> NavigationTree:
        return self._ensure_warm().navigation

    @property
    def version(self) -> str:
        """Current content version."""
        return self.manifest.current_version

    def static_paths(self) -> list[list[str]]:
        """Segments of every buildable URL path."""
        return enumerate_static_paths(self.index)

    def resolve(self, segments: Sequence[str] | None = None) -> Page:
        """Resolve URL path segments to a page.

        Args:
            segments: URL path segments (e.g., ["guides", "deploy"]);
                      None, [] or [""] for the root page

        Returns:
            Page with content, attributes, navigation and version

        Raises:
            PageNotFoundError: If no route maps to the URL path
            SourceNotFoundError: If the document can't be read
            FrontMatterParseError: If the header is malformed
            FrontMatterMissingTitleError: If the header has no title
        """
        return self.resolve_path(url_path_from_segments(segments))

    def resolve_path(self, url_path: str) -> Page:
        """Resolve a URL path (e.g., "guides/deploy") to a page."""
        warmed = self._ensure_warm()
        entry = warmed.index.get_entry(url_path)
        if entry is None:
            raise PageNotFoundError(url_path)

        document = self._loader.load_page(entry.source_path, entry.url_path)
        return Page(
            path=entry.url_path,
            content=document.body,
            attributes=document.front_matter,
            navigation=warmed.navigation,
            version=warmed.manifest.current_version,
            toc=document.headings,
            links=document.links,
        )

    def _ensure_warm(self) -> _Warmed:
        warmed = self._warmed
        if warmed is not None:
            return warmed
        with self._lock:
            if self._warmed is None:
                manifest = self._manifest_loader.load()
                index = build_index(manifest, self._mode)
                navigation = NavigationBuilder(index, self._loader).build()
                self._warmed = _Warmed(manifest=manifest, index=index, navigation=navigation)
                logger.info(
                    f"Loaded {len(index)} routes from {self._manifest_loader.path} "
                    f"(version {manifest.current_version})",
                )
            return self._warmed
