"""Content manifest loading.

The manifest is a JSON document at the content root describing the route
tree and the available versions::

    {
      "versions": ["v1.2", "v1.1"],
      "routes": [
        {"path": "./index.md"},
        {"path": "./guides/index.md", "children": [{"path": "./guides/deploy.md"}]}
      ]
    }
"""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass
from pathlib import Path

from docshelf.core.errors import ManifestNotFoundError, ManifestParseError

logger = logging.getLogger(__name__)

MANIFEST_FILENAME = "manifest.json"


@dataclass(frozen=True)
class Route:
    """Manifest route node."""

    path: str
    children: tuple[Route, ...] = ()


@dataclass(frozen=True)
class Manifest:
    """Parsed content manifest. Immutable for the lifetime of a build."""

    versions: tuple[str, ...]
    routes: tuple[Route, ...]

    @property
    def current_version(self) -> str:
        """First declared version."""
        return self.versions[0]


def load_manifest(path: Path) -> Manifest:
    """Load and validate a manifest file.

    Args:
        path: Path to manifest JSON file

    Returns:
        Parsed Manifest

    Raises:
        ManifestNotFoundError: If the file doesn't exist
        ManifestParseError: If the file is not valid JSON or has the wrong shape
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ManifestNotFoundError(path) from None
    except (OSError, UnicodeDecodeError) as e:
        raise ManifestParseError(path, str(e)) from e

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ManifestParseError(path, str(e)) from e

    return parse_manifest(data, path)


def parse_manifest(data: object, path: Path) -> Manifest:
    """Validate raw manifest data.

    Args:
        data: Decoded JSON document
        path: Manifest path, for error messages

    Returns:
        Parsed Manifest
    """
    if not isinstance(data, dict):
        raise ManifestParseError(path, "manifest must be an object")

    versions = data.get("versions")
    if not isinstance(versions, list) or not versions:
        raise ManifestParseError(path, "versions must be a non-empty list")
    for version in versions:
        if not isinstance(version, str):
            raise ManifestParseError(path, "versions items must be strings")

    routes = data.get("routes")
    if not isinstance(routes, list):
        raise ManifestParseError(path, "routes must be a list")

    return Manifest(
        versions=tuple(versions),
        routes=tuple(_parse_route(item, path, "routes") for item in routes),
    )


def _parse_route(data: object, path: Path, location: str) -> Route:
    """Recursively parse a route object."""
    if not isinstance(data, dict):
        raise ManifestParseError(path, f"{location} items must be objects")

    route_path = data.get("path")
    if not isinstance(route_path, str):
        raise ManifestParseError(path, f"{location} item path must be a string")

    children_raw = data.get("children")
    if children_raw is None:
        return Route(path=route_path)
    if not isinstance(children_raw, list):
        raise ManifestParseError(path, f"children of {route_path!r} must be a list")

    children = tuple(
        _parse_route(child, path, f"children of {route_path!r}") for child in children_raw
    )
    return Route(path=route_path, children=children)


class ManifestLoader:
    """Loads the manifest once and serves it for the rest of the build.

    First access is serialized so concurrent callers never parse twice.
    A loader belongs to a single build; there is no invalidation besides
    clear().
    """

    def __init__(self, path: Path) -> None:
        """Initialize loader.

        Args:
            path: Path to manifest JSON file
        """
        self._path = path
        self._manifest: Manifest | None = None
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        """Manifest file path."""
        return self._path

    def load(self) -> Manifest:
        """Return the manifest, parsing it on first call."""
        with self._lock:
            if self._manifest is None:
                logger.debug(f"Loading manifest from {self._path}")
                self._manifest = load_manifest(self._path)
            return self._manifest

    def clear(self) -> None:
        """Drop the memoized manifest."""
        with self._lock:
            self._manifest = None
