"""Build errors.

Every failure of the core is fatal for the build. Each exception carries the
offending path (or colliding URL path) so the message is actionable, and also
derives from the closest builtin so callers may catch it generically.
"""

from pathlib import Path


class DocshelfError(Exception):
    """Base class for all docshelf build errors."""


class ManifestNotFoundError(DocshelfError, FileNotFoundError):
    """Manifest file does not exist."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"Manifest not found: {path}")


class ManifestParseError(DocshelfError, ValueError):
    """Manifest file is not valid JSON or has the wrong shape."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid manifest {path}: {reason}")


class RouteCollisionError(DocshelfError, ValueError):
    """Two routes normalize to the same URL path."""

    def __init__(self, url_path: str, first: str, second: str) -> None:
        self.url_path = url_path
        self.first = first
        self.second = second
        super().__init__(
            f"Routes {first!r} and {second!r} both resolve to URL path {url_path!r}",
        )


class SourceNotFoundError(DocshelfError, FileNotFoundError):
    """Source document referenced by a route cannot be read.

    reason is None when the file does not exist, otherwise it says why an
    existing file could not be read.
    """

    def __init__(self, source_path: str, reason: str | None = None) -> None:
        self.source_path = source_path
        self.reason = reason
        if reason is None:
            super().__init__(f"Source file not found: {source_path}")
        else:
            super().__init__(f"Cannot read source file {source_path}: {reason}")


class FrontMatterParseError(DocshelfError, ValueError):
    """Front matter header is malformed."""

    def __init__(self, source_path: str, reason: str) -> None:
        self.source_path = source_path
        self.reason = reason
        super().__init__(f"Invalid front matter in {source_path}: {reason}")


class FrontMatterMissingTitleError(DocshelfError, ValueError):
    """Front matter has no title."""

    def __init__(self, source_path: str) -> None:
        self.source_path = source_path
        super().__init__(f"Front matter in {source_path} has no title")


class PageNotFoundError(DocshelfError, LookupError):
    """URL path is not declared in the manifest."""

    def __init__(self, url_path: str) -> None:
        self.url_path = url_path
        super().__init__(f"No page for URL path {url_path!r}")
