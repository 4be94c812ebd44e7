"""Source path to URL path normalization.

A source path such as ``./guides/index.md`` maps to the URL path ``guides``.
URL paths never carry a leading or trailing slash; the empty string is the
root page.
"""

from collections.abc import Sequence

from docshelf.core.types import URLPath

MARKDOWN_EXTENSION = ".md"
INDEX_SEGMENT = "index"


def strip_markdown_extension(path: str) -> str:
    """Remove every ``.md`` occurrence from a path.

    Directory names containing a literal ``.md`` lose it too, so
    ``a/b/index.md/index.md`` becomes ``a/b/index/index``.
    """
    return path.replace(MARKDOWN_EXTENSION, "")


def strip_index_segment(path: str) -> str:
    """Remove trailing ``index`` segments.

    Only whole segments are removed: ``index`` becomes the empty string and
    ``guides/index`` becomes ``guides``, while ``reindex`` is left alone.
    Stacked segments collapse, so ``a/b/index/index`` becomes ``a/b``.
    """
    suffix = f"/{INDEX_SEGMENT}"
    while path.endswith(suffix):
        path = path[: -len(suffix)]
    if path == INDEX_SEGMENT:
        return ""
    return path


def strip_trailing_slash(path: str) -> str:
    """Remove all trailing slashes."""
    return path.rstrip("/")


def normalize(source_path: str) -> URLPath:
    """Convert a manifest source path to its URL path.

    Args:
        source_path: Document path relative to the content root
                     (e.g., "./getting-started/index.md")

    Returns:
        URL path (e.g., "getting-started"), empty for the root document
    """
    url_path = strip_markdown_extension(source_path)
    url_path = url_path.removeprefix("./")
    url_path = strip_index_segment(url_path)
    url_path = strip_trailing_slash(url_path)
    return URLPath(url_path)


def join_url_path(parent: str, child: str) -> URLPath:
    """Join two URL paths, treating the empty string as the root."""
    if not parent:
        return URLPath(child)
    if not child:
        return URLPath(parent)
    return URLPath(f"{parent}/{child}")


def split_url_path(url_path: str) -> list[str]:
    """Split a URL path into segments.

    The root page is a single empty segment so it stays addressable.
    """
    if not url_path:
        return [""]
    return url_path.split("/")


def url_path_from_segments(segments: Sequence[str] | None) -> URLPath:
    """Join URL path segments back into a URL path.

    ``None``, ``[]`` and ``[""]`` all denote the root page.
    """
    if not segments:
        return URLPath("")
    return URLPath("/".join(segment for segment in segments if segment))
