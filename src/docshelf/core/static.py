"""Static path enumeration for pre-rendering every page."""

from docshelf.core.paths import split_url_path
from docshelf.core.site import RouteIndex


def enumerate_static_paths(index: RouteIndex) -> list[list[str]]:
    """List the segments of every buildable URL path.

    Paths come out in route index order, which is manifest pre-order. The
    root page is ``[""]``.

    Args:
        index: Route index of the manifest

    Returns:
        List of URL path segment lists
    """
    return [split_url_path(url_path) for url_path in index.url_paths()]
