"""Pages API endpoint.

Resolves a URL path and returns the page as JSON: sanitized content, front
matter attributes, navigation, version and heading anchors.
"""

import logging
from email.utils import formatdate
from hashlib import md5

from aiohttp import web

from docshelf.app_keys import context_key
from docshelf.core.errors import DocshelfError, PageNotFoundError, SourceNotFoundError

logger = logging.getLogger(__name__)


def create_pages_routes() -> list[web.RouteDef]:
    return [
        web.get("/api/pages/{path:.*}", get_page),
    ]


async def get_page(request: web.Request) -> web.Response:
    path = request.match_info["path"].strip("/")
    context = request.app[context_key]

    try:
        page = context.resolve_path(path)
    except (PageNotFoundError, SourceNotFoundError):
        return web.json_response(
            {"error": "Page not found", "path": path},
            status=404,
        )
    except DocshelfError as e:
        logger.error(f"Failed to resolve {path!r}: {e}")
        return web.json_response(
            {"error": str(e), "path": path},
            status=500,
        )

    etag = _compute_etag(page.content)

    if_none_match = request.headers.get("If-None-Match")
    if if_none_match == etag:
        return web.Response(status=304)

    headers = {
        "ETag": etag,
        "Cache-Control": "private, max-age=60",
    }

    source_path = context.index.get_source(page.path)
    if source_path is not None:
        source_mtime = (context.content_dir / source_path).stat().st_mtime
        headers["Last-Modified"] = formatdate(source_mtime, usegmt=True)

    return web.json_response(page.to_dict(), headers=headers)


def _compute_etag(content: str) -> str:
    # First 16 hex chars (64 bits) are enough for cache validation
    content_hash = md5(content.encode("utf-8"), usedforsecurity=False).hexdigest()[:16]
    return f'"{content_hash}"'
