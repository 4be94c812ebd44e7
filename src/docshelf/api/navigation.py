"""Navigation API endpoints.

Provides full navigation tree and subtree endpoints.
"""

from aiohttp import web

from docshelf.app_keys import context_key


def create_navigation_routes() -> list[web.RouteDef]:
    return [
        web.get("/api/navigation", get_navigation),
        web.get("/api/navigation/{path:.*}", get_navigation_subtree),
    ]


async def get_navigation(request: web.Request) -> web.Response:
    context = request.app[context_key]
    return web.json_response(
        {"items": context.navigation.to_dict(), "version": context.version},
    )


async def get_navigation_subtree(request: web.Request) -> web.Response:
    path = request.match_info["path"]
    context = request.app[context_key]

    item = context.navigation.find(path)
    if item is None:
        return web.json_response(
            {"error": "Section not found", "path": path},
            status=404,
        )

    return web.json_response(
        {"items": [child.to_dict() for child in item.children], "version": context.version},
    )
