"""Static paths API endpoint."""

from aiohttp import web

from docshelf.app_keys import context_key


def create_paths_routes() -> list[web.RouteDef]:
    return [
        web.get("/api/paths", get_paths),
    ]


async def get_paths(request: web.Request) -> web.Response:
    context = request.app[context_key]
    return web.json_response({"paths": context.static_paths()})
