"""aiohttp server for Docshelf.

Application factory and route registration for standalone server mode.
"""

from aiohttp import web

from docshelf.api.navigation import create_navigation_routes
from docshelf.api.pages import create_pages_routes
from docshelf.api.paths import create_paths_routes
from docshelf.app_keys import context_key
from docshelf.config import Config
from docshelf.core.context import BuildContext


def create_context(config: Config) -> BuildContext:
    """Create the build context described by a configuration."""
    return BuildContext(
        config.content.content_dir,
        manifest_name=config.content.manifest,
        mode=config.content.navigation_mode,
    )


def create_app(config: Config, *, context: BuildContext | None = None) -> web.Application:
    """Create aiohttp application.

    The build context is warmed up on startup, so manifest or navigation
    errors stop the server before it accepts requests.

    Args:
        config: Application configuration
        context: Build context to serve, created from config if omitted

    Returns:
        Configured aiohttp application
    """
    app = web.Application()
    app[context_key] = context if context is not None else create_context(config)

    app.router.add_routes(create_pages_routes())
    app.router.add_routes(create_navigation_routes())
    app.router.add_routes(create_paths_routes())

    app.on_startup.append(_warm_up)

    return app


async def _warm_up(app: web.Application) -> None:
    """Populate manifest, route index and navigation before serving."""
    app[context_key].warm_up()


def run_server(config: Config) -> None:
    """Run the server.

    Args:
        config: Application configuration
    """
    app = create_app(config)
    web.run_app(app, host=config.server.host, port=config.server.port)
