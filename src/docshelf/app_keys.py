"""Application keys for type-safe app configuration access."""

from aiohttp import web

from docshelf.core.context import BuildContext

context_key = web.AppKey("context", BuildContext)
