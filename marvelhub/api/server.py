import logging

import aiohttp
from aiohttp import web
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from marvelhub.api.routes import routes
from marvelhub.config import settings
from marvelhub.db import SessionLocal
from marvelhub.middlewares.db import db_session_middleware
from marvelhub.middlewares.errors import error_middleware
from marvelhub.middlewares.rate_limiter import SpinRateLimiter
from marvelhub.services.marvel import KeyPool, MarvelClient
from marvelhub.services.spin import SpinService

logger = logging.getLogger(__name__)


async def _marvel_client_ctx(app: web.Application):
    if not settings.marvel_keys:
        logger.warning("MARVEL_KEYS is empty, character lookups are disabled")
        yield
        return

    async with aiohttp.ClientSession() as http:
        app["marvel_client"] = MarvelClient(
            http,
            KeyPool(settings.marvel_keys, settings.marvel_max_uses_per_key),
            base_url=settings.marvel_base_url,
            cache_ttl=settings.marvel_cache_ttl,
            cache_max_entries=settings.marvel_cache_max_entries,
        )
        yield


def create_app(
    session_factory: async_sessionmaker[AsyncSession] = SessionLocal,
    spin_service: SpinService | None = None,
    marvel_client: MarvelClient | None = None,
    auth_secret: str | None = None,
) -> web.Application:
    app = web.Application(middlewares=[error_middleware, db_session_middleware])
    app["session_factory"] = session_factory
    app["spin_service"] = spin_service or SpinService(session_factory)
    app["spin_limiter"] = SpinRateLimiter(settings.spin_rate, settings.spin_rate_period)
    app["auth_secret"] = auth_secret or settings.auth_secret

    if marvel_client is not None:
        app["marvel_client"] = marvel_client
    else:
        app.cleanup_ctx.append(_marvel_client_ctx)

    app.add_routes(routes)
    return app
