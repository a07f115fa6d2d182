from typing import Callable, Awaitable, Dict, Any
from aiogram import BaseMiddleware
from aiogram.types import TelegramObject
from aiohttp import web
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from marvelhub.db import SessionLocal


class DataBaseSessionMiddleware(BaseMiddleware):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession] = SessionLocal):
        super().__init__()
        self.session_factory = session_factory

    async def __call__(
        self,
        handler: Callable[[TelegramObject, Dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: Dict[str, Any],
    ) -> Any:
        async with self.session_factory() as session:
            data["session"] = session
            return await handler(event, data)


@web.middleware
async def db_session_middleware(request: web.Request, handler):
    """Same as DataBaseSessionMiddleware, for HTTP requests."""
    async with request.app["session_factory"]() as session:
        request["session"] = session
        return await handler(request)
