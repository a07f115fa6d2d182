import os

# Must be set before marvelhub.config is imported
os.environ.setdefault("DB_DSN", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("AUTH_SECRET", "test-secret")

from decimal import Decimal
from types import SimpleNamespace

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from marvelhub.db import init_models
from marvelhub.models.users import User
from marvelhub.services.roulettes import RouletteService


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'marvelhub-test.db'}")
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def make_user(session_factory):
    counter = {"n": 0}

    async def _make(coins="10.00", role="user"):
        counter["n"] += 1
        async with session_factory() as session:
            user = User(
                name=f"Peter {counter['n']}",
                email=f"peter{counter['n']}@dailybugle.com",
                role=role,
                coins=Decimal(coins),
            )
            session.add(user)
            await session.commit()
            return user.id

    return _make


@pytest.fixture
def make_roulette(session_factory):
    counter = {"n": 0}

    async def _make(items=None, price="1.99", name=None):
        counter["n"] += 1
        async with session_factory() as session:
            roulette = await RouletteService.create_roulette(session, {
                "name": name or f"Cosmic Crate {counter['n']}",
                "image": "https://cdn.example.com/crates/cosmic.png",
                "category": "Heroes",
                "price": Decimal(price),
                "items": items or [
                    {"hero_id": 1009368, "chance": 0.3},
                    {"hero_id": 1009610, "chance": 0.7},
                ],
            })
            return roulette.id

    return _make


@pytest.fixture
def load_user(session_factory):
    async def _load(user_id):
        async with session_factory() as session:
            return await session.get(User, user_id)

    return _load


class FakeMessage:
    """Stands in for aiogram's Message in handler tests."""

    def __init__(self, text, user_id=42):
        self.text = text
        self.from_user = SimpleNamespace(id=user_id)
        self.answers = []

    async def answer(self, text, **kwargs):
        self.answers.append(text)


@pytest.fixture
def message_factory():
    return FakeMessage
