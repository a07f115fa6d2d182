from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession, AsyncEngine
from sqlalchemy.orm import DeclarativeBase
from .config import settings

# Engine and session factory
engine = create_async_engine(settings.db_dsn, echo=False, future=True)
SessionLocal = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


# Base class for models
class Base(DeclarativeBase):
    pass


async def init_models(bind: AsyncEngine = engine) -> None:
    """Create missing tables. Models must be imported before calling."""
    from marvelhub.models import owned_character, roulette, users  # noqa: F401

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
