# marvelhub/services/spin.py
import asyncio
import logging
import random
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from marvelhub.config import settings
from marvelhub.models.roulette import Roulette
from marvelhub.models.users import User
from marvelhub.services.draw import draw
from marvelhub.services.ledger import apply_win, find_entry

logger = logging.getLogger(__name__)

GENERIC_ERROR = "Internal server error"


class SpinError(Exception):
    status = 500
    message = GENERIC_ERROR

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        if message:
            self.message = message


class SpinNotFound(SpinError):
    status = 404
    message = "Roulette or user does not exist"


class InsufficientFunds(SpinError):
    status = 400
    message = "Insufficient funds for this spin"


class EmptyRoulette(SpinError):
    status = 400
    message = "Roulette has no items to draw"


class SpinConflict(SpinError):
    status = 409
    message = "Spin conflicted with a concurrent request, please retry"


class InternalInconsistency(SpinError):
    """The ledger lost the entry that was just granted."""


class PersistenceFailure(SpinError):
    """Saving the user failed; nothing from this spin was committed."""


@dataclass
class WonCharacter:
    id: int
    quantity: int
    first_obtained: datetime


@dataclass
class SpinReceipt:
    new_balance: Decimal
    won_character: WonCharacter
    timestamp: datetime


def _as_utc(value: datetime | None) -> datetime:
    if value is None:
        return datetime.now(timezone.utc)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SpinService:
    """
    Settles a paid roulette spin: funds check, debit, weighted draw,
    ledger grant and a single commit of the user.

    The user row is versioned, so a spin that raced another write to the
    same user is re-run from a fresh read, up to `max_retries` attempts.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        rng: random.Random | None = None,
        max_retries: int | None = None,
    ):
        self.session_factory = session_factory
        self.rng = rng
        self.max_retries = settings.spin_max_retries if max_retries is None else max_retries
        if self.max_retries < 1:
            raise ValueError("max_retries must be at least 1")

    async def spin(self, roulette_id: int, user_id: int) -> SpinReceipt:
        for attempt in range(1, self.max_retries + 1):
            try:
                return await self._attempt(roulette_id, user_id)
            except StaleDataError:
                logger.warning(
                    "Spin on roulette %s for user %s hit a concurrent update (attempt %s/%s)",
                    roulette_id, user_id, attempt, self.max_retries,
                )
        raise SpinConflict()

    async def _load_roulette(self, roulette_id: int) -> Roulette | None:
        # Read-only, so it gets its own session and can run alongside the user read
        async with self.session_factory() as session:
            return await session.get(Roulette, roulette_id)

    async def _load_user(self, session: AsyncSession, user_id: int) -> User | None:
        return await session.get(User, user_id, populate_existing=True)

    async def _attempt(self, roulette_id: int, user_id: int) -> SpinReceipt:
        async with self.session_factory() as session:
            roulette, user = await asyncio.gather(
                self._load_roulette(roulette_id),
                self._load_user(session, user_id),
            )

            if roulette is None or user is None:
                raise SpinNotFound()
            if not roulette.items:
                raise EmptyRoulette()
            if user.coins < roulette.price:
                raise InsufficientFunds()

            user.coins = user.coins - roulette.price
            won_id = draw(roulette.items, self.rng)
            apply_win(user.purchased_characters, won_id)

            try:
                await session.commit()
            except StaleDataError:
                await session.rollback()
                raise
            except SQLAlchemyError as exc:
                await session.rollback()
                logger.exception("Failed to save spin of roulette %s for user %s", roulette_id, user_id)
                raise PersistenceFailure() from exc

            # Report what was committed, not what is in memory
            await session.refresh(user, attribute_names=["coins", "purchased_characters"])
            receipt = self._receipt(user, won_id)

        logger.info(
            "User %s spun roulette %s for %s and won character %s (x%s)",
            user_id, roulette_id, roulette.price, won_id, receipt.won_character.quantity,
        )
        return receipt

    @staticmethod
    def _receipt(user: User, won_id: int) -> SpinReceipt:
        entry = find_entry(user.purchased_characters, won_id)
        if entry is None:
            logger.error("Character %s missing from ledger of user %s after spin", won_id, user.id)
            raise InternalInconsistency()

        return SpinReceipt(
            new_balance=user.coins,
            won_character=WonCharacter(
                id=won_id,
                quantity=entry.quantity,
                first_obtained=_as_utc(entry.obtained_at),
            ),
            timestamp=datetime.now(timezone.utc),
        )
