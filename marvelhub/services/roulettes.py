import logging
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from marvelhub.models.roulette import CATEGORIES, Roulette, RouletteItem

logger = logging.getLogger(__name__)

CHANCE_TOLERANCE = 0.001
MIN_PRICE = Decimal("0.99")


class RouletteValidationError(Exception):
    status = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


def validate_chances(items: list[dict]) -> None:
    if not items:
        raise RouletteValidationError("Roulette must contain at least one item")

    total = sum(float(item["chance"]) for item in items)
    if abs(total - 1) > CHANCE_TOLERANCE:
        raise RouletteValidationError("Total chance must equal 1 (100%)")


def _validate(data: dict) -> None:
    if data["category"] not in CATEGORIES:
        raise RouletteValidationError(f"Category must be one of: {', '.join(CATEGORIES)}")
    if Decimal(str(data["price"])) < MIN_PRICE:
        raise RouletteValidationError(f"Price must be at least {MIN_PRICE}")
    validate_chances(data["items"])


def _build_items(items: list[dict]) -> list[RouletteItem]:
    return [
        RouletteItem(position=pos, hero_id=int(item["hero_id"]), chance=float(item["chance"]))
        for pos, item in enumerate(items)
    ]


class RouletteService:

    @staticmethod
    async def list_roulettes(session: AsyncSession) -> list[Roulette]:
        result = await session.execute(
            select(Roulette).order_by(Roulette.created_at.desc(), Roulette.id.desc())
        )
        return list(result.scalars().all())

    @staticmethod
    async def get_roulette(session: AsyncSession, roulette_id: int) -> Roulette | None:
        return await session.get(Roulette, roulette_id)

    @staticmethod
    async def create_roulette(session: AsyncSession, data: dict) -> Roulette:
        """
        `data` holds name, image, category, price and a list of
        {"hero_id", "chance"} items in draw order.
        """
        _validate(data)

        roulette = Roulette(
            name=data["name"],
            image=data["image"],
            category=data["category"],
            price=Decimal(str(data["price"])),
            items=_build_items(data["items"]),
        )
        session.add(roulette)
        try:
            await session.commit()
        except IntegrityError:
            await session.rollback()
            raise RouletteValidationError("Roulette name already exists")

        await session.refresh(roulette, attribute_names=["items", "created_at", "updated_at"])
        logger.info("Roulette %s (%s) created with %s items", roulette.id, roulette.name, len(roulette.items))
        return roulette

    @staticmethod
    async def update_roulette(session: AsyncSession, roulette_id: int, data: dict) -> Roulette | None:
        _validate(data)

        roulette = await session.get(Roulette, roulette_id)
        if roulette is None:
            return None

        roulette.name = data["name"]
        roulette.image = data["image"]
        roulette.category = data["category"]
        roulette.price = Decimal(str(data["price"]))
        roulette.items.clear()

        try:
            # Flush the orphan deletes before new positions are inserted
            await session.flush()
            roulette.items.extend(_build_items(data["items"]))
            await session.commit()
        except IntegrityError:
            await session.rollback()
            raise RouletteValidationError("Roulette name already exists")

        await session.refresh(roulette, attribute_names=["items", "updated_at"])
        logger.info("Roulette %s updated", roulette_id)
        return roulette

    @staticmethod
    async def delete_roulette(session: AsyncSession, roulette_id: int) -> bool:
        roulette = await session.get(Roulette, roulette_id)
        if roulette is None:
            return False

        await session.delete(roulette)
        await session.commit()
        logger.info("Roulette %s deleted", roulette_id)
        return True
