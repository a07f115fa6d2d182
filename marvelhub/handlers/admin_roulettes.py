import logging
from decimal import Decimal, InvalidOperation

from aiogram import F, Router
from aiogram.filters import Command
from aiogram.types import Message
from sqlalchemy.ext.asyncio import AsyncSession

from marvelhub.config import settings
from marvelhub.services.roulettes import RouletteService, RouletteValidationError
from marvelhub.utils.formatter import format_roulette_details, format_roulette_line, split_chunks

logger = logging.getLogger(__name__)

router = Router()

ADD_USAGE = (
    "❌ Usage:\n"
    "<code>/add_roulette &lt;name&gt; | &lt;category&gt; | &lt;price&gt; | &lt;image&gt; | "
    "&lt;heroId:chance, ...&gt;</code>"
)


def parse_roulette_command(text: str) -> dict:
    """
    /add_roulette Cosmic | Heroes | 1.99 | https://img/x.png | 1009368:0.3, 1009610:0.7
    """
    parts = text.split(maxsplit=1)
    if len(parts) < 2:
        raise RouletteValidationError(ADD_USAGE)

    fields = [f.strip() for f in parts[1].split("|")]
    if len(fields) != 5 or not all(fields):
        raise RouletteValidationError(ADD_USAGE)

    name, category, price_str, image, items_str = fields
    try:
        price = Decimal(price_str)
        items = []
        for pair in items_str.split(","):
            hero_id, chance = pair.strip().split(":")
            items.append({"hero_id": int(hero_id), "chance": float(chance)})
    except (InvalidOperation, ValueError):
        raise RouletteValidationError(ADD_USAGE)

    return {"name": name, "category": category, "price": price, "image": image, "items": items}


@router.message(Command("roulettes"))
async def list_roulettes(message: Message, session: AsyncSession):
    if message.from_user.id not in settings.admins:
        return

    roulettes = await RouletteService.list_roulettes(session)
    if not roulettes:
        await message.answer("📭 No roulettes yet.")
        return

    blocks = [format_roulette_line(r) + "\n" for r in roulettes]
    for chunk in split_chunks(blocks, header="🎰 <b>Roulettes</b>\n\n"):
        await message.answer(chunk, parse_mode="HTML")


@router.message(F.text.startswith("/roulette "))
async def show_roulette(message: Message, session: AsyncSession):
    if message.from_user.id not in settings.admins:
        return

    try:
        _, roulette_id = message.text.split(maxsplit=1)
        roulette_id = int(roulette_id)
    except ValueError:
        await message.answer("❌ Usage: <code>/roulette &lt;ID&gt;</code>", parse_mode="HTML")
        return

    roulette = await RouletteService.get_roulette(session, roulette_id)
    if roulette is None:
        await message.answer("⚠ Roulette not found.")
        return
    await message.answer(format_roulette_details(roulette), parse_mode="HTML", disable_web_page_preview=True)


@router.message(F.text.startswith("/add_roulette"))
async def add_roulette(message: Message, session: AsyncSession):
    if message.from_user.id not in settings.admins:
        return

    try:
        data = parse_roulette_command(message.text)
        roulette = await RouletteService.create_roulette(session, data)
    except RouletteValidationError as exc:
        await message.answer(exc.message if exc.message.startswith("❌") else f"❌ {exc.message}", parse_mode="HTML")
        return

    logger.info("Admin %s created roulette %s", message.from_user.id, roulette.id)
    await message.answer(f"✅ Roulette <b>{roulette.name}</b> created (ID <code>{roulette.id}</code>).", parse_mode="HTML")


@router.message(F.text.startswith("/delete_roulette"))
async def delete_roulette(message: Message, session: AsyncSession):
    if message.from_user.id not in settings.admins:
        return

    try:
        _, roulette_id = message.text.split(maxsplit=1)
        roulette_id = int(roulette_id)
    except ValueError:
        await message.answer("❌ Usage: <code>/delete_roulette &lt;ID&gt;</code>", parse_mode="HTML")
        return

    deleted = await RouletteService.delete_roulette(session, roulette_id)
    if deleted:
        await message.answer(f"🗑 Roulette <code>{roulette_id}</code> deleted.", parse_mode="HTML")
    else:
        await message.answer("⚠ Roulette not found.")
