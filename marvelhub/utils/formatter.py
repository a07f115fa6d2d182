# marvelhub/utils/formatter.py
from decimal import Decimal
from html import escape

from marvelhub.models.roulette import Roulette
from marvelhub.models.users import User

TELEGRAM_LIMIT = 4000


def format_coins(amount: Decimal | float | int | None) -> str:
    return f"{Decimal(str(amount or 0)).quantize(Decimal('0.01'))}"


def format_roulette_line(roulette: Roulette) -> str:
    return (
        f"🎰 <b>{escape(roulette.name)}</b> (ID <code>{roulette.id}</code>)\n"
        f"🏷 {escape(roulette.category)} · 💰 {format_coins(roulette.price)} · 🦸 {len(roulette.items)} items\n"
    )


def format_roulette_details(roulette: Roulette) -> str:
    lines = [format_roulette_line(roulette), f"🖼 {escape(roulette.image)}\n"]
    for item in roulette.items:
        lines.append(f"• <code>{item.hero_id}</code> — {item.chance * 100:.2f}%")
    return "\n".join(lines)


def format_user(user: User) -> str:
    text = (
        f"👤 <b>{escape(user.name)}</b> (ID <code>{user.id}</code>)\n"
        f"📧 {escape(user.email)} · {user.role}\n"
        f"💰 Coins: <b>{format_coins(user.coins)}</b>\n\n"
    )
    if not user.purchased_characters:
        return text + "📭 No characters yet."

    text += "🦸 <b>Characters</b>\n"
    for entry in user.purchased_characters:
        obtained = entry.obtained_at.strftime("%Y-%m-%d") if entry.obtained_at else "—"
        text += f"• <code>{entry.character_id}</code> ×{entry.quantity} (since {obtained})\n"
    return text


def split_chunks(blocks: list[str], header: str = "") -> list[str]:
    """Pack blocks into messages that fit Telegram's length limit."""
    chunks = []
    text = header
    for block in blocks:
        if len(text) + len(block) > TELEGRAM_LIMIT:
            chunks.append(text)
            text = block
        else:
            text += block
    chunks.append(text)
    return chunks
