from aiogram import Router
from aiogram.filters import Command
from aiogram.types import Message

from marvelhub.config import settings

router = Router()

ADMIN_COMMANDS = [
    {
        "command": "/roulettes",
        "description": "🎰 List all roulettes",
        "usage": "Just send the command",
    },
    {
        "command": "/roulette",
        "description": "🔍 Roulette details with item odds",
        "usage": "/roulette &lt;ID&gt;",
    },
    {
        "command": "/add_roulette",
        "description": "➕ Create a roulette",
        "usage": "/add_roulette &lt;name&gt; | &lt;category&gt; | &lt;price&gt; | &lt;image&gt; | &lt;heroId:chance, ...&gt;",
    },
    {
        "command": "/delete_roulette",
        "description": "🗑️ Delete a roulette",
        "usage": "/delete_roulette &lt;ID&gt;",
    },
    {
        "command": "/manage_balance",
        "description": "💰 Manage a user's coin balance",
        "usage": "/manage_balance &lt;ID&gt; &lt;+/-/=&gt; &lt;Amount&gt;",
    },
    {
        "command": "/user",
        "description": "👤 User balance and owned characters",
        "usage": "/user &lt;ID&gt;",
    },
]


def format_admin_panel(commands: list[dict]) -> str:
    header = (
        "🛡️ <b>ADMIN PANEL</b>\n"
        "┏━━━━━━━━━━━━━━━━━━━━━━━━━━━━━┓\n"
        f"┃ 🎯 <b>Available commands:</b> {len(commands)}   ┃\n"
        "┗━━━━━━━━━━━━━━━━━━━━━━━━━━━━━┛\n\n"
    )

    section = "┏━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━┓\n"
    for i, cmd in enumerate(commands, 1):
        section += (
            f"┃ 🔹 <b>{cmd['command']}</b>\n"
            f"┃    📝 {cmd['description']}\n"
            f"┃    💡 <i>Usage:</i> <code>{cmd['usage']}</code>\n"
        )
        if i < len(commands):
            section += "┃ ──────────────────────────────\n"
    section += "┗━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━┛"

    return header + section


@router.message(Command("admin"))
async def admin_panel(message: Message):
    """Main admin panel"""
    if message.from_user.id not in settings.admins:
        return

    await message.answer(format_admin_panel(ADMIN_COMMANDS), parse_mode="HTML", disable_web_page_preview=True)
