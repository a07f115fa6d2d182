from aiogram import F, Router
from aiogram.types import Message
from sqlalchemy.ext.asyncio import AsyncSession

from marvelhub.config import settings
from marvelhub.models.users import User
from marvelhub.utils.formatter import format_user

router = Router()


@router.message(F.text.startswith("/user "))
async def user_info(message: Message, session: AsyncSession):
    """Balance and owned characters of one user"""
    if message.from_user.id not in settings.admins:
        return

    try:
        _, user_id = message.text.split(maxsplit=1)
        user_id = int(user_id)
    except ValueError:
        await message.answer("❌ Usage: <code>/user &lt;ID&gt;</code>", parse_mode="HTML")
        return

    user = await session.get(User, user_id)
    if not user:
        await message.answer(f"❌ User with ID <code>{user_id}</code> not found.", parse_mode="HTML")
        return

    await message.answer(format_user(user), parse_mode="HTML")
