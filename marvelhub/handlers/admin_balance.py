import re
from decimal import Decimal

from aiogram import F, Router
from aiogram.types import Message
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from marvelhub.config import settings
from marvelhub.models.users import User
from marvelhub.utils.formatter import format_coins

router = Router()

AMOUNT_RE = re.compile(r"^\d+(\.\d{1,2})?$")

USAGE = (
    "❌ Invalid format.\n\n"
    "Usage:\n"
    "<code>/manage_balance &lt;ID&gt; &lt; +/-/= &gt; &lt;Amount&gt;</code>"
)


class BalanceCommandError(ValueError):
    pass


def parse_balance_command(text: str) -> tuple[int, str, Decimal]:
    parts = text.split()
    if len(parts) != 4:
        raise BalanceCommandError(USAGE)

    _, user_id_str, operator, amount_str = parts

    if not user_id_str.isdigit():
        raise BalanceCommandError("❌ ID must be a number.")
    if operator not in ["+", "-", "="]:
        raise BalanceCommandError("❌ Operator must be one of: +  -  =")
    if not AMOUNT_RE.match(amount_str):
        raise BalanceCommandError("❌ Amount must be a positive number with at most 2 decimals.")

    return int(user_id_str), operator, Decimal(amount_str)


def apply_balance_operation(old_balance: Decimal, operator: str, amount: Decimal) -> Decimal:
    if operator == "+":
        return old_balance + amount
    if operator == "-":
        if old_balance < amount:
            raise BalanceCommandError(
                f"❌ Insufficient funds. User balance: <b>{format_coins(old_balance)}</b> coins."
            )
        return old_balance - amount
    return amount


@router.message(F.text.startswith("/manage_balance"))
async def manage_balance(message: Message, session: AsyncSession):
    if message.from_user.id not in settings.admins:
        return

    try:
        user_id, operator, amount = parse_balance_command(message.text)
    except BalanceCommandError as exc:
        await message.answer(str(exc), parse_mode="HTML")
        return

    user = await session.get(User, user_id)
    if not user:
        await message.answer(f"❌ User with ID <code>{user_id}</code> not found.", parse_mode="HTML")
        return

    old_balance = user.coins or Decimal("0")
    try:
        new_balance = apply_balance_operation(old_balance, operator, amount)
    except BalanceCommandError as exc:
        await message.answer(str(exc), parse_mode="HTML")
        return

    user.coins = new_balance
    try:
        await session.commit()
    except StaleDataError:
        await session.rollback()
        await message.answer("⚠️ Balance changed while updating (spin in progress?). Try again.")
        return

    await message.answer(
        f"✅ Balance updated!\n\n"
        f"👤 User: <code>{user_id}</code>\n"
        f"💰 Was: <b>{format_coins(old_balance)}</b>\n"
        f"🔄 Now: <b>{format_coins(new_balance)}</b>\n"
        f"✍️ Operation: {operator} {format_coins(amount)}",
        parse_mode="HTML",
    )
