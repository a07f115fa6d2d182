from decimal import Decimal

import pytest

from marvelhub.config import settings
from marvelhub.handlers import admin, admin_balance, admin_roulettes, admin_user
from marvelhub.handlers.admin_balance import BalanceCommandError, apply_balance_operation, parse_balance_command
from marvelhub.handlers.admin_roulettes import parse_roulette_command
from marvelhub.services.roulettes import RouletteService, RouletteValidationError
from marvelhub.services.spin import SpinService

ADMIN_ID = 42


@pytest.fixture(autouse=True)
def admins(monkeypatch):
    monkeypatch.setattr(settings, "admins", [ADMIN_ID])


def test_parse_balance_command():
    assert parse_balance_command("/manage_balance 7 + 12.50") == (7, "+", Decimal("12.50"))


@pytest.mark.parametrize("text", [
    "/manage_balance 7 +",
    "/manage_balance abc + 1",
    "/manage_balance 7 * 1",
    "/manage_balance 7 + -1",
    "/manage_balance 7 + 1.999",
])
def test_parse_balance_command_rejects(text):
    with pytest.raises(BalanceCommandError):
        parse_balance_command(text)


def test_balance_operations():
    assert apply_balance_operation(Decimal("10"), "+", Decimal("2.5")) == Decimal("12.5")
    assert apply_balance_operation(Decimal("10"), "-", Decimal("2.5")) == Decimal("7.5")
    assert apply_balance_operation(Decimal("10"), "=", Decimal("3")) == Decimal("3")
    with pytest.raises(BalanceCommandError):
        apply_balance_operation(Decimal("1"), "-", Decimal("2"))


def test_parse_roulette_command():
    data = parse_roulette_command(
        "/add_roulette Cosmic Crate | Heroes | 1.99 | https://cdn.example.com/c.png | 1009368:0.3, 1009610:0.7"
    )

    assert data == {
        "name": "Cosmic Crate",
        "category": "Heroes",
        "price": Decimal("1.99"),
        "image": "https://cdn.example.com/c.png",
        "items": [{"hero_id": 1009368, "chance": 0.3}, {"hero_id": 1009610, "chance": 0.7}],
    }


@pytest.mark.parametrize("text", [
    "/add_roulette",
    "/add_roulette Cosmic | Heroes | 1.99 | https://x",
    "/add_roulette Cosmic | Heroes | cheap | https://x | 1:1",
    "/add_roulette Cosmic | Heroes | 1.99 | https://x | 1-1",
])
def test_parse_roulette_command_rejects(text):
    with pytest.raises(RouletteValidationError):
        parse_roulette_command(text)


async def test_manage_balance_updates_coins(session, make_user, load_user, message_factory):
    user_id = await make_user(coins="10.00")
    message = message_factory(f"/manage_balance {user_id} - 2.50", ADMIN_ID)

    await admin_balance.manage_balance(message, session)

    assert (await load_user(user_id)).coins == Decimal("7.50")
    assert "Balance updated" in message.answers[0]


async def test_manage_balance_never_goes_negative(session, make_user, load_user, message_factory):
    user_id = await make_user(coins="1.00")
    message = message_factory(f"/manage_balance {user_id} - 2", ADMIN_ID)

    await admin_balance.manage_balance(message, session)

    assert (await load_user(user_id)).coins == Decimal("1.00")
    assert "Insufficient funds" in message.answers[0]


async def test_non_admins_are_ignored(session, make_user, load_user, message_factory):
    user_id = await make_user(coins="10.00")
    message = message_factory(f"/manage_balance {user_id} = 0", user_id=7)

    await admin_balance.manage_balance(message, session)

    assert message.answers == []
    assert (await load_user(user_id)).coins == Decimal("10.00")


async def test_add_and_delete_roulette(session, message_factory):
    message = message_factory(
        "/add_roulette Cosmic Crate | Heroes | 1.99 | https://cdn.example.com/c.png | 1009368:0.3, 1009610:0.7",
        ADMIN_ID,
    )
    await admin_roulettes.add_roulette(message, session)
    assert "created" in message.answers[0]

    [roulette] = await RouletteService.list_roulettes(session)

    listing = message_factory("/roulettes", ADMIN_ID)
    await admin_roulettes.list_roulettes(listing, session)
    assert "Cosmic Crate" in listing.answers[0]

    details = message_factory(f"/roulette {roulette.id}", ADMIN_ID)
    await admin_roulettes.show_roulette(details, session)
    assert "30.00%" in details.answers[0]

    delete = message_factory(f"/delete_roulette {roulette.id}", ADMIN_ID)
    await admin_roulettes.delete_roulette(delete, session)
    assert "deleted" in delete.answers[0]
    assert await RouletteService.list_roulettes(session) == []


async def test_add_roulette_reports_bad_odds(session, message_factory):
    message = message_factory(
        "/add_roulette Cosmic Crate | Heroes | 1.99 | https://cdn.example.com/c.png | 1009368:0.3, 1009610:0.3",
        ADMIN_ID,
    )

    await admin_roulettes.add_roulette(message, session)

    assert message.answers == ["❌ Total chance must equal 1 (100%)"]


async def test_user_info_lists_characters(session, session_factory, make_user, make_roulette, message_factory):
    user_id = await make_user(coins="5.00")
    roulette_id = await make_roulette(items=[{"hero_id": 1009368, "chance": 1.0}])
    await SpinService(session_factory).spin(roulette_id, user_id)

    message = message_factory(f"/user {user_id}", ADMIN_ID)
    await admin_user.user_info(message, session)

    assert "3.01" in message.answers[0]
    assert "<code>1009368</code> ×1" in message.answers[0]


async def test_admin_panel_lists_commands(message_factory):
    message = message_factory("/admin", ADMIN_ID)

    await admin.admin_panel(message)

    for cmd in admin.ADMIN_COMMANDS:
        assert cmd["command"] in message.answers[0]
