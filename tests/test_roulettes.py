from decimal import Decimal

import pytest

from marvelhub.services.roulettes import RouletteService, RouletteValidationError, validate_chances


def roulette_data(**overrides):
    data = {
        "name": "Avengers Assemble",
        "image": "https://cdn.example.com/crates/avengers.png",
        "category": "Avengers",
        "price": Decimal("2.49"),
        "items": [
            {"hero_id": 1009368, "chance": 0.5},
            {"hero_id": 1009220, "chance": 0.3},
            {"hero_id": 1009664, "chance": 0.2},
        ],
    }
    data.update(overrides)
    return data


@pytest.mark.parametrize("chances", [[0.5, 0.5], [0.3333, 0.3333, 0.3334], [0.4995, 0.5]])
def test_chances_within_tolerance_accepted(chances):
    validate_chances([{"hero_id": i, "chance": c} for i, c in enumerate(chances)])


@pytest.mark.parametrize("chances", [[0.5, 0.4], [0.6, 0.6], [0.498, 0.5]])
def test_chances_outside_tolerance_rejected(chances):
    with pytest.raises(RouletteValidationError, match="Total chance must equal 1"):
        validate_chances([{"hero_id": i, "chance": c} for i, c in enumerate(chances)])


def test_empty_items_rejected():
    with pytest.raises(RouletteValidationError):
        validate_chances([])


async def test_create_keeps_item_order(session):
    roulette = await RouletteService.create_roulette(session, roulette_data())

    assert roulette.id is not None
    assert roulette.price == Decimal("2.49")
    assert [i.hero_id for i in roulette.items] == [1009368, 1009220, 1009664]
    assert [i.position for i in roulette.items] == [0, 1, 2]


@pytest.mark.parametrize("overrides", [
    {"category": "Weapons"},
    {"price": Decimal("0.50")},
    {"items": [{"hero_id": 1, "chance": 0.2}]},
])
async def test_create_rejects_invalid_roulettes(session, overrides):
    with pytest.raises(RouletteValidationError):
        await RouletteService.create_roulette(session, roulette_data(**overrides))
    assert await RouletteService.list_roulettes(session) == []


async def test_duplicate_name_rejected(session):
    await RouletteService.create_roulette(session, roulette_data())

    with pytest.raises(RouletteValidationError, match="already exists"):
        await RouletteService.create_roulette(session, roulette_data())


async def test_update_replaces_items(session_factory):
    async with session_factory() as session:
        created = await RouletteService.create_roulette(session, roulette_data())

    async with session_factory() as session:
        updated = await RouletteService.update_roulette(session, created.id, roulette_data(
            name="Dark Avengers",
            price=Decimal("3.99"),
            items=[{"hero_id": 1009351, "chance": 1.0}],
        ))

    assert updated.name == "Dark Avengers"

    async with session_factory() as session:
        reloaded = await RouletteService.get_roulette(session, created.id)
        assert reloaded.price == Decimal("3.99")
        assert [(i.hero_id, i.chance) for i in reloaded.items] == [(1009351, 1.0)]


async def test_update_missing_roulette(session):
    assert await RouletteService.update_roulette(session, 999, roulette_data()) is None


async def test_list_and_delete(session):
    first = await RouletteService.create_roulette(session, roulette_data(name="A"))
    second = await RouletteService.create_roulette(session, roulette_data(name="B"))

    listed = await RouletteService.list_roulettes(session)
    assert {r.id for r in listed} == {first.id, second.id}

    assert await RouletteService.delete_roulette(session, first.id) is True
    assert await RouletteService.delete_roulette(session, first.id) is False
    assert [r.id for r in await RouletteService.list_roulettes(session)] == [second.id]
