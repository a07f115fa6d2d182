from datetime import datetime, timezone

from marvelhub.models.owned_character import OwnedCharacter


def find_entry(ledger: list[OwnedCharacter], character_id: int) -> OwnedCharacter | None:
    for entry in ledger:
        if entry.character_id == character_id:
            return entry
    return None


def apply_win(ledger: list[OwnedCharacter], won_id: int, now: datetime | None = None) -> list[OwnedCharacter]:
    """
    Record one more copy of `won_id` in the ledger, in place.

    The ledger is normally `User.purchased_characters`, so an appended entry
    joins the user's unit of work and is flushed with it.
    """
    won_id = int(won_id)
    entry = find_entry(ledger, won_id)
    if entry is not None:
        entry.quantity += 1
    else:
        ledger.append(
            OwnedCharacter(
                character_id=won_id,
                quantity=1,
                obtained_at=now or datetime.now(timezone.utc),
            )
        )
    return ledger
