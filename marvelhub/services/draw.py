import random
from typing import Protocol, Sequence

_rng = random.SystemRandom()


class WeightedItem(Protocol):
    hero_id: int
    chance: float


def select_winner(items: Sequence[WeightedItem], sample: float) -> int:
    """
    Pick the winning hero for a uniform sample in [0, 1).

    Items are walked in stored order; the first one whose cumulative chance
    exceeds the sample wins. If drift leaves the cumulative sum below the
    sample, the last item wins.
    """
    if not items:
        raise ValueError("cannot draw from an empty item list")

    cumulative = 0.0
    for item in items:
        cumulative += item.chance
        if sample < cumulative:
            return int(item.hero_id)
    return int(items[-1].hero_id)


def draw(items: Sequence[WeightedItem], rng: random.Random | None = None) -> int:
    return select_winner(items, (rng or _rng).random())
