"""Shuffling and dealing utilities.

Every function takes an optional `rng`: any object with a `random()` method
returning floats in [0, 1). Pass `seeded_random(...)` for reproducible
shuffles; leave it out to use the module-level `random` generator.
"""

import hashlib
import random
from typing import List, Optional, Protocol, Sequence, TypeVar, Union

from ..models import Card, PlacedCard, Spread

T = TypeVar("T")


class RandomSource(Protocol):
    def random(self) -> float: ...


# orientation draws above this value come out reversed (~30%)
REVERSAL_THRESHOLD = 0.7


def seeded_random(seed: str, salt: str = "") -> random.Random:
    """Create a deterministic random.Random instance from seed and optional salt.

    Args:
        seed: Base seed string
        salt: Optional salt to modify the seed (e.g., spread id)

    Returns:
        random.Random instance that will produce deterministic sequences
    """
    combined = f"{seed}{salt}"
    hash_obj = hashlib.sha256(combined.encode('utf-8'))
    int_seed = int(hash_obj.hexdigest(), 16)

    # Mask to fit within Python's random seed range
    int_seed = int_seed & ((1 << 31) - 1)

    return random.Random(int_seed)


def shuffle_deck(cards: Sequence[T], rng: Optional[RandomSource] = None) -> List[T]:
    """Return a uniformly shuffled copy of `cards` (Fisher-Yates).

    Args:
        cards: Cards (or card IDs) to shuffle; left untouched
        rng: Optional random source

    Returns:
        New list with the same items in random order
    """
    rng = rng if rng is not None else random
    shuffled = list(cards)
    for i in range(len(shuffled) - 1, 0, -1):
        j = int(rng.random() * (i + 1))
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def draw_orientation(rng: Optional[RandomSource] = None) -> str:
    rng = rng if rng is not None else random
    return "reversed" if rng.random() > REVERSAL_THRESHOLD else "upright"


def deal_cards(
    shuffled_cards: Sequence[Union[Card, str]], spread: Spread, rng: Optional[RandomSource] = None
) -> List[PlacedCard]:
    """Deal the leading cards into the spread's positions.

    Args:
        shuffled_cards: Card models (or plain card IDs), already shuffled
        spread: Spread whose positions receive the cards, in order
        rng: Optional random source for the orientation draw

    Returns:
        One PlacedCard per position while cards last, carrying the
        position's own index
    """
    rng = rng if rng is not None else random
    result = []
    for position, card in zip(spread.positions, shuffled_cards):
        result.append(PlacedCard(
            card_id=card if isinstance(card, str) else card.id,
            orientation=draw_orientation(rng),
            position=position.index,
        ))
    return result


def draw_cards(
    cards: Sequence[Union[Card, str]], spread: Spread, seed: Optional[str] = None, salt: str = ""
) -> List[PlacedCard]:
    """Shuffle `cards` and deal them into `spread`.

    With a seed the draw is reproducible; the same generator feeds both the
    shuffle and the orientation draws.
    """
    rng = seeded_random(seed, salt) if seed is not None else random
    return deal_cards(shuffle_deck(cards, rng), spread, rng)
