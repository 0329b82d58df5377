"""Rule-based interpretation engine for placed tarot spreads.

`interpret()` is a pure function of its arguments: the caller supplies the
spread, the placed cards and the full catalogs on every call. No I/O, no
randomness, no state kept between calls.
"""

from __future__ import annotations

from collections import Counter
from typing import Dict, List, Optional, Sequence, Tuple

from .models import (
    Card,
    CombinationRule,
    InterpretationOptions,
    InterpretationResult,
    Orientation,
    PlacedCard,
    PositionInterpretation,
    ReversalMode,
    Spread,
    SpreadPosition,
)


SUIT_THEMES: Dict[str, str] = {
    "wands": "passion, creativity, and spiritual growth",
    "cups": "emotions, relationships, and intuition",
    "swords": "thoughts, communication, and challenges",
    "pentacles": "material matters, work, and practical concerns",
}
DEFAULT_THEME = "spiritual and life path themes"

SUIT_ACTIONS: Dict[str, str] = {
    "cups": "Focus on emotional healing and nurturing relationships",
    "wands": "Take inspired action on creative projects and passions",
    "swords": "Practice clear communication and mental clarity",
    "pentacles": "Focus on practical matters and building stable foundations",
}

KEYWORD_ACTIONS = (
    ("balance", "Seek balance and moderation in all areas of life"),
    ("transformation", "Embrace change as an opportunity for growth"),
)

CLOSING_SENTENCE = "Trust your intuition as you interpret these messages for your path forward."

TOP_KEYWORDS = 5
MAX_ACTIONS = 3
CLUSTER_THRESHOLD = 2


class InterpretationError(RuntimeError):
    pass


class CardNotFoundError(InterpretationError, LookupError):
    def __init__(self, card_id: str):
        super().__init__(f"Card not found: {card_id}")
        self.card_id = card_id


class PositionNotFoundError(InterpretationError, LookupError):
    def __init__(self, position: int):
        super().__init__(f"Position not found: {position}")
        self.position = position


def suit_theme(suit: Optional[str]) -> str:
    return SUIT_THEMES.get(suit or "", DEFAULT_THEME)


def interpret(
    spread: Spread,
    placed_cards: Sequence[PlacedCard],
    all_cards: Sequence[Card],
    combination_rules: Sequence[CombinationRule],
    options: Optional[InterpretationOptions] = None,
) -> InterpretationResult:
    """Interpret a populated spread.

    Raises CardNotFoundError / PositionNotFoundError for unresolved
    references; nothing is returned for the other positions in that case.

    `combination_rules` is accepted but does not affect the output yet.
    """
    card_map = {c.id: c for c in all_cards}
    reversal_mode = options.reversal_mode if options is not None else "soft"

    positions: List[PositionInterpretation] = []
    for placed in placed_cards:
        card = card_map.get(placed.card_id)
        if card is None:
            raise CardNotFoundError(placed.card_id)

        position = spread.position(placed.position)
        if position is None:
            raise PositionNotFoundError(placed.position)

        base_short, base_long = base_interpretation(card, placed.orientation, reversal_mode)
        modifier = position_modifier(position, placed.orientation)
        adjacency = adjacency_influence(placed_cards, placed, card_map)

        positions.append(
            PositionInterpretation(
                slot_name=position.name,
                card_id=card.id,
                orientation=placed.orientation,
                interpretation_short=compose_short(position, card, placed.orientation, base_short),
                interpretation_long=compose_long(
                    position, card, placed.orientation, base_long, modifier, adjacency
                ),
            )
        )

    return _overall_analysis(positions, placed_cards, card_map)


def base_interpretation(card: Card, orientation: Orientation, reversal_mode: ReversalMode) -> Tuple[str, str]:
    """Return (short, long) meaning text for the card's orientation."""
    if orientation == "upright":
        return card.upright_short, card.upright_long

    if reversal_mode == "strong":
        return card.reversed_short, card.reversed_long

    # soft: the reversed text, read as blocked rather than opposite
    return (
        f"{card.reversed_short} (blocked or internal)",
        f"{card.reversed_long} The energy of {card.name} is present but may be blocked, "
        f"internalized, or manifesting in a subtle way.",
    )


def position_modifier(position: SpreadPosition, orientation: Orientation) -> str:
    note = "internal or blocked" if orientation == "reversed" else "manifesting externally"
    role_hint = position.role_hint or ""
    return f"As {position.name.lower()}, this energy is {note} and suggests {role_hint.lower()}."


def adjacent_cards(placed_cards: Sequence[PlacedCard], current: PlacedCard) -> List[PlacedCard]:
    # positions immediately before/after by index; layout geometry is ignored
    return [
        p for p in placed_cards
        if p.card_id != current.card_id and abs(p.position - current.position) <= 1
    ]


def adjacency_influence(
    placed_cards: Sequence[PlacedCard],
    current: PlacedCard,
    card_map: Dict[str, Card],
) -> str:
    neighbours = adjacent_cards(placed_cards, current)
    neighbour_cards = [card_map.get(p.card_id) for p in neighbours]
    influences: List[str] = []

    current_card = card_map.get(current.card_id)
    if current_card is not None and current_card.suit:
        same_suit = sum(1 for c in neighbour_cards if c is not None and c.suit == current_card.suit)
        if same_suit >= CLUSTER_THRESHOLD:
            influences.append(
                f"Strong {current_card.suit} influence emphasizes {suit_theme(current_card.suit)}."
            )

    majors = sum(1 for c in neighbour_cards if c is not None and c.arcana == "Major")
    if majors >= CLUSTER_THRESHOLD:
        influences.append("Multiple Major Arcana nearby indicate significant life themes and spiritual lessons.")

    reversed_ = sum(1 for p in neighbours if p.orientation == "reversed")
    if reversed_ >= CLUSTER_THRESHOLD:
        influences.append("Surrounded by reversed cards suggests internal work or blocked energies.")

    return " ".join(influences)


def compose_short(position: SpreadPosition, card: Card, orientation: Orientation, base_short: str) -> str:
    return f"{position.name}: {card.name} ({orientation}) — {base_short}"


def compose_long(
    position: SpreadPosition,
    card: Card,
    orientation: Orientation,
    base_long: str,
    modifier: str,
    adjacency: str,
) -> str:
    text = f"{card.name} in {position.name} ({orientation}) — {base_long}"
    if modifier:
        text += f" {modifier}"
    if adjacency:
        text += f" {adjacency}"
    return text


def _ranked(counts: Counter) -> List[str]:
    # Counter keeps first-seen order; sorted() is stable, so ties keep it too
    return [k for k, _ in sorted(counts.items(), key=lambda kv: -kv[1])]


def _overall_analysis(
    positions: List[PositionInterpretation],
    placed_cards: Sequence[PlacedCard],
    card_map: Dict[str, Card],
) -> InterpretationResult:
    cards = [card_map[p.card_id] for p in placed_cards if p.card_id in card_map]

    major_count = sum(1 for c in cards if c.arcana == "Major")
    reversed_count = sum(1 for p in placed_cards if p.orientation == "reversed")

    suit_counts = Counter(c.suit for c in cards if c.suit)
    ranked_suits = _ranked(suit_counts)
    dominant_suit = ranked_suits[0] if ranked_suits else None

    keyword_counts = Counter(kw for c in cards for kw in c.keywords)
    keywords = _ranked(keyword_counts)[:TOP_KEYWORDS]

    return InterpretationResult(
        positions=positions,
        overall_summary=generate_summary(major_count, dominant_suit, reversed_count, len(placed_cards)),
        keywords=keywords,
        confidence_hints=generate_confidence_hints(major_count, dominant_suit, reversed_count),
        suggested_actions=generate_suggested_actions(major_count, dominant_suit, keywords),
        dominant_suit=dominant_suit,
        major_arcana_count=major_count,
        reversed_count=reversed_count,
    )


def generate_summary(major_count: int, dominant_suit: Optional[str], reversed_count: int, total_cards: int) -> str:
    summary = ""

    if major_count >= 3:
        summary += "This reading reveals significant life changes and spiritual themes. "
    elif major_count >= 1:
        summary += "Important life lessons and personal growth are highlighted. "

    if dominant_suit:
        summary += f"The focus is on {suit_theme(dominant_suit)}. "

    if reversed_count and total_cards and reversed_count >= total_cards / 2:
        summary += "Many reversed cards suggest internal work and reflection are needed. "

    return summary + CLOSING_SENTENCE


def generate_confidence_hints(major_count: int, dominant_suit: Optional[str], reversed_count: int) -> List[str]:
    hints: List[str] = []

    if major_count >= 3:
        hints.append(f"{major_count} Major Arcana cards detected — reading focuses on significant life themes")

    if dominant_suit:
        hints.append(f"Dominant suit: {dominant_suit} — interpretation emphasizes {suit_theme(dominant_suit)}")

    if reversed_count >= 3:
        hints.append(f"{reversed_count} reversed cards suggest internal processing or blocked energies")

    return hints


def generate_suggested_actions(major_count: int, dominant_suit: Optional[str], keywords: Sequence[str]) -> List[str]:
    actions: List[str] = []

    if major_count >= 2:
        actions.append("Pay attention to synchronicities and signs in your daily life")

    if dominant_suit in SUIT_ACTIONS:
        actions.append(SUIT_ACTIONS[dominant_suit])

    for keyword, action in KEYWORD_ACTIONS:
        if keyword in keywords:
            actions.append(action)

    return actions[:MAX_ACTIONS]
