import logging
from typing import Any, Dict, List, Optional, Sequence, Union

from . import config
from .catalog import Catalog, CatalogError
from .engine import interpret
from .models import InterpretationOptions, InterpretationResult, PlacedCard
from .utils.rng import draw_cards

log = logging.getLogger("tarot_decoder.reading")


class ReadingError(RuntimeError):
    pass


def _spread(catalog: Catalog, spread_id: str):
    try:
        return catalog.get_spread(spread_id)
    except CatalogError:
        log.warning("Rejected reading: unknown spread %s", spread_id)
        raise ReadingError(f"Spread not found: {spread_id}") from None


def interpret_reading(
    catalog: Catalog,
    spread_id: str,
    placed_cards: Sequence[Union[PlacedCard, Dict[str, Any]]],
    options: Optional[Union[InterpretationOptions, Dict[str, Any]]] = None,
) -> InterpretationResult:
    """Interpret placed cards against a catalog spread.

    Card ids are checked up front so a bad request never reaches the engine.
    """
    spread = _spread(catalog, spread_id)
    placed = [PlacedCard.model_validate(p) for p in placed_cards]

    for p in placed:
        if not catalog.has_card(p.card_id):
            log.warning("Rejected reading for %s: unknown card %s", spread_id, p.card_id)
            raise ReadingError(f"Card not found: {p.card_id}")

    if options is None:
        options = InterpretationOptions(reversal_mode=config.default_reversal_mode())
    else:
        options = InterpretationOptions.model_validate(options)

    log.info("Interpreting %d cards in %s (%s reversals)", len(placed), spread_id, options.reversal_mode)
    return interpret(spread, placed, catalog.cards, catalog.active_rules(), options)


def draw_reading(catalog: Catalog, spread_id: str, seed: Optional[str] = None, salt: str = "") -> List[PlacedCard]:
    """Shuffle the whole deck and deal it into the spread."""
    spread = _spread(catalog, spread_id)
    return draw_cards(catalog.cards, spread, seed=seed, salt=salt)
