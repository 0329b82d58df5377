"""Card, spread and combination-rule catalogs loaded from bundled JSON.

- Loads tarot.json, spreads.json and combination_rules.json from the data dir
- Validates each entry and skips the invalid ones with a warning
- Provides: Catalog (get_card, get_spread, active_spreads, active_rules, stats)
  and integrity_report() for completeness checks
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError

from . import config
from .models import Card, CombinationRule, Spread

log = logging.getLogger("tarot_decoder.catalog")

CARDS_FILE = "tarot.json"
SPREADS_FILE = "spreads.json"
RULES_FILE = "combination_rules.json"

SUITS = ("wands", "cups", "swords", "pentacles")
MEANING_FIELDS = ("uprightShort", "uprightLong", "reversedShort", "reversedLong")


class CatalogError(RuntimeError):
    pass


def _load_json(path: Path) -> List[Any]:
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise CatalogError(f"Catalog data file not found at: {path}") from e

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise CatalogError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(data, list):
        raise CatalogError(f"{path.name} must contain an array")
    return data


def validate_card(card: Any, index: int = 0) -> List[str]:
    if not isinstance(card, dict):
        return [f"Card {index}: not an object"]

    errors = []
    if not card.get("id") or not isinstance(card.get("id"), str):
        errors.append(f"Card {index}: Missing or invalid id")
    if not card.get("name") or not isinstance(card.get("name"), str):
        errors.append(f"Card {index}: Missing or invalid name")
    if card.get("arcana") not in ("Major", "Minor"):
        errors.append(f"Card {index}: arcana must be 'Major' or 'Minor'")
    if card.get("arcana") == "Minor" and not card.get("suit"):
        errors.append(f"Card {index}: Minor Arcana cards must have a suit")
    if card.get("arcana") == "Major" and card.get("suit") is not None:
        errors.append(f"Card {index}: Major Arcana cards must not have a suit")
    if card.get("suit") and card.get("suit") not in SUITS:
        errors.append(f"Card {index}: unknown suit {card.get('suit')}")
    number = card.get("number")
    has_number = isinstance(number, int) and not isinstance(number, bool)
    if card.get("arcana") == "Major" and not (has_number and 0 <= number <= 21):
        errors.append(f"Card {index}: Major Arcana cards must have a number (0-21)")
    if card.get("arcana") == "Minor" and not (has_number and 1 <= number <= 14):
        errors.append(f"Card {index}: Minor Arcana cards must have a number (1-14)")
    if not isinstance(card.get("keywords", []), list):
        errors.append(f"Card {index}: keywords must be an array")
    for f in MEANING_FIELDS:
        if not card.get(f) or not isinstance(card.get(f), str):
            errors.append(f"Card {index}: Missing or invalid {f}")
    return errors


def validate_spread(spread: Any, index: int = 0) -> List[str]:
    if not isinstance(spread, dict):
        return [f"Spread {index}: not an object"]

    errors = []
    if not spread.get("id") or not isinstance(spread.get("id"), str):
        errors.append(f"Spread {index}: Missing or invalid id")
    if not spread.get("name") or not isinstance(spread.get("name"), str):
        errors.append(f"Spread {index}: Missing or invalid name")

    positions = spread.get("positions")
    if not isinstance(positions, list) or not positions:
        errors.append(f"Spread {index}: positions must be a non-empty array")
    else:
        for i, pos in enumerate(positions):
            if not isinstance(pos, dict):
                errors.append(f"Spread {index}, Position {i}: not an object")
                continue
            if not isinstance(pos.get("index"), int) or isinstance(pos.get("index"), bool):
                errors.append(f"Spread {index}, Position {i}: Missing or invalid index")
            if not pos.get("name") or not isinstance(pos.get("name"), str):
                errors.append(f"Spread {index}, Position {i}: Missing or invalid name")
            if not pos.get("roleHint") or not isinstance(pos.get("roleHint"), str):
                errors.append(f"Spread {index}, Position {i}: Missing or invalid roleHint")

    if "isActive" in spread and not isinstance(spread["isActive"], bool):
        errors.append(f"Spread {index}: isActive must be a boolean")
    return errors


def _load_records(path: Path, model, validate: Optional[Callable[[Any, int], List[str]]] = None) -> list:
    out = []
    for i, entry in enumerate(_load_json(path)):
        errors = validate(entry, i) if validate else []
        if not errors:
            try:
                out.append(model.model_validate(entry))
                continue
            except ValidationError as e:
                errors = [f"{model.__name__} {i}: {err['loc']} {err['msg']}" for err in e.errors()]
        log.warning("Skipping invalid entry in %s: %s", path.name, "; ".join(errors))
    log.info("Loaded %d %s from %s", len(out), model.__name__, path)
    return out


def load_cards(path: Optional[Path] = None) -> List[Card]:
    return _load_records(Path(path or config.data_dir() / CARDS_FILE), Card, validate_card)


def load_spreads(path: Optional[Path] = None) -> List[Spread]:
    return _load_records(Path(path or config.data_dir() / SPREADS_FILE), Spread, validate_spread)


def load_combination_rules(path: Optional[Path] = None) -> List[CombinationRule]:
    return _load_records(Path(path or config.data_dir() / RULES_FILE), CombinationRule)


class IntegrityReport(BaseModel):
    missing_major: List[int] = Field(default_factory=list)
    missing_minor: Dict[str, List[int]] = Field(default_factory=dict)
    duplicate_ids: List[str] = Field(default_factory=list)
    position_gaps: Dict[str, List[int]] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not (self.missing_major or self.missing_minor or self.duplicate_ids or self.position_gaps)


def integrity_report(cards: List[Card], spreads: List[Spread]) -> IntegrityReport:
    """Check deck completeness, id uniqueness and spread position continuity.

    Problems are logged and returned; none of them is fatal.
    """
    report = IntegrityReport()

    major_numbers = {c.number for c in cards if c.arcana == "Major"}
    report.missing_major = [n for n in range(22) if n not in major_numbers]
    if report.missing_major:
        log.warning("Missing Major Arcana: %s", ", ".join(map(str, report.missing_major)))

    for suit in SUITS:
        numbers = {c.number for c in cards if c.suit == suit}
        missing = [n for n in range(1, 15) if n not in numbers]
        if missing:
            report.missing_minor[suit] = missing
            log.warning("Missing %s cards: %s", suit, ", ".join(map(str, missing)))

    seen = set()
    for c in cards:
        if c.id in seen and c.id not in report.duplicate_ids:
            report.duplicate_ids.append(c.id)
        seen.add(c.id)
    if report.duplicate_ids:
        log.warning("Duplicate card ids: %s", ", ".join(report.duplicate_ids))

    for s in spreads:
        indices = {p.index for p in s.positions}
        gaps = [n for n in range(len(s.positions)) if n not in indices]
        if gaps:
            report.position_gaps[s.id] = gaps
            log.warning('Spread "%s" has position gaps: %s', s.name, ", ".join(map(str, gaps)))

    return report


class Catalog:
    """In-memory catalog held by the caller; the engine receives its lists."""

    def __init__(self, cards: List[Card], spreads: List[Spread], combination_rules: List[CombinationRule]):
        self.cards = list(cards)
        self.spreads = list(spreads)
        self.combination_rules = list(combination_rules)
        self._cards_by_id = {c.id: c for c in self.cards}
        self._spreads_by_id = {s.id: s for s in self.spreads}

    @classmethod
    def load(cls, data_dir: Optional[Path] = None) -> "Catalog":
        d = Path(data_dir or config.data_dir())
        return cls(
            load_cards(d / CARDS_FILE),
            load_spreads(d / SPREADS_FILE),
            load_combination_rules(d / RULES_FILE),
        )

    @classmethod
    def from_config(cls) -> "Catalog":
        return cls.load(config.data_dir())

    def has_card(self, card_id: str) -> bool:
        return card_id in self._cards_by_id

    def get_card(self, card_id: str) -> Card:
        try:
            return self._cards_by_id[card_id]
        except KeyError:
            raise CatalogError(f"Unknown card id: {card_id}") from None

    def get_spread(self, spread_id: str) -> Spread:
        try:
            return self._spreads_by_id[spread_id]
        except KeyError:
            raise CatalogError(f"Unknown spread id: {spread_id}") from None

    def active_spreads(self) -> List[Spread]:
        return [s for s in self.spreads if s.is_active]

    def active_rules(self) -> List[CombinationRule]:
        return [r for r in self.combination_rules if r.is_active]

    def integrity_report(self) -> IntegrityReport:
        return integrity_report(self.cards, self.spreads)

    def stats(self) -> Dict[str, int]:
        return {
            "total_cards": len(self.cards),
            "major_arcana": sum(1 for c in self.cards if c.arcana == "Major"),
            "minor_arcana": sum(1 for c in self.cards if c.arcana == "Minor"),
            "total_spreads": len(self.spreads),
            "active_spreads": len(self.active_spreads()),
        }
