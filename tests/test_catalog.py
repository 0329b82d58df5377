import json
import logging
from pathlib import Path

import pytest

from tarot_decoder.catalog import (
    Catalog,
    CatalogError,
    integrity_report,
    load_cards,
    load_spreads,
    validate_card,
    validate_spread,
)
from tarot_decoder.models import Spread, SpreadPosition

DATA_DIR = Path(__file__).resolve().parents[1] / "tarot_decoder" / "data"

FOOL = {
    "id": "major-0",
    "name": "The Fool",
    "arcana": "Major",
    "number": 0,
    "keywords": ["beginnings"],
    "uprightShort": "New beginnings.",
    "uprightLong": "A leap of faith.",
    "reversedShort": "Recklessness.",
    "reversedLong": "Poor judgment.",
}


def write_json(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


@pytest.fixture(scope="module")
def catalog():
    return Catalog.load(DATA_DIR)


def test_deck_json_has_78_cards():
    data = json.loads((DATA_DIR / "tarot.json").read_text(encoding="utf-8"))
    assert len(data) == 78
    assert all(not validate_card(c, i) for i, c in enumerate(data))


def test_bundled_deck_is_complete(catalog):
    assert len(catalog.cards) == 78
    assert sum(1 for c in catalog.cards if c.arcana == "Major") == 22
    for suit in ("wands", "cups", "swords", "pentacles"):
        assert sum(1 for c in catalog.cards if c.suit == suit) == 14

    ids = [c.id for c in catalog.cards]
    assert len(ids) == len(set(ids))
    assert catalog.integrity_report().ok


def test_bundled_spreads(catalog):
    assert {s.id for s in catalog.spreads} >= {"single", "three-card", "celtic-cross"}
    for s in catalog.spreads:
        assert sorted(p.index for p in s.positions) == list(range(len(s.positions)))

    assert catalog.get_spread("single").positions[0].name == "Focus"
    assert "nine-card" not in {s.id for s in catalog.active_spreads()}


def test_stats(catalog):
    stats = catalog.stats()
    assert stats["total_cards"] == 78
    assert stats["major_arcana"] == 22
    assert stats["minor_arcana"] == 56
    assert stats["total_spreads"] == len(catalog.spreads)
    assert stats["active_spreads"] == len(catalog.spreads) - 1


def test_active_rules(catalog):
    assert len(catalog.combination_rules) == 4
    assert all(r.is_active for r in catalog.active_rules())
    assert len(catalog.active_rules()) == 3


def test_lookups(catalog):
    assert catalog.get_card("major-13").name == "Death"
    assert catalog.has_card("cups-2")
    assert not catalog.has_card("cups-15")

    with pytest.raises(CatalogError, match="Unknown card id: nope"):
        catalog.get_card("nope")
    with pytest.raises(CatalogError, match="Unknown spread id: nope"):
        catalog.get_spread("nope")


class TestValidation:
    """Per-entry validation of raw catalog records."""

    def test_valid_card(self):
        assert validate_card(FOOL) == []

    def test_minor_needs_suit(self):
        card = dict(FOOL, id="cups-1", arcana="Minor", number=1)
        assert validate_card(card, 3) == ["Card 3: Minor Arcana cards must have a suit"]

    def test_major_needs_number(self):
        card = {k: v for k, v in FOOL.items() if k != "number"}
        assert "Card 0: Major Arcana cards must have a number (0-21)" in validate_card(card)

    def test_major_number_out_of_range(self):
        assert validate_card(dict(FOOL, number=42)) == [
            "Card 0: Major Arcana cards must have a number (0-21)"
        ]

    def test_major_must_not_have_suit(self):
        assert validate_card(dict(FOOL, suit="cups")) == ["Card 0: Major Arcana cards must not have a suit"]

    def test_minor_needs_number(self):
        card = {k: v for k, v in FOOL.items() if k != "number"}
        card.update(id="cups-1", arcana="Minor", suit="cups")
        assert validate_card(card) == ["Card 0: Minor Arcana cards must have a number (1-14)"]

    def test_minor_number_out_of_range(self):
        card = dict(FOOL, id="cups-15", arcana="Minor", suit="cups", number=15)
        assert validate_card(card) == ["Card 0: Minor Arcana cards must have a number (1-14)"]

    @pytest.mark.parametrize("number", [True, False])
    def test_boolean_number_is_rejected(self, number):
        assert validate_card(dict(FOOL, number=number)) == [
            "Card 0: Major Arcana cards must have a number (0-21)"
        ]
        minor = dict(FOOL, id="cups-1", arcana="Minor", suit="cups", number=number)
        assert validate_card(minor) == ["Card 0: Minor Arcana cards must have a number (1-14)"]

    def test_missing_meaning_text(self):
        card = dict(FOOL, reversedLong="")
        assert validate_card(card) == ["Card 0: Missing or invalid reversedLong"]

    def test_spread_needs_positions(self):
        assert validate_spread({"id": "x", "name": "X", "positions": []}) == [
            "Spread 0: positions must be a non-empty array"
        ]

    def test_spread_position_fields(self):
        spread = {"id": "x", "name": "X", "positions": [{"index": "0", "name": "A"}], "isActive": "yes"}
        assert validate_spread(spread) == [
            "Spread 0, Position 0: Missing or invalid index",
            "Spread 0, Position 0: Missing or invalid roleHint",
            "Spread 0: isActive must be a boolean",
        ]


class TestLoading:
    """Reading catalog files from disk."""

    def test_invalid_entries_are_skipped(self, tmp_path, caplog):
        path = write_json(tmp_path / "tarot.json", [FOOL, dict(FOOL, id="cups-1", arcana="Minor")])

        with caplog.at_level(logging.WARNING, logger="tarot_decoder.catalog"):
            cards = load_cards(path)

        assert [c.id for c in cards] == ["major-0"]
        assert "Minor Arcana cards must have a suit" in caplog.text

    def test_missing_file(self, tmp_path):
        with pytest.raises(CatalogError, match="not found"):
            load_cards(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "spreads.json"
        path.write_text("[{", encoding="utf-8")
        with pytest.raises(CatalogError, match="Invalid JSON"):
            load_spreads(path)

    def test_top_level_must_be_array(self, tmp_path):
        path = write_json(tmp_path / "tarot.json", {"cards": [FOOL]})
        with pytest.raises(CatalogError, match="must contain an array"):
            load_cards(path)

    def test_from_config_uses_data_dir(self, tmp_path, monkeypatch):
        write_json(tmp_path / "tarot.json", [FOOL])
        write_json(tmp_path / "spreads.json", [
            {"id": "single", "name": "Single", "positions": [{"index": 0, "name": "Focus", "roleHint": "central theme"}]},
        ])
        write_json(tmp_path / "combination_rules.json", [])
        monkeypatch.setenv("TAROT_DATA_DIR", str(tmp_path))

        catalog = Catalog.from_config()

        assert [c.id for c in catalog.cards] == ["major-0"]
        assert catalog.get_spread("single").positions[0].role_hint == "central theme"
        assert catalog.combination_rules == []


class TestIntegrityReport:
    """Completeness checks over a loaded catalog."""

    def test_flags_position_gaps(self, catalog, caplog):
        gappy = Spread(
            id="gappy",
            name="Gappy",
            positions=[SpreadPosition(index=0, name="A", role_hint="a"), SpreadPosition(index=2, name="B", role_hint="b")],
        )
        with caplog.at_level(logging.WARNING, logger="tarot_decoder.catalog"):
            report = integrity_report(catalog.cards, [gappy])

        assert report.position_gaps == {"gappy": [1]}
        assert not report.ok
        assert 'Spread "Gappy" has position gaps: 1' in caplog.text

    def test_flags_missing_and_duplicate_cards(self, catalog):
        cards = [c for c in catalog.cards if c.id not in ("major-21", "cups-7")]
        cards.append(catalog.get_card("major-0"))

        report = integrity_report(cards, [])

        assert report.missing_major == [21]
        assert report.missing_minor == {"cups": [7]}
        assert report.duplicate_ids == ["major-0"]

    def test_report_dumps_like_other_records(self, catalog):
        report = integrity_report(catalog.cards, catalog.spreads)

        assert report.model_dump() == {
            "missing_major": [],
            "missing_minor": {},
            "duplicate_ids": [],
            "position_gaps": {},
        }
