from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Any, Dict, List, Optional, Literal

Arcana = Literal["Major", "Minor"]
Suit = Literal["wands", "cups", "swords", "pentacles"]
Orientation = Literal["upright", "reversed"]
ReversalMode = Literal["soft", "strong"]


class _Record(BaseModel):
    # snake_case in Python, camelCase on the wire; both accepted on input
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class Card(_Record):
    id: str
    name: str
    arcana: Arcana
    suit: Optional[Suit] = None
    number: Optional[int] = None
    keywords: List[str] = Field(default_factory=list)
    upright_short: str = Field(..., min_length=1)
    upright_long: str = Field(..., min_length=1)
    reversed_short: str = Field(..., min_length=1)
    reversed_long: str = Field(..., min_length=1)
    image_url: Optional[str] = None


class SpreadPosition(_Record):
    index: int
    name: str
    role_hint: str = ""
    x: Optional[float] = None
    y: Optional[float] = None


class LayoutHints(_Record):
    rows: Optional[int] = None
    cols: Optional[int] = None
    type: Optional[str] = None


class Spread(_Record):
    id: str
    name: str
    description: Optional[str] = None
    positions: List[SpreadPosition] = Field(..., min_length=1)
    layout_hints: Optional[LayoutHints] = None
    is_active: bool = True

    def position(self, index: int) -> Optional[SpreadPosition]:
        for p in self.positions:
            if p.index == index:
                return p
        return None


class PlacedCard(_Record):
    card_id: str
    orientation: Orientation
    position: int
    x: Optional[float] = None
    y: Optional[float] = None


class CombinationRule(_Record):
    id: Optional[str] = None
    name: str
    card_ids: List[str]
    condition: Optional[str] = None  # "adjacent", "any_position", ...
    modifier: str
    weight: int = 1
    is_active: bool = True


class InterpretationOptions(_Record):
    reversal_mode: ReversalMode = "soft"


class PositionInterpretation(_Record):
    slot_name: str
    card_id: str
    orientation: Orientation
    interpretation_short: str
    interpretation_long: str


class InterpretationResult(_Record):
    positions: List[PositionInterpretation]
    overall_summary: str
    keywords: List[str]
    confidence_hints: List[str]
    suggested_actions: List[str]
    dominant_suit: Optional[str] = None
    major_arcana_count: int
    reversed_count: int

    def to_dict(self) -> Dict[str, Any]:
        out = self.model_dump(by_alias=True)
        if out.get("dominantSuit") is None:
            out.pop("dominantSuit", None)
        return out
