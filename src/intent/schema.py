"""Parsing-side data model (Pydantic models).

These models carry one request's text through normalization, intent classification and slot
extraction. They are created fresh per request and never shared between requests.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class IntentMode(StrEnum):
    """Coarse request modes."""

    find_cards = "find_cards"
    find_card_by_name = "find_card_by_name"
    rules_question = "rules_question"
    deck_help = "deck_help"


class CardFunction(StrEnum):
    """Gameplay roles a request may ask for."""

    ramp = "ramp"
    removal = "removal"
    counterspell = "counterspell"
    draw = "draw"
    tutor = "tutor"
    wipe = "wipe"
    reanimation = "reanimation"
    recursion = "recursion"
    blink = "blink"
    stax = "stax"
    tokens = "tokens"
    sacrifice = "sacrifice"
    graveyard = "graveyard"
    lifegain = "lifegain"
    wheel = "wheel"
    voltron = "voltron"
    artifacts_matter = "artifacts_matter"
    enchantress = "enchantress"
    mill = "mill"


Comparator = Literal["<", "<=", "=", ">=", ">"]
ColorMode = Literal["identity", "color"]
ColorOperator = Literal["or", "and", "exact", "within", "include"]


class ColorMapping(BaseModel):
    """A multicolor name found in the text and the color codes it stands for."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    source: str
    codes: str


class NumberMapping(BaseModel):
    """A spelled-out number replaced by digits."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    source: str
    value: int


class NormalizedQuery(BaseModel):
    """Result of normalizing one raw request."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    original: str
    normalized: str
    preserved_phrases: tuple[str, ...] = ()
    color_mappings: tuple[ColorMapping, ...] = ()
    number_mappings: tuple[NumberMapping, ...] = ()


class FunctionMatch(BaseModel):
    """One detected card function with its rule confidence."""

    model_config = ConfigDict(extra="forbid")

    function: CardFunction
    confidence: float = Field(ge=0.0, le=1.0)


class ClassifiedIntent(BaseModel):
    """Coarse classification of a request."""

    model_config = ConfigDict(extra="forbid")

    mode: IntentMode = IntentMode.find_cards
    functions: list[FunctionMatch] = Field(default_factory=list)
    card_name_candidate: str | None = None
    is_card_name_search: bool = False

    @model_validator(mode="after")
    def validate_unique_functions(self) -> ClassifiedIntent:
        """Reject duplicate function ids."""

        seen = [f.function for f in self.functions]
        if len(seen) != len(set(seen)):
            raise ValueError("functions must not contain duplicate function ids")
        return self


class Suggestion(BaseModel):
    """A literal alternative query offered for an ambiguous request."""

    model_config = ConfigDict(extra="forbid")

    label: str
    query: str


class AmbiguityResult(BaseModel):
    """Output of the ambiguity detector."""

    model_config = ConfigDict(extra="forbid")

    is_ambiguous: bool = False
    suggestions: list[Suggestion] = Field(default_factory=list)


class NumericConstraint(BaseModel):
    """A comparison against a numeric card property."""

    model_config = ConfigDict(extra="forbid")

    op: Comparator
    value: int


class ColorSlot(BaseModel):
    """Color constraint extracted from text."""

    model_config = ConfigDict(extra="forbid")

    values: list[str]
    mode: ColorMode
    operator: ColorOperator


class TypeSlots(BaseModel):
    """Card type constraints.

    `include` types are AND-ed, `include_or` types form one OR group, `exclude` types are negated.
    A type may appear in at most one of the three buckets.
    """

    model_config = ConfigDict(extra="forbid")

    include: list[str] = Field(default_factory=list)
    include_or: list[str] = Field(default_factory=list)
    exclude: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_disjoint(self) -> TypeSlots:
        """Enforce that the three buckets never share a type."""

        include, include_or, exclude = set(self.include), set(self.include_or), set(self.exclude)
        overlap = (include & include_or) | (include & exclude) | (include_or & exclude)
        if overlap:
            raise ValueError(f"type appears in more than one bucket: {sorted(overlap)}")
        return self

    def has_any(self) -> bool:
        return bool(self.include or self.include_or)


class ExtractedSlots(BaseModel):
    """Structured constraint bag produced by slot extraction."""

    model_config = ConfigDict(extra="forbid")

    format: str | None = None
    colors: ColorSlot | None = None
    types: TypeSlots = Field(default_factory=TypeSlots)
    subtypes: list[str] = Field(default_factory=list)
    mv: NumericConstraint | None = None
    power: NumericConstraint | None = None
    toughness: NumericConstraint | None = None
    year: NumericConstraint | None = None
    price: NumericConstraint | None = None
    rarity: str | None = None
    include_text: list[str] = Field(default_factory=list)
    exclude_text: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    specials: list[str] = Field(default_factory=list)
    residual: str = ""
