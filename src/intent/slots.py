"""Slot extraction: structured constraints from normalized text.

Extraction is a fixed, ordered chain of extractors. Each extractor takes the text left over by the
previous one plus the slots claimed so far, and returns `(value, remaining)`: the claimed value and
the text with the matched spans removed. Order matters because later extractors must never re-match
text already claimed (numeric extraction runs after format/colors/types so that "commander" is never
read as a number).

Whatever no extractor claimed, minus stop words, becomes the residual passed to concept matching.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from functools import partial
from typing import Any, NamedTuple

from src.intent import dates
from src.intent.dictionaries import (
    CARD_TYPES,
    COLOR_MAP,
    FORMAT_MAP,
    MULTICOLOR_MAP,
    OR_GROUP_TYPES,
    PRICE_SLANG,
    RARITY_ALIASES,
    STOP_WORDS,
    SUBTYPES,
    singular_type,
)
from src.intent.schema import ColorSlot, ExtractedSlots, NumericConstraint, TypeSlots

_MULTISPACE_RE = re.compile(r"\s+")


def _clean(text: str) -> str:
    return _MULTISPACE_RE.sub(" ", text).strip()


def _cut(text: str, match: re.Match[str]) -> str:
    return _clean(text[: match.start()] + " " + text[match.end():])


def _alternation(words: tuple[str, ...] | list[str]) -> str:
    return "|".join(re.escape(w) for w in sorted(words, key=lambda w: (-len(w), w)))


# ---------------------------------------------------------------------------
# Format


def _format_patterns(alias: str) -> tuple[re.Pattern[str], ...]:
    a = re.escape(alias)
    return (
        re.compile(rf"\b{a}\s+(?:legal|format|deck)\b"),
        re.compile(rf"\b(?:legal|format)\s+(?:in\s+)?{a}\b"),
        re.compile(rf"\bfor\s+{a}\b"),
        re.compile(rf"\b{a}\b"),
    )


_FORMAT_RULES: tuple[tuple[str, tuple[re.Pattern[str], ...]], ...] = tuple(
    (fmt, _format_patterns(alias)) for alias, fmt in FORMAT_MAP.items()
)


def extract_format(text: str) -> tuple[str | None, str]:
    """Claim a format mention ("modern legal", "legal in pioneer", "for commander", "pauper")."""

    for fmt, patterns in _FORMAT_RULES:
        for pattern in patterns:
            if pattern.search(text):
                return fmt, _clean(pattern.sub(" ", text))
    return None, text


# ---------------------------------------------------------------------------
# Colors

_BASE_COLORS = r"white|blue|black|red|green"
_MONO_RE = re.compile(r"\bmono[-\s]?(white|blue|black|red|green|w|u|b|r|g)\b")
_OR_COLORS_RE = re.compile(rf"\b({_BASE_COLORS})\s+or\s+({_BASE_COLORS})\b")
_AND_COLORS_RE = re.compile(rf"\b({_BASE_COLORS})\s+and\s+({_BASE_COLORS})\b")
_BARE_COLOR_RE = re.compile(rf"\b({_BASE_COLORS}|colorless)\b")
_IDENTITY_CONTEXT_RE = re.compile(
    r"\b(?:commander deck|fits into|goes into|can go in|usable in|color identity|ci)\b"
)
_EXACT_CONTEXT_RE = re.compile(r"\b(?:exactly|only|just|strictly|mono)\b")
_MULTICOLOR_RULES: tuple[tuple[str, re.Pattern[str]], ...] = tuple(
    (codes, re.compile(rf"\b{re.escape(name)}\b")) for name, codes in MULTICOLOR_MAP.items()
)


def extract_colors(text: str, *, for_commander: bool = False) -> tuple[ColorSlot | None, str]:
    """Claim a color constraint.

    Precedence: mono-color > guild/shard/wedge name > "X or Y" > "X and Y" > bare color list.
    Multicolor names always mean color identity; "mono" always means exact.
    """

    identity = for_commander or bool(_IDENTITY_CONTEXT_RE.search(text))
    exact = bool(_EXACT_CONTEXT_RE.search(text))
    mode = "identity" if identity else "color"

    match = _MONO_RE.search(text)
    if match:
        code = COLOR_MAP[match.group(1)]
        return ColorSlot(values=[code], mode="identity", operator="exact"), _cut(text, match)

    for codes, pattern in _MULTICOLOR_RULES:
        match = pattern.search(text)
        if match:
            slot = ColorSlot(values=list(codes), mode="identity", operator="exact" if exact else "within")
            return slot, _cut(text, match)

    match = _OR_COLORS_RE.search(text)
    if match:
        values = [COLOR_MAP[match.group(1)], COLOR_MAP[match.group(2)]]
        return ColorSlot(values=values, mode=mode, operator="or"), _cut(text, match)

    match = _AND_COLORS_RE.search(text)
    if match:
        values = [COLOR_MAP[match.group(1)], COLOR_MAP[match.group(2)]]
        if identity:
            operator = "exact" if exact else "within"
        else:
            operator = "and"
        return ColorSlot(values=values, mode=mode, operator=operator), _cut(text, match)

    found = [m.group(1) for m in _BARE_COLOR_RE.finditer(text)]
    if found:
        values = list(dict.fromkeys(COLOR_MAP[c] for c in found))
        if len(values) > 1:
            operator = "and"
        else:
            operator = "exact" if exact else "include"
        remaining = _clean(_BARE_COLOR_RE.sub(" ", text))
        return ColorSlot(values=values, mode=mode, operator=operator), remaining

    return None, text


# ---------------------------------------------------------------------------
# Types


class _TypeBuckets:
    """Mutable builder that keeps the include / include_or / exclude buckets disjoint."""

    def __init__(self) -> None:
        self.include: list[str] = []
        self.include_or: list[str] = []
        self.exclude: list[str] = []

    def _taken(self, value: str) -> bool:
        return value in self.include or value in self.include_or or value in self.exclude

    def add_include(self, value: str) -> None:
        if not self._taken(value):
            self.include.append(value)

    def add_or(self, value: str) -> None:
        if not self._taken(value):
            self.include_or.append(value)

    def add_exclude(self, value: str) -> None:
        """Explicit negation wins over any positive mention of the same type."""

        if value in self.include:
            self.include.remove(value)
        if value in self.include_or:
            self.include_or.remove(value)
        if value not in self.exclude:
            self.exclude.append(value)

    def build(self) -> TypeSlots:
        return TypeSlots(include=list(self.include), include_or=list(self.include_or), exclude=list(self.exclude))

    @classmethod
    def from_slots(cls, types: TypeSlots) -> _TypeBuckets:
        buckets = cls()
        buckets.include = list(types.include)
        buckets.include_or = list(types.include_or)
        buckets.exclude = list(types.exclude)
        return buckets


_OR_TYPE = rf"(?:{_alternation(OR_GROUP_TYPES)})s?"
_UTILITY_LAND_RE = re.compile(r"\butility\s+lands?\b")
_OR_TYPE_RES: tuple[re.Pattern[str], ...] = (
    re.compile(rf"\b{_OR_TYPE}(?:\s*,\s*{_OR_TYPE})+\s*,?\s*or\s+{_OR_TYPE}\b"),
    re.compile(rf"\b{_OR_TYPE}\s+or\s+{_OR_TYPE}\b"),
)
_OR_TYPE_WORD_RE = re.compile(rf"\b({_alternation(OR_GROUP_TYPES)})")
_SPELLS_RE = re.compile(r"\bspells?\b")
_TARGET_CREATURE_RE = re.compile(r"\b(?:equipped|enchanted)\s+creatures?\b")
_NEGATED_TYPE_RES: tuple[tuple[str, re.Pattern[str]], ...] = tuple(
    (
        t,
        re.compile(
            rf"\b(?:(?:not|isn't|isnt|aren't|arent|without)\s+(?:an?\s+)?|no\s+|non[-\s]?){t}s?\b"
        ),
    )
    for t in CARD_TYPES
)
_POSITIVE_TYPE_RES: tuple[tuple[str, re.Pattern[str]], ...] = tuple(
    (t, re.compile(rf"\b{t}s?\b")) for t in CARD_TYPES
)


def extract_types(text: str) -> tuple[TypeSlots, str]:
    """Claim card type constraints.

    Order inside the extractor:
        1. "utility lands" -> land, excluding basic.
        2. Explicit OR phrasing ("artifacts or lands", "creatures, artifacts, or lands").
        3. "spells" -> instant OR sorcery, unless either is already OR-ed.
        4. Negated types ("not a creature", "non-artifact", "no lands").
        5. Remaining single types, AND-ed.
    """

    remaining = text
    buckets = _TypeBuckets()

    if _UTILITY_LAND_RE.search(remaining):
        buckets.add_include("land")
        buckets.add_exclude("basic")
        remaining = _clean(_UTILITY_LAND_RE.sub(" ", remaining))

    for pattern in _OR_TYPE_RES:
        while True:
            match = pattern.search(remaining)
            if not match:
                break
            for word in _OR_TYPE_WORD_RE.findall(match.group(0)):
                buckets.add_or(word)
            remaining = _cut(remaining, match)

    if (
        _SPELLS_RE.search(remaining)
        and "instant" not in buckets.include_or
        and "sorcery" not in buckets.include_or
    ):
        buckets.add_or("instant")
        buckets.add_or("sorcery")
        remaining = _clean(_SPELLS_RE.sub(" ", remaining))

    for type_name, pattern in _NEGATED_TYPE_RES:
        if pattern.search(remaining):
            buckets.add_exclude(type_name)
            remaining = _clean(pattern.sub(" ", remaining))

    targets_creature = bool(_TARGET_CREATURE_RE.search(text))
    for type_name, pattern in _POSITIVE_TYPE_RES:
        if type_name in buckets.include_or or type_name in buckets.exclude:
            continue
        if not pattern.search(remaining):
            continue
        remaining = _clean(pattern.sub(" ", remaining))
        if type_name == "creature" and targets_creature:
            # "equipped creature" names what an equipment affects, not the result type.
            continue
        buckets.add_include(type_name)

    return buckets.build(), remaining


_SUBTYPE_RE = re.compile(rf"\b({_alternation(list(SUBTYPES))})\b")


def extract_subtypes(text: str) -> tuple[list[str], str]:
    """Claim creature/artifact/enchantment subtypes, singularized."""

    found = [SUBTYPES[m.group(1)] for m in _SUBTYPE_RE.finditer(text)]
    if not found:
        return [], text
    return list(dict.fromkeys(found)), _clean(_SUBTYPE_RE.sub(" ", text))


# ---------------------------------------------------------------------------
# Numbers

MV_ALIASES: tuple[str, ...] = ("mana value", "mana", "mv", "cost", "costs")
POWER_ALIASES: tuple[str, ...] = ("power", "pow")
TOUGHNESS_ALIASES: tuple[str, ...] = ("toughness", "tou")
_OTHER_NUMERIC_UNITS: tuple[str, ...] = ("usd", "year", "dollar", "dollars")
_ALL_UNITS: tuple[str, ...] = MV_ALIASES + POWER_ALIASES + TOUGHNESS_ALIASES + _OTHER_NUMERIC_UNITS
_OP = r"(>=|<=|>|<|=)"


@dataclass(frozen=True)
class _NumericForm:
    pattern: re.Pattern[str]
    op: str | None
    # "unit": the form names its own unit before the number; "trailing": after it; "bare": neither.
    anchor: str


def _numeric_forms(aliases: tuple[str, ...]) -> tuple[_NumericForm, ...]:
    a = rf"(?:{_alternation(aliases)})"
    return (
        _NumericForm(re.compile(rf"\b{a}\s*{_OP}\s*(\d+)\b"), None, "unit"),
        _NumericForm(re.compile(rf"{_OP}(\d+)(?:\s*{a}\b)?"), None, "bare"),
        _NumericForm(re.compile(rf"\b{a}\s*(\d+)\s+or\s+less\b"), "<=", "unit"),
        _NumericForm(re.compile(rf"\b{a}\s*(\d+)\s+or\s+more\b"), ">=", "unit"),
        _NumericForm(re.compile(rf"\b(\d+)\s*{a}\b"), "=", "trailing"),
        _NumericForm(re.compile(rf"\b{a}\s*(\d+)\b"), "=", "unit"),
    )


_CURRENCY_AFTER_RE = re.compile(r"^\s*dollars?\b")


def _foreign_guards(aliases: tuple[str, ...]) -> tuple[re.Pattern[str], re.Pattern[str]]:
    own = set(aliases)
    foreign = tuple(u for u in _ALL_UNITS if u not in own)
    alt = _alternation(foreign)
    before = re.compile(rf"\b(?:{alt})\s*(?:>=|<=|>|<|=)?\s*$")
    after = re.compile(rf"^\s*(?:{alt})\b")
    return before, after


def extract_numeric(text: str, aliases: tuple[str, ...]) -> tuple[NumericConstraint | None, str]:
    """Claim one numeric comparison for a quantity named by `aliases`.

    Accepted forms: `mana value <=3`, `<=3 mana value`, `mana value 3 or less`,
    `mana value 3 or more`, `3 mana value`, `mana value 3`. A bare number that sits next to another
    quantity's unit word (`usd<5`, `power >=4`) is left for that quantity; a number already tied to
    its own unit keeps it even when another quantity follows (`power >=4 toughness <=2`).
    """

    before, after = _foreign_guards(aliases)
    for form in _numeric_forms(aliases):
        for match in form.pattern.finditer(text):
            head, tail = text[: match.start()], text[match.end():]
            if form.anchor == "unit":
                rejected = bool(_CURRENCY_AFTER_RE.search(tail))
            elif form.anchor == "trailing":
                rejected = bool(before.search(head))
            else:
                rejected = bool(before.search(head) or after.search(tail))
            if rejected:
                continue
            groups = [g for g in match.groups() if g is not None]
            op = form.op or groups[0]
            value = int(groups[-1])
            return NumericConstraint(op=op, value=value), _cut(text, match)
    return None, text


_YEAR_KEY_RE = re.compile(r"\byear\s*(>=|<=|>|<|=)?\s*(\d{4})\b")
_YEAR_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\b(?:after|since|post)\s+(\d{4})\b"), ">"),
    (re.compile(r"\b(?:before|pre)\s+(\d{4})\b"), "<"),
    (re.compile(r"\b(?:released\s+in|from|in)\s+(\d{4})\b"), "="),
)
_RELATIVE_YEAR_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(rf"\b(?:after|since|post)\s+({dates.RELATIVE_YEAR_PATTERN})\b"), ">="),
    (re.compile(rf"\b(?:before|pre)\s+({dates.RELATIVE_YEAR_PATTERN})\b"), "<"),
    (re.compile(rf"\b(?:released\s+in|from|in)\s+({dates.RELATIVE_YEAR_PATTERN})\b"), "="),
)
_RECENT_RE = re.compile(r"\b(?:recent|new)\s+cards?\b")
_OLD_RE = re.compile(r"\b(?:old|classic)\s+cards?\b")
_RECENT_WINDOW_YEARS = 2
_OLD_CARDS_BEFORE = 2003


def extract_year(text: str) -> tuple[NumericConstraint | None, str]:
    """Claim a release-year constraint (absolute, relative, or "recent"/"old cards")."""

    match = _YEAR_KEY_RE.search(text)
    if match:
        return NumericConstraint(op=match.group(1) or "=", value=int(match.group(2))), _cut(text, match)

    for pattern, op in _YEAR_RULES:
        match = pattern.search(text)
        if match:
            return NumericConstraint(op=op, value=int(match.group(1))), _cut(text, match)

    for pattern, op in _RELATIVE_YEAR_RULES:
        match = pattern.search(text)
        if match:
            year = dates.resolve_relative_year(match.group(1))
            if year is not None:
                return NumericConstraint(op=op, value=year), _cut(text, match)

    match = _RECENT_RE.search(text)
    if match:
        value = dates.current_year() - _RECENT_WINDOW_YEARS
        return NumericConstraint(op=">=", value=value), _cut(text, match)

    match = _OLD_RE.search(text)
    if match:
        return NumericConstraint(op="<", value=_OLD_CARDS_BEFORE), _cut(text, match)

    return None, text


_USD_RE = re.compile(r"\busd(>=|<=|>|<|=)(\d+)\b")
_SLANG_RULES: tuple[tuple[re.Pattern[str], NumericConstraint], ...] = tuple(
    (re.compile(rf"\b{s.word}\b"), NumericConstraint(op=s.op, value=s.value)) for s in PRICE_SLANG
)


def extract_price(text: str) -> tuple[NumericConstraint | None, str]:
    """Claim a price constraint. An explicit `usd` comparison beats price slang ("cheap")."""

    match = _USD_RE.search(text)
    if match:
        remaining = _cut(text, match)
        for pattern, _ in _SLANG_RULES:
            remaining = _clean(pattern.sub(" ", remaining))
        return NumericConstraint(op=match.group(1), value=int(match.group(2))), remaining

    for pattern, constraint in _SLANG_RULES:
        if pattern.search(text):
            return constraint, _clean(pattern.sub(" ", text))

    return None, text


# ---------------------------------------------------------------------------
# Rarity and negations

_RARITY_RULES: tuple[tuple[str, re.Pattern[str]], ...] = tuple(
    (rarity, re.compile(rf"\b{re.escape(alias)}\b")) for alias, rarity in RARITY_ALIASES
)


def extract_rarity(text: str) -> tuple[str | None, str]:
    """Claim a rarity mention (longest alias first)."""

    for rarity, pattern in _RARITY_RULES:
        if pattern.search(text):
            return rarity, _clean(pattern.sub(" ", text))
    return None, text


class Negations(NamedTuple):
    """Negated terms split into card types and free text."""

    types: list[str]
    text: list[str]


_NEGATION_RE = re.compile(r"\b(?:not|without|no|doesn't|does not|isn't|is not)\s+(?:an?\s+)?([a-z]+)\b")


def extract_negations(text: str) -> tuple[Negations, str]:
    """Claim `not X` / `without X` / `no X` phrases.

    A negated card type becomes a type exclusion; any other term is excluded oracle text.
    """

    remaining = text
    types: list[str] = []
    words: list[str] = []
    while True:
        match = _NEGATION_RE.search(remaining)
        if not match:
            break
        term = match.group(1)
        type_name = singular_type(term)
        if type_name:
            if type_name not in types:
                types.append(type_name)
        elif term not in words:
            words.append(term)
        remaining = _cut(remaining, match)
    return Negations(types=types, text=words), remaining


# ---------------------------------------------------------------------------
# Chain

_STOP_WORD_RE = re.compile(rf"\b(?:{_alternation(sorted(STOP_WORDS))})\b")

Extractor = Callable[[str, Mapping[str, Any]], tuple[Any, str]]


@dataclass(frozen=True)
class SlotExtractor:
    """One named step of the extraction chain."""

    name: str
    extract: Extractor


def _format_step(text: str, found: Mapping[str, Any]) -> tuple[Any, str]:
    return extract_format(text)


def _colors_step(text: str, found: Mapping[str, Any]) -> tuple[Any, str]:
    return extract_colors(text, for_commander=found.get("format") == "commander")


def _types_step(text: str, found: Mapping[str, Any]) -> tuple[Any, str]:
    return extract_types(text)


def _subtypes_step(text: str, found: Mapping[str, Any]) -> tuple[Any, str]:
    return extract_subtypes(text)


def _numeric_step(aliases: tuple[str, ...], text: str, found: Mapping[str, Any]) -> tuple[Any, str]:
    return extract_numeric(text, aliases)


def _year_step(text: str, found: Mapping[str, Any]) -> tuple[Any, str]:
    return extract_year(text)


def _price_step(text: str, found: Mapping[str, Any]) -> tuple[Any, str]:
    return extract_price(text)


def _rarity_step(text: str, found: Mapping[str, Any]) -> tuple[Any, str]:
    return extract_rarity(text)


def _negations_step(text: str, found: Mapping[str, Any]) -> tuple[Any, str]:
    return extract_negations(text)


EXTRACTORS: tuple[SlotExtractor, ...] = (
    SlotExtractor("format", _format_step),
    SlotExtractor("colors", _colors_step),
    SlotExtractor("types", _types_step),
    SlotExtractor("subtypes", _subtypes_step),
    SlotExtractor("mv", partial(_numeric_step, MV_ALIASES)),
    SlotExtractor("power", partial(_numeric_step, POWER_ALIASES)),
    SlotExtractor("toughness", partial(_numeric_step, TOUGHNESS_ALIASES)),
    SlotExtractor("year", _year_step),
    SlotExtractor("price", _price_step),
    SlotExtractor("rarity", _rarity_step),
    SlotExtractor("negations", _negations_step),
)


def strip_stop_words(text: str) -> str:
    """Remove residual filler words and collapse whitespace."""

    return _clean(_STOP_WORD_RE.sub(" ", _clean(text)))


def extract_slots(text: str, extractors: tuple[SlotExtractor, ...] = EXTRACTORS) -> ExtractedSlots:
    """Run the extractor chain over normalized text and build the slot bag."""

    remaining = _clean(text or "")
    found: dict[str, Any] = {}
    for extractor in extractors:
        value, remaining = extractor.extract(remaining, found)
        found[extractor.name] = value

    types: TypeSlots = found.get("types") or TypeSlots()
    negations: Negations = found.get("negations") or Negations(types=[], text=[])
    if negations.types:
        buckets = _TypeBuckets.from_slots(types)
        for type_name in negations.types:
            buckets.add_exclude(type_name)
        types = buckets.build()

    return ExtractedSlots(
        format=found.get("format"),
        colors=found.get("colors"),
        types=types,
        subtypes=found.get("subtypes") or [],
        mv=found.get("mv"),
        power=found.get("power"),
        toughness=found.get("toughness"),
        year=found.get("year"),
        price=found.get("price"),
        rarity=found.get("rarity"),
        exclude_text=list(negations.text),
        residual=strip_stop_words(remaining),
    )
