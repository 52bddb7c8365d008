"""Card-search lookup tables.

Static vocabulary shared by the normalizer, the slot extractors, the fast path and the sanitizer.
Everything here is built once at import time and never mutated afterwards. Phrase tables that are
scanned in order are sorted longest-first so that "mythic rare" wins over "mythic".
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from src.intent.schema import Comparator

COLOR_MAP: Mapping[str, str] = MappingProxyType(
    {
        "white": "w",
        "w": "w",
        "blue": "u",
        "u": "u",
        "black": "b",
        "b": "b",
        "red": "r",
        "r": "r",
        "green": "g",
        "g": "g",
        "colorless": "c",
        "c": "c",
    }
)

COLOR_NAMES: Mapping[str, str] = MappingProxyType(
    {"w": "white", "u": "blue", "b": "black", "r": "red", "g": "green", "c": "colorless"}
)

MULTICOLOR_MAP: Mapping[str, str] = MappingProxyType(
    {
        # Guilds.
        "azorius": "wu",
        "dimir": "ub",
        "rakdos": "br",
        "gruul": "rg",
        "selesnya": "gw",
        "orzhov": "wb",
        "izzet": "ur",
        "golgari": "bg",
        "boros": "rw",
        "simic": "gu",
        # Shards and wedges.
        "bant": "gwu",
        "esper": "wub",
        "grixis": "ubr",
        "jund": "brg",
        "naya": "rgw",
        "abzan": "wbg",
        "jeskai": "urw",
        "sultai": "bgu",
        "mardu": "rwb",
        "temur": "gur",
        # Four colors.
        "yore-tiller": "wubr",
        "glint-eye": "ubrg",
        "dune-brood": "brgw",
        "ink-treader": "rgwu",
        "witch-maw": "gwub",
        "sans-white": "ubrg",
        "sans-blue": "brgw",
        "sans-black": "rgwu",
        "sans-red": "gwub",
        "sans-green": "wubr",
    }
)

CARD_TYPES: tuple[str, ...] = (
    "creature",
    "artifact",
    "enchantment",
    "instant",
    "sorcery",
    "land",
    "planeswalker",
    "battle",
    "kindred",
    "equipment",
)

# Types that may be OR-ed together in phrases like "artifacts or lands".
OR_GROUP_TYPES: tuple[str, ...] = (
    "artifact",
    "creature",
    "instant",
    "sorcery",
    "land",
    "enchantment",
    "planeswalker",
)

SUPERTYPES: tuple[str, ...] = ("legendary", "basic", "snow")

FORMAT_MAP: Mapping[str, str] = MappingProxyType(
    {
        "commander": "commander",
        "edh": "commander",
        "modern": "modern",
        "standard": "standard",
        "pioneer": "pioneer",
        "legacy": "legacy",
        "vintage": "vintage",
        "pauper": "pauper",
        "historic": "historic",
        "brawl": "brawl",
        "alchemy": "alchemy",
        "explorer": "explorer",
        "timeless": "timeless",
    }
)

_RARITY_ALIASES: dict[str, str] = {
    "common": "common",
    "commons": "common",
    "uncommon": "uncommon",
    "uncommons": "uncommon",
    "rare": "rare",
    "rares": "rare",
    "mythic": "mythic",
    "mythics": "mythic",
    "mythic rare": "mythic",
}

RARITY_ALIASES: tuple[tuple[str, str], ...] = tuple(
    sorted(_RARITY_ALIASES.items(), key=lambda item: (-len(item[0]), item[0]))
)

SUBTYPES: Mapping[str, str] = MappingProxyType(
    {
        "elf": "elf",
        "elves": "elf",
        "goblin": "goblin",
        "goblins": "goblin",
        "zombie": "zombie",
        "zombies": "zombie",
        "vampire": "vampire",
        "vampires": "vampire",
        "dragon": "dragon",
        "dragons": "dragon",
        "angel": "angel",
        "angels": "angel",
        "demon": "demon",
        "demons": "demon",
        "spirit": "spirit",
        "spirits": "spirit",
        "human": "human",
        "humans": "human",
        "wizard": "wizard",
        "wizards": "wizard",
        "warrior": "warrior",
        "warriors": "warrior",
        "soldier": "soldier",
        "soldiers": "soldier",
        "merfolk": "merfolk",
        "elemental": "elemental",
        "elementals": "elemental",
        "sliver": "sliver",
        "slivers": "sliver",
        "dinosaur": "dinosaur",
        "dinosaurs": "dinosaur",
        "knight": "knight",
        "knights": "knight",
        "cleric": "cleric",
        "clerics": "cleric",
        "rogue": "rogue",
        "rogues": "rogue",
        "pirate": "pirate",
        "pirates": "pirate",
        "cat": "cat",
        "cats": "cat",
        "dog": "dog",
        "dogs": "dog",
        "bird": "bird",
        "birds": "bird",
        "beast": "beast",
        "beasts": "beast",
        "equipment": "equipment",
        "aura": "aura",
        "auras": "aura",
        "saga": "saga",
        "sagas": "saga",
        "vehicle": "vehicle",
        "vehicles": "vehicle",
    }
)


@dataclass(frozen=True)
class PriceSlang:
    """A price-slang word and the price constraint it implies."""

    word: str
    op: Comparator
    value: int


PRICE_SLANG: tuple[PriceSlang, ...] = (
    PriceSlang("cheap", "<", 5),
    PriceSlang("budget", "<", 5),
    PriceSlang("affordable", "<", 5),
    PriceSlang("inexpensive", "<", 5),
    PriceSlang("expensive", ">", 20),
    PriceSlang("costly", ">", 20),
    PriceSlang("pricey", ">", 20),
)

WORD_NUMBERS: Mapping[str, int] = MappingProxyType(
    {
        "zero": 0,
        "one": 1,
        "two": 2,
        "three": 3,
        "four": 4,
        "five": 5,
        "six": 6,
        "seven": 7,
        "eight": 8,
        "nine": 9,
        "ten": 10,
    }
)

# Whole-word synonyms, applied before shorthand expansion.
SYNONYMS: Mapping[str, str] = MappingProxyType(
    {
        "creatures": "creature",
        "spells": "spell",
        "lands": "land",
        "artifacts": "artifact",
        "enchantments": "enchantment",
        "planeswalkers": "planeswalker",
        "instants": "instant",
        "sorceries": "sorcery",
        "tutors": "tutor",
        "counterspells": "counterspell",
        "tokens": "token",
        "budget": "cheap",
        "affordable": "cheap",
        "inexpensive": "cheap",
        "low cost": "cheap",
        "edh": "commander",
        "cmdr": "commander",
        "cmc": "mana value",
        "etbs": "etb",
        "enters the battlefield": "etb",
        "ltbs": "ltb",
        "leaves the battlefield": "ltb",
        "graveyard": "gy",
        "yard": "gy",
        "tribal": "typal",
        "draw cards": "card draw",
        "draws cards": "card draw",
        "drawing cards": "card draw",
    }
)

SHORTHAND: Mapping[str, str] = MappingProxyType(
    {
        "cmc": "mana value",
        "mv": "mana value",
        "etb": "enters the battlefield",
        "ltb": "leaves the battlefield",
        "gy": "graveyard",
        "edh": "commander",
        "cmdr": "commander",
        "pw": "planeswalker",
    }
)

STOP_WORDS: frozenset[str] = frozenset(
    {"that", "which", "with", "the", "a", "an", "card", "cards", "is", "are", "for", "in", "my"}
)

EVERGREEN_KEYWORDS: tuple[str, ...] = (
    "first strike",
    "double strike",
    "deathtouch",
    "defender",
    "flash",
    "flying",
    "haste",
    "hexproof",
    "indestructible",
    "lifelink",
    "menace",
    "reach",
    "trample",
    "vigilance",
    "ward",
)

VALID_SEARCH_KEYS: frozenset[str] = frozenset(
    {
        # Core operators.
        "c", "color", "id", "identity", "ci", "t", "type", "o", "oracle", "m", "mana", "mv",
        "cmc", "pow", "power", "tou", "toughness", "pt", "loy", "loyalty", "r", "rarity", "s",
        "set", "edition", "e", "cn", "number", "collector", "lang", "language",
        # Boolean helpers.
        "is", "not", "include", "in",
        # Formats and legality.
        "f", "format", "legal", "banned", "restricted",
        # Games.
        "game", "games", "paper", "arena", "mtgo",
        # Art.
        "art", "artist", "flavor", "watermark", "border", "frame", "full", "textless", "atag",
        "arttag",
        # Time and value.
        "year", "date", "new", "old", "usd", "eur", "tix", "cheapest",
        # Sorting.
        "order", "sort", "dir", "direction", "unique", "as", "st",
        # Special.
        "cube", "devotion", "name", "wildpair", "keyword", "kw", "has", "produces",
        # Oracle tags.
        "otag", "oracletag", "function",
    }
)


def singular_type(word: str) -> str | None:
    """Return the card type named by `word` (singular or plural), if any."""

    value = (word or "").strip().lower()
    if value in CARD_TYPES:
        return value
    if value.endswith("ies") and value[:-3] + "y" in CARD_TYPES:
        return value[:-3] + "y"
    if value.endswith("s") and value[:-1] in CARD_TYPES:
        return value[:-1]
    return None


def color_codes_to_names(codes: list[str] | tuple[str, ...]) -> list[str]:
    """Map color codes back to their English names for explanations."""

    return [COLOR_NAMES.get(code, code) for code in codes]
