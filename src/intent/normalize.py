"""Text normalization for deterministic query translation.

The normalizer lowercases, applies the synonym and shorthand tables, spells digits for number words
and rewrites comparison phrases into operator form (`"under $5"` -> `usd<5`). Quoted phrases are
recorded and protected from every rewrite.

Normalization is idempotent: feeding the normalized text back in returns it unchanged.
"""

from __future__ import annotations

import re

from src.intent.dictionaries import MULTICOLOR_MAP, SHORTHAND, SYNONYMS, WORD_NUMBERS
from src.intent.schema import ColorMapping, NormalizedQuery, NumberMapping

_QUOTED_RE = re.compile(r"[\"“”]([^\"“”]+)[\"“”]")
_MULTISPACE_RE = re.compile(r"\s+")
_PLACEHOLDER_RE = re.compile("\x00([\ue000-\uf8ff])\x00")


def _word_re(phrase: str) -> re.Pattern[str]:
    return re.compile(rf"\b{re.escape(phrase)}\b", flags=re.IGNORECASE)


_SYNONYM_RULES: tuple[tuple[re.Pattern[str], str], ...] = tuple(
    (_word_re(src), dst) for src, dst in SYNONYMS.items()
)
_SHORTHAND_RULES: tuple[tuple[re.Pattern[str], str], ...] = tuple(
    (_word_re(src), dst) for src, dst in SHORTHAND.items()
)
_MULTICOLOR_RULES: tuple[tuple[str, str, re.Pattern[str]], ...] = tuple(
    (name, codes, _word_re(name)) for name, codes in MULTICOLOR_MAP.items()
)
_NUMBER_RULES: tuple[tuple[str, int, re.Pattern[str]], ...] = tuple(
    (word, value, _word_re(word)) for word, value in WORD_NUMBERS.items()
)

_LESS = r"(?:under|below|less\s+than)"
_MORE = r"(?:over|above|more\s+than)"

# Dollar forms must run before the plain comparison rules.
_PRICE_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(rf"\$(\d+)\s+or\s+less\b|\b(\d+)\s*dollars?\s+or\s+less\b"), "usd<="),
    (re.compile(rf"\$(\d+)\s+or\s+more\b|\b(\d+)\s*dollars?\s+or\s+more\b"), "usd>="),
    (re.compile(rf"\b{_LESS}\s*\$(\d+)|\b{_LESS}\s+(\d+)\s*dollars?\b"), "usd<"),
    (re.compile(rf"\b{_MORE}\s*\$(\d+)|\b{_MORE}\s+(\d+)\s*dollars?\b"), "usd>"),
)
_BARE_DOLLAR_RE = re.compile(r"\$(\d+)")

_COMPARISON_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\b(\d+)\s+or\s+less\b"), "<="),
    (re.compile(r"\b(\d+)\s+or\s+more\b"), ">="),
    (re.compile(r"\b(\d+)\s+and\s+under\b"), "<="),
    (re.compile(r"\b(\d+)\s+and\s+over\b"), ">="),
    (re.compile(r"\bless\s+than\s+(\d+)\b"), "<"),
    (re.compile(r"\bmore\s+than\s+(\d+)\b"), ">"),
    (re.compile(r"\bunder\s+(\d+)\b"), "<"),
    (re.compile(r"\bover\s+(\d+)\b"), ">"),
    (re.compile(r"\bat\s+least\s+(\d+)\b"), ">="),
    (re.compile(r"\bat\s+most\s+(\d+)\b"), "<="),
)

_RAW_SYNTAX_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\b[a-z]+[:=<>]", flags=re.IGNORECASE),
    re.compile(r"\(.*\bor\b.*\)", flags=re.IGNORECASE),
    re.compile(r"^-[a-z]+:", flags=re.IGNORECASE),
    re.compile(r'\bo:"[^"]+"'),
    re.compile(r"\bt:[a-z]+", flags=re.IGNORECASE),
)

_TITLE_CASE_RE = re.compile(r"\b([A-Z][a-z]+(?:\s+[A-Z][a-z]+){1,3})\b")


def _protect_quotes(text: str) -> tuple[str, list[str]]:
    phrases: list[str] = []

    def _stash(match: re.Match[str]) -> str:
        phrases.append(f'"{match.group(1)}"')
        return f"\x00{chr(0xE000 + len(phrases) - 1)}\x00"

    return _QUOTED_RE.sub(_stash, text), phrases


def _restore_quotes(text: str, phrases: list[str]) -> str:
    return _PLACEHOLDER_RE.sub(lambda m: phrases[ord(m.group(1)) - 0xE000], text)


def _first_group(match: re.Match[str]) -> str:
    return next(g for g in match.groups() if g is not None)


def normalize_query(text: str) -> NormalizedQuery:
    """Normalize a raw request.

    Steps, in order:
        - Lowercase and trim.
        - Record quoted phrases, straight or curly (their text survives every later rewrite).
        - Straighten curly quotes and apostrophes outside the recorded phrases.
        - Apply whole-word synonyms, then shorthand expansion.
        - Record multicolor names (substituted later by color extraction, not here).
        - Replace number words with digits, recording each replacement.
        - Rewrite comparison phrases into operator form, price phrases first.
        - Collapse whitespace.
    """

    original = text or ""
    value = original.strip().lower()
    value, phrases = _protect_quotes(value)
    value = value.replace("“", '"').replace("”", '"')
    value = value.replace("‘", "'").replace("’", "'")

    preserved = tuple(p.strip('"') for p in phrases)

    for pattern, replacement in _SYNONYM_RULES:
        value = pattern.sub(replacement, value)
    for pattern, replacement in _SHORTHAND_RULES:
        value = pattern.sub(replacement, value)

    color_mappings = tuple(
        ColorMapping(source=name, codes=codes)
        for name, codes, pattern in _MULTICOLOR_RULES
        if pattern.search(value)
    )

    number_mappings: list[NumberMapping] = []
    for word, number, pattern in _NUMBER_RULES:
        if pattern.search(value):
            number_mappings.append(NumberMapping(source=word, value=number))
            value = pattern.sub(str(number), value)

    for pattern, op in _PRICE_RULES:
        value = pattern.sub(lambda m, op=op: f"{op}{_first_group(m)}", value)
    value = _BARE_DOLLAR_RE.sub(r"\1 dollars", value)

    for pattern, op in _COMPARISON_RULES:
        value = pattern.sub(lambda m, op=op: f"{op}{m.group(1)}", value)

    value = _MULTISPACE_RE.sub(" ", value).strip()
    value = _restore_quotes(value, phrases)

    return NormalizedQuery(
        original=original,
        normalized=value,
        preserved_phrases=preserved,
        color_mappings=color_mappings,
        number_mappings=tuple(number_mappings),
    )


def is_raw_syntax(text: str) -> bool:
    """Whether the text already looks like query syntax rather than a description."""

    value = text or ""
    return any(pattern.search(value) for pattern in _RAW_SYNTAX_PATTERNS)


def extract_card_name_candidates(text: str) -> list[str]:
    """Return likely card names: quoted phrases and 2-4 word Title Case runs of the raw text."""

    candidates = [m.group(1) for m in _QUOTED_RE.finditer(text or "")]
    candidates.extend(m.group(1) for m in _TITLE_CASE_RE.finditer(text or ""))
    return candidates
