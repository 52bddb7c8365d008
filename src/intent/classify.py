"""Coarse intent classification.

Two independent rule families run over the normalized text:
    - mode rules pick the request mode (highest-confidence matching rule wins, `find_cards` by
      default);
    - function rules tag the card functions being asked for (one entry per function, ranked by
      confidence).

The ambiguity detector is separate: it only looks at very short requests whose single term is both
a card name and a category, or both a creature type and a strategy.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from src.intent.dictionaries import SUBTYPES
from src.intent.schema import (
    AmbiguityResult,
    CardFunction,
    ClassifiedIntent,
    FunctionMatch,
    IntentMode,
    Suggestion,
)

_DEFAULT_MODE_CONFIDENCE = 0.5
_NAME_RATIO_THRESHOLD = 0.7
_AMBIGUITY_MAX_WORDS = 2


@dataclass(frozen=True)
class _Rule:
    patterns: tuple[re.Pattern[str], ...]
    confidence: float

    def matches(self, text: str) -> bool:
        return any(p.search(text) for p in self.patterns)


def _rule(confidence: float, *patterns: str) -> _Rule:
    return _Rule(patterns=tuple(re.compile(p, flags=re.IGNORECASE) for p in patterns), confidence=confidence)


FAMOUS_CARD_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(rf"\b{name}\b", flags=re.IGNORECASE)
    for name in (
        "sol ring",
        "lightning bolt",
        "black lotus",
        "path to exile",
        "swords to plowshares",
        "rhystic study",
        "smothering tithe",
        "dockside extortionist",
        "mana crypt",
    )
)

MODE_RULES: tuple[tuple[IntentMode, _Rule], ...] = (
    (IntentMode.find_card_by_name, _rule(0.7, r"^[a-z][a-z',\s-]{2,40}$", r'"[^"]+"')),
    (
        IntentMode.rules_question,
        _rule(0.8, r"\bhow does\b", r"\bwhat happens when\b", r"\bcan i\b", r"\bdoes.+work\b", r"\brules?\b"),
    ),
    (
        IntentMode.deck_help,
        _rule(
            0.75,
            r"\bfor my deck\b",
            r"\bin my.+deck\b",
            r"\bwith my commander\b",
            r"\bgoes well with\b",
            r"\bsynergizes?\b",
        ),
    ),
)

FUNCTION_RULES: tuple[tuple[CardFunction, _Rule], ...] = (
    (
        CardFunction.ramp,
        _rule(0.9, r"\bramp\b", r"\bmana acceleration\b", r"\bmana rocks?\b", r"\bmana dorks?\b",
              r"\bfast mana\b", r"\baccelerant\b"),
    ),
    (
        CardFunction.removal,
        _rule(0.85, r"\bremoval\b", r"\bkill spell\b", r"\bdestroy.+creature\b", r"\bexile.+creature\b"),
    ),
    (
        CardFunction.counterspell,
        _rule(0.9, r"\bcounterspell\b", r"\bcounter.+spell\b", r"\bcounter magic\b", r"\bnegate\b"),
    ),
    (
        CardFunction.draw,
        _rule(0.85, r"\bcard draw\b", r"\bdraw.+cards?\b", r"\bcard advantage\b", r"\bcantrips?\b"),
    ),
    (CardFunction.tutor, _rule(0.9, r"\btutors?\b", r"\bsearch.+library\b", r"\bfind.+card\b")),
    (
        CardFunction.wipe,
        _rule(0.9, r"\bboard\s*wipes?\b", r"\bwrath\b", r"\bsweepers?\b", r"\bmass removal\b",
              r"\bdestroy all\b"),
    ),
    (
        CardFunction.reanimation,
        _rule(0.85, r"\breanimation\b", r"\breanimate\b", r"\breturn.+graveyard.+battlefield\b",
              r"\braise dead\b"),
    ),
    (
        CardFunction.recursion,
        _rule(0.8, r"\brecursion\b", r"\brecursive\b", r"\breturn.+graveyard\b", r"\bregrowth\b"),
    ),
    (CardFunction.blink, _rule(0.9, r"\bblink\b", r"\bflicker\b", r"\bexile.+return\b", r"\betb abuse\b")),
    (CardFunction.stax, _rule(0.85, r"\bstax\b", r"\bprison\b", r"\block\s*down\b", r"\btax effects?\b")),
    (
        CardFunction.tokens,
        _rule(0.8, r"\btokens?\b", r"\btoken generator\b", r"\bmake tokens\b", r"\bcreate.+tokens?\b"),
    ),
    (
        CardFunction.sacrifice,
        _rule(0.85, r"\bsacrifice\b", r"\bsac outlet\b", r"\baristocrats\b", r"\bdeath triggers?\b"),
    ),
    (CardFunction.graveyard, _rule(0.75, r"\bgraveyard\b", r"\bmill\b", r"\bself[- ]?mill\b", r"\bdredge\b")),
    (
        CardFunction.lifegain,
        _rule(0.85, r"\blifegain\b", r"\bgain life\b", r"\bsoul sisters?\b", r"\blife total\b"),
    ),
    (CardFunction.wheel, _rule(0.9, r"\bwheel\b", r"\bdiscard.+draw 7\b", r"\bwheel of fortune\b")),
    (
        CardFunction.voltron,
        _rule(0.8, r"\bvoltron\b", r"\bequipment\b", r"\baura\b", r"\bcommander damage\b"),
    ),
)

_QUOTED_RE = re.compile(r'"([^"]+)"')
_COUNTERSPELL_RE = re.compile(r"\bcounterspell\b", flags=re.IGNORECASE)
_TRIBES: tuple[str, ...] = ("elves", "goblins", "zombies", "dragons", "angels")


def classify_intent(text: str) -> ClassifiedIntent:
    """Classify a normalized request into a mode and a ranked list of card functions."""

    query = (text or "").strip().lower()

    card_name: str | None = None
    for pattern in FAMOUS_CARD_PATTERNS:
        match = pattern.search(query)
        if match:
            card_name = match.group(0)
            break

    quoted = _QUOTED_RE.search(query)
    if quoted:
        card_name = quoted.group(1)

    mode = IntentMode.find_cards
    mode_confidence = _DEFAULT_MODE_CONFIDENCE
    for candidate, rule in MODE_RULES:
        if rule.confidence > mode_confidence and rule.matches(query):
            mode = candidate
            mode_confidence = rule.confidence

    if card_name and query and len(card_name) / len(query) > _NAME_RATIO_THRESHOLD:
        mode = IntentMode.find_card_by_name

    functions = [
        FunctionMatch(function=function, confidence=rule.confidence)
        for function, rule in FUNCTION_RULES
        if rule.matches(query)
    ]
    functions.sort(key=lambda f: f.confidence, reverse=True)

    return ClassifiedIntent(
        mode=mode,
        functions=functions,
        card_name_candidate=card_name,
        is_card_name_search=card_name is not None,
    )


def detect_ambiguity(text: str) -> AmbiguityResult:
    """Offer literal alternatives for short requests with an overloaded term.

    Requests longer than two words are never considered ambiguous.
    """

    query = (text or "").strip()
    if not query or len(query.split()) > _AMBIGUITY_MAX_WORDS:
        return AmbiguityResult()

    suggestions: list[Suggestion] = []
    if _COUNTERSPELL_RE.search(query):
        suggestions.append(Suggestion(label="Counterspell (the card)", query='!"Counterspell"'))
        suggestions.append(Suggestion(label="Counterspells (the category)", query="otag:counterspell"))

    for tribe in _TRIBES:
        if re.search(rf"\b{tribe}\b", query, flags=re.IGNORECASE):
            singular = SUBTYPES[tribe]
            suggestions.append(Suggestion(label=f"{tribe} (creatures)", query=f"t:{singular}"))
            suggestions.append(
                Suggestion(label=f"{tribe} (typal support)", query=f'o:"{singular}" -t:{singular}')
            )

    return AmbiguityResult(is_ambiguous=bool(suggestions), suggestions=suggestions)
