"""Deterministic fast path.

The fast path is a separate, simpler text-to-query shortcut computed from the raw request. The
pipeline treats it as a collaborator behind the `FastPath` protocol: when it explains the whole
request, slot extraction and concept matching are skipped entirely.

`KeywordFastPath` is the default implementation. It claims card types (`t:creature`), supertypes
(`t:legendary`), type exclusions (`-t:land`), evergreen keyword abilities (`kw:flying`) and filler
words. Everything it does not recognize is reported back as `remaining_query`.
"""

from __future__ import annotations

import re
from typing import Protocol

from pydantic import BaseModel, ConfigDict, Field

from src.intent.dictionaries import CARD_TYPES, EVERGREEN_KEYWORDS, STOP_WORDS, SUPERTYPES, singular_type

FILLER_WORDS: frozenset[str] = STOP_WORDS | {
    "all",
    "and",
    "any",
    "find",
    "give",
    "me",
    "of",
    "or",
    "show",
    "some",
    "to",
}

_TOKEN_RE = re.compile(r"[a-z0-9$<>=.'/-]+")
_EXCLUSION_RE = re.compile(
    rf"\b(?:not|non|no|isn't|aren't|without|excluding)[-\s]+(?:a\s+)?"
    rf"({'|'.join(CARD_TYPES)})(?:s|es)?\b"
)
_KEYWORD_RE = re.compile(
    rf"\b({'|'.join(re.escape(k) for k in sorted(EVERGREEN_KEYWORDS, key=lambda k: (-len(k), k)))})\b"
)


class FastPathIntent(BaseModel):
    """What the fast path could not explain."""

    model_config = ConfigDict(extra="forbid")

    warnings: list[str] = Field(default_factory=list)
    remaining_query: str = ""


class FastPathResult(BaseModel):
    """Fast path output: a deterministic query plus leftovers."""

    model_config = ConfigDict(extra="forbid")

    deterministic_query: str = ""
    intent: FastPathIntent = Field(default_factory=FastPathIntent)


class FastPath(Protocol):
    """Collaborator contract for the deterministic fast path."""

    def translate(self, text: str) -> FastPathResult:
        ...


class KeywordFastPath:
    """Token-level translator for requests made only of types, supertypes and keywords."""

    def translate(self, text: str) -> FastPathResult:
        remaining = (text or "").strip().lower()
        parts: list[str] = []
        warnings: list[str] = []

        for match in _EXCLUSION_RE.finditer(remaining):
            clause = f"-t:{match.group(1)}"
            if clause not in parts:
                parts.append(clause)
        remaining = _EXCLUSION_RE.sub(" ", remaining)

        for match in _KEYWORD_RE.finditer(remaining):
            clause = f"kw:{match.group(1).replace(' ', '-')}"
            if clause not in parts:
                parts.append(clause)
        remaining = _KEYWORD_RE.sub(" ", remaining)

        supertypes: list[str] = []
        runs: list[tuple[list[str], bool]] = []
        current: list[str] = []
        joined_by_or = False
        leftover: list[str] = []
        for token in _TOKEN_RE.findall(remaining):
            word = token.strip(".'")
            if not word:
                continue
            if word in SUPERTYPES:
                supertypes.append(f"t:{word}")
                continue
            type_name = singular_type(word)
            if type_name:
                if type_name not in current:
                    current.append(type_name)
                continue
            if word == "or" and current:
                joined_by_or = True
                continue
            if word in FILLER_WORDS:
                continue
            # Any other word ends a run of adjacent types.
            if current:
                runs.append((current, joined_by_or))
                if joined_by_or and len(current) == 1:
                    leftover.append("or")
                current, joined_by_or = [], False
            leftover.append(token)
        if current:
            runs.append((current, joined_by_or))
            if joined_by_or and len(current) == 1:
                leftover.append("or")

        for clause in supertypes:
            if clause not in parts:
                parts.append(clause)
        for types, is_or_group in runs:
            kept: list[str] = []
            for type_name in types:
                if f"-t:{type_name}" in parts:
                    warnings.append(f"Ignored t:{type_name} because it is also excluded")
                    continue
                kept.append(type_name)
            if is_or_group and len(kept) > 1:
                clauses = ["(" + " or ".join(f"t:{t}" for t in kept) + ")"]
            else:
                clauses = [f"t:{t}" for t in kept]
            for clause in clauses:
                if clause not in parts:
                    parts.append(clause)

        # Positive clauses first, then exclusions, then keywords.
        ordered = (
            [p for p in parts if p.startswith(("t:", "("))]
            + [p for p in parts if p.startswith("-t:")]
            + [p for p in parts if p.startswith("kw:")]
        )
        return FastPathResult(
            deterministic_query=" ".join(ordered),
            intent=FastPathIntent(warnings=warnings, remaining_query=" ".join(leftover)),
        )
