"""Conflict detection over top-level query clauses.

Checks, in order:
    1. A simple `t:X` that also appears inside an OR group is dropped.
    2. Mutually exclusive simple types (`t:artifact t:instant`) become one OR group.
    3. OR groups over the same type set are deduplicated.
    4. `-otag:X` is dropped when `otag:X` is present.
    5. Exact duplicate clauses are dropped.
    6. `t:X` is dropped when `-t:X` is present, with a warning.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence

from src.query.clauses import split_clauses
from src.query.schema import ConflictReport

# Artifact creatures, artifact lands and enchantment creatures exist; these pairs never do.
MUTUALLY_EXCLUSIVE_TYPES: tuple[tuple[str, str], ...] = (
    ("artifact", "instant"),
    ("artifact", "sorcery"),
    ("creature", "instant"),
    ("creature", "sorcery"),
    ("land", "instant"),
    ("land", "sorcery"),
    ("enchantment", "instant"),
    ("enchantment", "sorcery"),
    ("planeswalker", "instant"),
    ("planeswalker", "sorcery"),
    ("instant", "sorcery"),
)

_SIMPLE_TYPE_RE = re.compile(r"^t:(\w+)$", flags=re.IGNORECASE)
_EXCLUDED_TYPE_RE = re.compile(r"^-t:(\w+)$", flags=re.IGNORECASE)
_GROUP_TYPE_RE = re.compile(r"(?<![-\w])t:(\w+)", flags=re.IGNORECASE)
_TAG_RE = re.compile(r"^otag:([a-z0-9-]+)$", flags=re.IGNORECASE)
_NEGATED_TAG_RE = re.compile(r"^-otag:([a-z0-9-]+)$", flags=re.IGNORECASE)


def _simple_type(clause: str) -> str | None:
    match = _SIMPLE_TYPE_RE.match(clause)
    return match.group(1).lower() if match else None


def _is_or_group(clause: str) -> bool:
    return " or " in clause.lower() and "t:" in clause.lower()


def _group_types(clause: str) -> list[str]:
    return [t.lower() for t in _GROUP_TYPE_RE.findall(clause)]


def detect_query_conflicts(parts: Sequence[str]) -> ConflictReport:
    """Resolve redundant or impossible clause combinations."""

    conflicts: list[str] = []
    warnings: list[str] = []
    clauses = [p for p in parts if p]

    simple_types = [t for t in (_simple_type(c) for c in clauses) if t]
    or_group_types = [t for c in clauses if _is_or_group(c) for t in _group_types(c)]

    redundant = [t for t in dict.fromkeys(simple_types) if t in or_group_types]
    if redundant:
        conflicts.append(f"Removed redundant type constraints: {', '.join(redundant)}")
        clauses = [c for c in clauses if _simple_type(c) not in redundant]

    remaining = [t for t in simple_types if t not in redundant]
    to_convert: list[str] = []
    for first, second in MUTUALLY_EXCLUSIVE_TYPES:
        if first in remaining and second in remaining:
            warnings.append(f"Impossible combination: cards cannot be both {first} AND {second}")
            for type_name in (first, second):
                if type_name not in to_convert:
                    to_convert.append(type_name)
    if to_convert:
        clauses = [c for c in clauses if _simple_type(c) not in to_convert]
        clauses.append("(" + " or ".join(f"t:{t}" for t in to_convert) + ")")
        conflicts.append(f"Converted impossible AND to OR: {', '.join(to_convert)}")

    seen_groups: set[tuple[str, ...]] = set()
    unique_groups: list[str] = []
    for clause in clauses:
        if _is_or_group(clause):
            key = tuple(sorted(_group_types(clause)))
            if key in seen_groups:
                continue
            seen_groups.add(key)
        unique_groups.append(clause)
    clauses = unique_groups

    tags = {m.group(1).lower() for m in (_TAG_RE.match(c) for c in clauses) if m}
    negated_tags = {m.group(1).lower() for m in (_NEGATED_TAG_RE.match(c) for c in clauses) if m}
    for tag in sorted(negated_tags & tags):
        conflicts.append(f"Removed contradictory tag constraint: otag:{tag} and -otag:{tag}")
        clauses = [c for c in clauses if c.lower() != f"-otag:{tag}"]

    seen: set[str] = set()
    deduplicated: list[str] = []
    for clause in clauses:
        key = clause.lower()
        if key in seen:
            continue
        seen.add(key)
        deduplicated.append(clause)

    excluded = [m.group(1).lower() for m in (_EXCLUDED_TYPE_RE.match(c) for c in deduplicated) if m]
    for type_name in dict.fromkeys(excluded):
        if not any(_simple_type(c) == type_name for c in deduplicated):
            continue
        warnings.append(f'Contradictory constraint: both includes and excludes type "{type_name}"')
        deduplicated = [c for c in deduplicated if _simple_type(c) != type_name]
        conflicts.append(f"Removed contradictory type constraint: t:{type_name} when -t:{type_name} present")

    return ConflictReport(conflicts=conflicts, deduplicated=deduplicated, warnings=warnings)


def filter_concept_template_types(template: str, existing_types: Iterable[str]) -> str:
    """Drop simple `t:X` clauses from a concept template when X is already constrained."""

    existing = {t.lower() for t in existing_types}
    if not existing:
        return template.strip()
    kept = [c for c in split_clauses(template) if _simple_type(c) not in existing]
    return " ".join(kept).strip()


def has_impossible_type_combination(query: str) -> bool:
    """Whether the query AND-s two types no card can have together."""

    types = {t for t in (_simple_type(c) for c in split_clauses(query)) if t}
    return any(first in types and second in types for first, second in MUTUALLY_EXCLUSIVE_TYPES)
