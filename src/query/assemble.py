"""Query assembly: slots and concepts to query text.

Clause order is fixed: format, colors, OR-ed types, AND-ed types, excluded types, subtypes,
numeric constraints (mv, pow, tou, year, usd), rarity, concept templates by priority, tags,
specials, included oracle text, excluded oracle text.
"""

from __future__ import annotations

from collections.abc import Sequence

from src.intent.schema import ColorSlot, ExtractedSlots, TypeSlots
from src.query.clauses import dedupe_clauses, join_clauses, split_clauses
from src.query.conflicts import filter_concept_template_types
from src.query.schema import AssembledQuery, ConceptMatch

DEFAULT_MAX_QUERY_LENGTH = 400

_NUMERIC_FIELDS: tuple[tuple[str, str], ...] = (
    ("mv", "mv"),
    ("power", "pow"),
    ("toughness", "tou"),
    ("year", "year"),
    ("price", "usd"),
)


def build_color_clause(colors: ColorSlot) -> str:
    prefix = "ci" if colors.mode == "identity" else "c"
    values = colors.values
    if not values:
        return ""
    joined = "".join(values)

    if colors.operator == "or":
        if len(values) == 1:
            return f"{prefix}:{values[0]}"
        return "(" + " or ".join(f"{prefix}:{v}" for v in values) + ")"
    if colors.operator == "within":
        return f"{prefix}<={joined}"
    if colors.operator == "exact":
        return f"{prefix}={joined}"
    if colors.operator == "include":
        return f"{prefix}>={joined}"
    return f"{prefix}:{joined}"


def _type_clauses(types: TypeSlots) -> list[str]:
    parts: list[str] = []

    if len(types.include_or) == 1:
        parts.append(f"t:{types.include_or[0]}")
    elif types.include_or:
        parts.append("(" + " or ".join(f"t:{t}" for t in types.include_or) + ")")

    and_types = [t for t in types.include if t not in types.include_or]
    if "instant" in and_types and "sorcery" in and_types:
        # Asking for instants and sorceries means either, never both.
        parts.append("(t:instant or t:sorcery)")
        and_types = [t for t in and_types if t not in ("instant", "sorcery")]
    parts.extend(f"t:{t}" for t in and_types)

    parts.extend(f"-t:{t}" for t in types.exclude)
    return parts


def balance_parentheses(query: str) -> str:
    """Append missing `)` and drop closing parentheses that have no opener."""

    chars: list[str] = []
    depth = 0
    for char in query:
        if char == "(":
            depth += 1
        elif char == ")":
            if depth == 0:
                continue
            depth -= 1
        chars.append(char)
    return "".join(chars) + ")" * depth


def truncate_clauses(query: str, max_length: int) -> str:
    """Drop trailing whole clauses until the query fits; hard-cut only a lone oversized clause."""

    if len(query) <= max_length:
        return query
    clauses = split_clauses(query)
    while len(clauses) > 1 and len(join_clauses(clauses)) > max_length:
        clauses.pop()
    value = join_clauses(clauses)
    if len(value) > max_length:
        value = value[:max_length].rstrip()
    return value


def assemble_query(
    slots: ExtractedSlots,
    concepts: Sequence[ConceptMatch],
    *,
    max_query_length: int = DEFAULT_MAX_QUERY_LENGTH,
) -> AssembledQuery:
    """Build query text from extracted slots and matched concepts.

    Concept templates lose any `t:X` clause already covered by the slot types. A concept whose
    template (or negative template) would push the query past `max_query_length` is skipped, not
    cut; the whole query is truncated only as a last resort.
    """

    parts: list[str] = []
    applied: list[str] = []
    warnings: list[str] = []

    if slots.format:
        parts.append(f"f:{slots.format}")

    if slots.colors:
        clause = build_color_clause(slots.colors)
        if clause:
            parts.append(clause)

    parts.extend(_type_clauses(slots.types))
    parts.extend(f"t:{subtype}" for subtype in slots.subtypes)

    for field_name, key in _NUMERIC_FIELDS:
        constraint = getattr(slots, field_name)
        if constraint is not None:
            parts.append(f"{key}{constraint.op}{constraint.value}")

    if slots.rarity:
        parts.append(f"r:{slots.rarity}")

    existing_types = [*slots.types.include, *slots.types.include_or]
    for concept in sorted(concepts, key=lambda c: c.priority, reverse=True):
        template = filter_concept_template_types(concept.templates[0], existing_types)
        if not template:
            warnings.append(f'Skipped concept "{concept.concept_id}" - types already specified')
            continue
        if len(" ".join([*parts, template])) > max_query_length:
            warnings.append(f'Skipped concept "{concept.concept_id}" due to query length limit')
            continue
        parts.append(template)
        applied.append(concept.concept_id)
        for negative in concept.negative_templates:
            if len(" ".join([*parts, negative])) <= max_query_length:
                parts.append(negative)

    parts.extend(slots.tags)
    parts.extend(slots.specials)
    parts.extend(f'o:"{text}"' for text in slots.include_text)
    parts.extend(f'-o:"{text}"' for text in slots.exclude_text)

    query = join_clauses(dedupe_clauses(split_clauses(" ".join(parts))))
    query = balance_parentheses(query)
    if len(query) > max_query_length:
        query = balance_parentheses(truncate_clauses(query, max_query_length))
        warnings.append("Query truncated to maximum length")

    return AssembledQuery(query=query, parts=parts, concepts_applied=applied, warnings=warnings)


def apply_external_filters(
    query: str,
    *,
    format: str | None = None,
    color_identity: Sequence[str] | None = None,
    max_cmc: int | float | None = None,
) -> str:
    """Append caller-supplied constraints the query does not already have."""

    additions: list[str] = []
    if format and "f:" not in query:
        additions.append(f"f:{format}")
    if color_identity and "ci" not in query:
        additions.append("ci<=" + "".join(color_identity).lower())
    if max_cmc is not None and "mv" not in query:
        value = int(max_cmc) if float(max_cmc).is_integer() else max_cmc
        additions.append(f"mv<={value}")
    if not additions:
        return query
    return f"{query} {' '.join(additions)}".strip()
