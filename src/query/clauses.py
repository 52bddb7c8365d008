"""Top-level clause tokenization for query strings."""

from __future__ import annotations

BOOLEAN_WORDS: frozenset[str] = frozenset({"or", "and"})


def split_clauses(query: str) -> list[str]:
    """Split a query into top-level clauses.

    Whitespace separates clauses except inside parentheses or double quotes, so
    `(t:artifact or t:land)` and `o:"draw a card"` each stay one clause.
    """

    clauses: list[str] = []
    current: list[str] = []
    depth = 0
    in_quote = False

    for char in query or "":
        if char == '"':
            in_quote = not in_quote
        elif not in_quote:
            if char == "(":
                depth += 1
            elif char == ")" and depth > 0:
                depth -= 1
            elif char.isspace() and depth == 0:
                if current:
                    clauses.append("".join(current))
                    current = []
                continue
        current.append(char)

    if current:
        clauses.append("".join(current))
    return clauses


def join_clauses(clauses: list[str]) -> str:
    return " ".join(c for c in clauses if c).strip()


def dedupe_clauses(clauses: list[str]) -> list[str]:
    """Drop case-insensitive duplicate clauses, keeping the first. Boolean words are never dropped."""

    seen: set[str] = set()
    unique: list[str] = []
    for clause in clauses:
        key = clause.lower()
        if key in BOOLEAN_WORDS:
            unique.append(clause)
            continue
        if key in seen:
            continue
        seen.add(key)
        unique.append(clause)
    return unique
