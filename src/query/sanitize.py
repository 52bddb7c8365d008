"""Final query sanitizer.

Every query leaves the pipeline through `sanitize_query`, including raw query syntax typed by the
user. Each fix that changes the query is reported as an issue; a query with no issues is valid.
"""

from __future__ import annotations

import re

from src.intent.dictionaries import VALID_SEARCH_KEYS
from src.query.assemble import DEFAULT_MAX_QUERY_LENGTH, truncate_clauses
from src.query.schema import SanitizeResult

_NEWLINES_RE = re.compile(r"[\r\n]+")
_MULTISPACE_RE = re.compile(r"\s+")
_UNSAFE_CHARS_RE = re.compile(r"""[^\w\s:="'()<>!+\-/*\\{}.,^$|?\[\]]""")
_YEAR_SET_RE = re.compile(r"\be:(\d{4})\b", flags=re.IGNORECASE)
_PT_MATH_RE = re.compile(r"\b(?:pow|power)\s*\+\s*(?:tou|toughness)\b", flags=re.IGNORECASE)
_PT_MATH_CLAUSE_RE = re.compile(
    r"\b(?:pow|power)\s*\+\s*(?:tou|toughness)\s*[<>=]+\s*\d+\b", flags=re.IGNORECASE
)
_ORPHAN_BRACE_RE = re.compile(r"^[^{]*}")
_KEY_RE = re.compile(r"\b([a-zA-Z]+)[:=<>]")
_QUOTED_RE = re.compile(r'"[^"]*"')
_APOSTROPHE_RE = re.compile(r"\w'\w")
_TRAILING_APOSTROPHE_RE = re.compile(r"\w'(?=\s|$)")


def normalize_or_groups(query: str) -> str:
    """Wrap top-level uppercase `A OR B` chains in parentheses."""

    tokens: list[str] = []
    current = ""
    in_quote = False
    for char in query:
        if char == '"':
            in_quote = not in_quote
        if not in_quote and char == " ":
            if current:
                tokens.append(current)
                current = ""
            continue
        current += char
    if current:
        tokens.append(current)

    output: list[str] = []
    group: list[str] = []
    depth = 0
    for index, token in enumerate(tokens):
        depth_before = depth
        depth += token.count("(") - token.count(")")

        if depth_before == 0 and token == "OR":
            if not group and output:
                group.append(output.pop())
            group.append(token)
            continue

        if group and depth_before == 0:
            group.append(token)
            following = tokens[index + 1] if index + 1 < len(tokens) else None
            if following != "OR":
                output.append("(" + " ".join(group) + ")")
                group = []
            continue

        output.append(token)

    if group:
        output.append("(" + " ".join(group) + ")")
    return " ".join(output)


def _mask_quotes(text: str) -> str:
    """Replace quoted content with same-length filler so offsets still line up."""

    return _QUOTED_RE.sub(lambda m: '"' + "x" * (len(m.group(0)) - 2) + '"', text)


def _remove_unknown_keys(query: str) -> tuple[str, list[str]]:
    masked = _mask_quotes(query)
    unknown: list[str] = []
    spans: list[tuple[int, int]] = []
    for match in _KEY_RE.finditer(masked):
        key = match.group(1).lower()
        if key in VALID_SEARCH_KEYS:
            continue
        if key not in unknown:
            unknown.append(key)
        end = match.end()
        while end < len(masked) and not masked[end].isspace():
            end += 1
        spans.append((match.start(), end))

    for start, end in reversed(spans):
        query = query[:start] + query[end:]
    return query, unknown


def _parentheses_balanced(query: str) -> bool:
    depth = 0
    for char in query:
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth < 0:
                return False
    return depth == 0


def sanitize_query(query: str, *, max_length: int = DEFAULT_MAX_QUERY_LENGTH) -> SanitizeResult:
    """Clean up a query string and report every fix applied."""

    issues: list[str] = []
    value = _MULTISPACE_RE.sub(" ", _NEWLINES_RE.sub(" ", query or "")).strip()

    grouped = normalize_or_groups(value)
    if grouped != value:
        value = grouped
        issues.append("Normalized OR groups with parentheses")

    if len(value) > max_length:
        value = truncate_clauses(value, max_length)
        issues.append(f"Query truncated to {max_length} characters")

    value = _UNSAFE_CHARS_RE.sub("", value)

    if _YEAR_SET_RE.search(value):
        value = _YEAR_SET_RE.sub(r"year=\1", value)
        issues.append("Replaced invalid year set syntax with year=YYYY")

    if _PT_MATH_RE.search(value):
        value = _PT_MATH_CLAUSE_RE.sub("", value).strip()
        issues.append("Removed unsupported power+toughness math")

    opened, closed = value.count("{"), value.count("}")
    if opened > closed:
        value += "}" * (opened - closed)
        issues.append("Added missing closing brace(s)")
    elif closed > opened:
        value = _ORPHAN_BRACE_RE.sub("", value)
        issues.append("Removed orphan closing brace(s)")

    value, unknown = _remove_unknown_keys(value)
    if unknown:
        issues.append(f"Unknown search key(s): {', '.join(unknown)}")
        value = _MULTISPACE_RE.sub(" ", value).strip()

    if not _parentheses_balanced(value):
        value = value.replace("(", "").replace(")", "")
        issues.append("Removed unbalanced parentheses")

    if value.count('"') % 2:
        value += '"'
        issues.append("Added missing closing quote")

    singles = _TRAILING_APOSTROPHE_RE.sub("", _APOSTROPHE_RE.sub("", value))
    if singles.count("'") % 2:
        value += "'"
        issues.append("Added missing closing quote")

    value = _MULTISPACE_RE.sub(" ", value).strip()
    return SanitizeResult(valid=not issues, sanitized=value, issues=issues)
