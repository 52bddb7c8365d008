"""Validate, repair and broaden a query against the search backend.

States:
    unvalidated -> valid with results (done)
    unvalidated -> invalid -> repair strategies, one validation each -> valid, or best effort
    valid but empty -> broadening strategies, one validation each -> results, or best effort

Strategies run in declared order and stop at the first one that yields a valid query with results.
A strategy that does not change the query costs no validation call, so one request makes at most
`len(REPAIR_STRATEGIES) + len(BROADEN_STRATEGIES) + 1` calls.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from src.search.schema import BroadenResult, RepairResult, ValidationOutcome, ValidationResult

logger = logging.getLogger(__name__)

Validator = Callable[[str], ValidationResult]
Rewrite = Callable[[str, str | None], str]

_MULTISPACE_RE = re.compile(r"\s+")
_DOUBLE_OR_RE = re.compile(r"\bor(?:\s+or)+\b", flags=re.IGNORECASE)
_LEADING_OR_RE = re.compile(r"\(\s*or\b\s*", flags=re.IGNORECASE)
_TRAILING_OR_RE = re.compile(r"\s*\bor\s*\)", flags=re.IGNORECASE)
_EMPTY_PARENS_RE = re.compile(r"\(\s*\)")
_OTAG_RE = re.compile(r"(?<![\w:-])-?otag:([a-z0-9-]+)\b", flags=re.IGNORECASE)


def _squash(query: str) -> str:
    return _MULTISPACE_RE.sub(" ", query).strip()


def sanitize_query_syntax(query: str) -> str:
    """Fix `or or`, stray `or` beside parentheses and empty parentheses without a network call."""

    value = _DOUBLE_OR_RE.sub("or", query or "")
    value = _LEADING_OR_RE.sub("(", value)
    value = _TRAILING_OR_RE.sub(")", value)
    value = _EMPTY_PARENS_RE.sub("", value)
    return _squash(value)


@dataclass(frozen=True)
class Strategy:
    """A named query rewrite."""

    name: str
    description: str
    rewrite: Rewrite


def _sub(pattern: str, replacement: str = "", flags: int = re.IGNORECASE, count: int = 0) -> Rewrite:
    compiled = re.compile(pattern, flags=flags)

    def rewrite(query: str, error: str | None) -> str:
        return compiled.sub(replacement, query, count=count)

    return rewrite


def _remove_unknown_otags(query: str, error: str | None) -> str:
    """Drop the tags the backend complained about; drop every tag when it named none."""

    tags = {m.group(1).lower() for m in _OTAG_RE.finditer(query)}
    named = {t for t in tags if error and t in error.lower()}
    targets = named or tags
    return _OTAG_RE.sub(lambda m: "" if m.group(1).lower() in targets else m.group(0), query)


def _relax_mv(query: str, error: str | None) -> str:
    return re.sub(
        r"\bmv<=(\d+)\b", lambda m: f"mv<={int(m.group(1)) + 1}", query, flags=re.IGNORECASE
    )


REPAIR_STRATEGIES: tuple[Strategy, ...] = (
    Strategy("fix_double_or", "Collapsed repeated or", _sub(r"\bor\s+or\b", "or")),
    Strategy("fix_leading_or", "Removed leading or", _sub(r"\(\s+or\b", "(")),
    Strategy("fix_trailing_or", "Removed trailing or", _sub(r"\bor\s+\)", ")")),
    Strategy("remove_empty_parens", "Removed empty parentheses", _sub(r"\(\s*\)")),
    Strategy("remove_regex", "Removed regex oracle search", _sub(r"-?\bo:/[^/]+/", flags=0)),
    Strategy("remove_unknown_otag", "Removed unknown oracle tag", _remove_unknown_otags),
    Strategy("fix_double_colon", "Fixed doubled colon", _sub(r"::", ":")),
    Strategy("fix_double_equals", "Fixed doubled equals", _sub(r"==", "=")),
    Strategy("remove_is_reprint", "Removed is:reprint", _sub(r"\s*\bis:reprint\b")),
    Strategy("remove_is_firstprint", "Removed is:firstprint", _sub(r"\s*\bis:firstprint\b")),
    Strategy("remove_year", "Removed year filter", _sub(r"\s*\byear[<>=]+\d+\b")),
    Strategy("remove_usd", "Removed price filter", _sub(r"\s*\busd[<>=]+\d+\b")),
    Strategy("simplify_oracle", "Removed long oracle text search", _sub(r'-?\bo:"[^"]{40,}"', flags=0)),
    Strategy("flatten_parens", "Flattened nested parentheses", _sub(r"\(\s*\(", "(", flags=0)),
)

BROADEN_STRATEGIES: tuple[Strategy, ...] = (
    Strategy("relax_mv", "Increased mana value limit", _relax_mv),
    Strategy("remove_format", "Removed format restriction", _sub(r"(?<![\w-])f:\w+\b")),
    Strategy("remove_price", "Removed price filter", _sub(r"(?<![\w-])usd[<>=]+\d+\b")),
    Strategy("remove_type_exclusion", "Removed type exclusion", _sub(r"(?<![\w-])-t:\w+\b", count=1)),
    Strategy(
        "simplify_color",
        "Removed color restriction",
        _sub(r"(?<![\w-])ci?(?:<=|>=|[:=<>])[wubrgc]+\b"),
    ),
    Strategy("remove_year", "Removed year filter", _sub(r"(?<![\w-])year[<>=]+\d+\b")),
)


class _CountingValidator:
    def __init__(self, validate: Validator) -> None:
        self._validate = validate
        self.calls = 0

    def __call__(self, query: str) -> ValidationResult:
        self.calls += 1
        return self._validate(query)


def repair_query(
    query: str,
    validate: Validator,
    *,
    error: str | None = None,
    initial: ValidationResult | None = None,
    strategies: Sequence[Strategy] = REPAIR_STRATEGIES,
) -> RepairResult:
    """Apply repair strategies until the query validates with results.

    `initial` is the validation of `query` itself; it is reported when no strategy changes the query.
    """

    current = query
    steps: list[str] = []
    validation = initial

    for strategy in strategies:
        rewritten = _squash(strategy.rewrite(current, error))
        if rewritten == current:
            continue
        current = rewritten
        steps.append(strategy.name)
        validation = validate(current)
        if validation.has_results:
            return RepairResult(
                original_query=query, repaired_query=current, steps=steps, success=True, validation=validation
            )
        if validation.error:
            error = validation.error

    return RepairResult(
        original_query=query,
        repaired_query=current,
        steps=steps,
        success=bool(validation and validation.valid),
        validation=validation,
    )


def broaden_query(
    query: str,
    validate: Validator,
    *,
    initial: ValidationResult | None = None,
    strategies: Sequence[Strategy] = BROADEN_STRATEGIES,
) -> BroadenResult:
    """Relax constraints one strategy at a time until the query returns results."""

    current = query
    relaxed: list[str] = []
    validation = initial

    for strategy in strategies:
        rewritten = sanitize_query_syntax(strategy.rewrite(current, None))
        if rewritten == current:
            continue
        current = rewritten
        relaxed.append(strategy.description)
        validation = validate(current)
        if validation.has_results:
            break

    return BroadenResult(
        original_query=query, broadened_query=current, relaxed_constraints=relaxed, validation=validation
    )


def validate_and_fix(
    query: str,
    validate: Validator,
    *,
    enable_repair: bool = True,
    enable_broadening: bool = True,
) -> ValidationOutcome:
    """Run the validate / repair / broaden state machine for one query."""

    counting = _CountingValidator(validate)
    sanitized = sanitize_query_syntax(query)
    validation = counting(sanitized)
    final_query = sanitized
    repairs: RepairResult | None = None
    broadening: BroadenResult | None = None

    if not validation.valid and enable_repair:
        repairs = repair_query(sanitized, counting, error=validation.error, initial=validation)
        if repairs.success and repairs.validation is not None:
            final_query = repairs.repaired_query
            validation = repairs.validation

    if validation.valid and validation.zero_results and enable_broadening:
        broadening = broaden_query(final_query, counting, initial=validation)
        if broadening.validation is not None and broadening.validation.has_results:
            final_query = broadening.broadened_query
            validation = broadening.validation

    logger.info(
        "validated query=%r valid=%s total=%s calls=%s",
        final_query,
        validation.valid,
        validation.total_cards,
        counting.calls,
    )
    return ValidationOutcome(
        final_query=final_query,
        validation=validation,
        repairs=repairs,
        broadening=broadening,
        calls=counting.calls,
    )
