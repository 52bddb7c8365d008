"""Translation pipeline orchestrator.

Stages:
    1. Normalize.
    2. Fast path (injected); short-circuits when it explains the whole request.
    3. Classify intent, extract slots.
    4. Match concepts on the residual.
    5. Assemble, then merge with the fast path.
    6. Resolve conflicts, apply caller filters, sanitize.
    7. Optionally validate / repair / broaden against the search backend.

`run_pipeline` never raises for request-level problems: collaborator failures become warnings in
`explanation.assumptions` and the best query computed so far is returned.
"""

from __future__ import annotations

import logging
from functools import partial
from time import monotonic

from src.intent.classify import classify_intent, detect_ambiguity
from src.intent.fast_path import FastPath, FastPathResult, KeywordFastPath
from src.intent.normalize import extract_card_name_candidates, is_raw_syntax, normalize_query
from src.intent.schema import ClassifiedIntent, ExtractedSlots
from src.intent.slots import extract_slots
from src.pipeline.explain import build_readable_explanation, calculate_confidence
from src.pipeline.schema import (
    DebugInfo,
    Explanation,
    PipelineContext,
    PipelineFilters,
    PipelineResult,
    Source,
)
from src.query.assemble import apply_external_filters, assemble_query
from src.query.clauses import join_clauses, split_clauses
from src.query.concepts import ConceptSource, find_concept_matches
from src.query.conflicts import detect_query_conflicts, has_impossible_type_combination
from src.query.sanitize import sanitize_query
from src.query.schema import AssembledQuery, ConceptMatch
from src.search.client import SearchClient
from src.search.repair import validate_and_fix
from src.search.schema import ValidationOutcome

logger = logging.getLogger(__name__)

SHORT_CIRCUIT_CONFIDENCE = 0.95
RAW_SYNTAX_CONFIDENCE = 1.0


def _is_type_clause(clause: str) -> bool:
    return clause.startswith(("t:", "-t:")) or (clause.startswith("(") and "t:" in clause)


def merge_fast_path(assembled_query: str, fast_query: str, *, slots_have_types: bool) -> str:
    """Merge the fast-path query into the assembled query.

    Three branches, kept as they are because confidence scoring depends on them:
        - slots found types: add only fast-path non-type clauses missing from the assembled text;
        - nothing was assembled: use the fast-path query verbatim;
        - otherwise: append fast-path clauses that are not case-insensitive duplicates.
    """

    fast_clauses = split_clauses(fast_query)
    if not fast_clauses:
        return assembled_query

    if slots_have_types:
        if not assembled_query:
            return assembled_query
        assembled_lower = assembled_query.lower()
        extra = [c for c in fast_clauses if not _is_type_clause(c) and c.lower() not in assembled_lower]
        return join_clauses([assembled_query, *extra])

    if not assembled_query:
        return fast_query

    merged = split_clauses(assembled_query)
    for clause in fast_clauses:
        if all(clause.lower() != existing.lower() for existing in merged):
            merged.append(clause)
    return join_clauses(merged)


def _fallback_query(query: str, slots: ExtractedSlots) -> str:
    """Bare name search built from whatever words are left."""

    names = extract_card_name_candidates(query)
    if names:
        return f'!"{names[0]}"'
    return slots.residual


def _run_fast_path(fast_path: FastPath, query: str, assumptions: list[str]) -> FastPathResult:
    try:
        return fast_path.translate(query)
    except Exception as exc:
        logger.warning("fast path failed error=%s", exc)
        assumptions.append("Deterministic translation unavailable")
        return FastPathResult()


def _validate(
    query: str, context: PipelineContext, search_client: SearchClient | None
) -> ValidationOutcome | None:
    options = context.options
    if not options.validate_with_search or not query:
        return None
    client = search_client or SearchClient()
    validator = partial(
        client.validate,
        overly_broad_threshold=options.overly_broad_threshold,
        deadline=context.deadline,
    )
    return validate_and_fix(
        query,
        validator,
        enable_repair=options.enable_repair,
        enable_broadening=options.enable_broadening,
    )


def _apply_filters(query: str, filters: PipelineFilters) -> str:
    return apply_external_filters(
        query,
        format=filters.format,
        color_identity=filters.color_identity,
        max_cmc=filters.max_cmc,
    )


def _elapsed_ms(context: PipelineContext) -> int:
    return max(0, int((monotonic() - context.start_time) * 1000))


def _finish(result: PipelineResult, context: PipelineContext) -> PipelineResult:
    logger.info(
        "translated request_id=%s source=%s confidence=%.2f latency_ms=%s query=%r",
        context.request_id,
        result.source,
        result.explanation.confidence,
        result.response_time_ms,
        result.final_query,
    )
    return result


def run_pipeline(
    query: str,
    context: PipelineContext | None = None,
    *,
    fast_path: FastPath | None = None,
    concept_source: ConceptSource | None = None,
    search_client: SearchClient | None = None,
) -> PipelineResult:
    """Translate one free-text request into query syntax."""

    context = context or PipelineContext()
    options = context.options
    text = query or ""

    normalized = normalize_query(text)
    suggestions = detect_ambiguity(normalized.normalized).suggestions

    if is_raw_syntax(text):
        sanitized = sanitize_query(text, max_length=options.max_query_length)
        outcome = _validate(sanitized.sanitized, context, search_client)
        validation = outcome.validation if outcome else None
        return _finish(
            PipelineResult(
                original_query=text,
                normalized_query=text,
                assembled_query=AssembledQuery(query=sanitized.sanitized),
                final_query=outcome.final_query if outcome else sanitized.sanitized,
                validation=validation,
                repairs=outcome.repairs if outcome else None,
                broadening=outcome.broadening if outcome else None,
                source="deterministic",
                explanation=Explanation(
                    readable="Using raw query syntax",
                    assumptions=list(sanitized.issues),
                    confidence=RAW_SYNTAX_CONFIDENCE,
                ),
                response_time_ms=_elapsed_ms(context),
                suggestions=suggestions,
                debug=DebugInfo(slots=ExtractedSlots()) if options.debug else None,
            ),
            context,
        )

    intent: ClassifiedIntent = classify_intent(normalized.normalized)
    slots = extract_slots(normalized.normalized)

    assumptions: list[str] = []
    fast = _run_fast_path(fast_path or KeywordFastPath(), text, assumptions)
    fast_query = fast.deterministic_query.strip()
    has_fast_query = bool(fast_query)
    has_residual = bool(slots.residual.strip() or fast.intent.remaining_query.strip())

    if has_fast_query and not has_residual:
        fast_report = detect_query_conflicts(split_clauses(fast_query))
        short_query = join_clauses(fast_report.deduplicated)
        sanitized = sanitize_query(_apply_filters(short_query, context.filters), max_length=options.max_query_length)
        return _finish(
            PipelineResult(
                original_query=text,
                normalized_query=normalized.normalized,
                intent=intent,
                slots=slots,
                assembled_query=AssembledQuery(query=fast_query),
                final_query=sanitized.sanitized,
                source="deterministic",
                explanation=Explanation(
                    readable=f"Searching for: {text}",
                    assumptions=[
                        *assumptions,
                        *fast.intent.warnings,
                        *fast_report.conflicts,
                        *fast_report.warnings,
                        *sanitized.issues,
                    ],
                    confidence=SHORT_CIRCUIT_CONFIDENCE,
                ),
                response_time_ms=_elapsed_ms(context),
                suggestions=suggestions,
                debug=DebugInfo(slots=slots) if options.debug else None,
            ),
            context,
        )

    residual = slots.residual or fast.intent.remaining_query or ""
    concepts: list[ConceptMatch] = []
    if residual.strip():
        concepts = find_concept_matches(
            residual,
            max_matches=options.max_concepts,
            min_confidence=options.concept_threshold,
            external=concept_source,
        )

    assembled = assemble_query(slots, concepts, max_query_length=options.max_query_length)
    merged = merge_fast_path(assembled.query, fast_query, slots_have_types=slots.types.has_any())

    report = detect_query_conflicts(split_clauses(merged))
    merged = join_clauses(report.deduplicated)
    conflict_warnings = list(report.warnings)
    if has_impossible_type_combination(merged):
        conflict_warnings.append("Query may have impossible type combinations")

    source: Source = "concept_match" if concepts else "deterministic"
    merged = _apply_filters(merged, context.filters)
    if not merged.strip():
        source = "fallback"
        merged = _fallback_query(text, slots)

    sanitized = sanitize_query(merged, max_length=options.max_query_length)
    final_query = sanitized.sanitized

    outcome = _validate(final_query, context, search_client)
    if outcome is not None:
        final_query = outcome.final_query

    assumptions.extend(fast.intent.warnings)
    assumptions.extend(assembled.warnings)
    assumptions.extend(sanitized.issues)
    assumptions.extend(report.conflicts)
    assumptions.extend(conflict_warnings)
    if concepts:
        assumptions.append("Matched concepts: " + ", ".join(c.concept_id for c in concepts))
    repairs = outcome.repairs if outcome else None
    broadening = outcome.broadening if outcome else None
    if repairs and repairs.steps:
        assumptions.append("Repaired query: " + ", ".join(repairs.steps))
    if broadening and broadening.relaxed_constraints:
        assumptions.append("Broadened search: " + ", ".join(broadening.relaxed_constraints))

    validation = outcome.validation if outcome else None
    if validation is not None and not validation.valid:
        assumptions.append(f"Search validation failed: {validation.error or 'unknown error'}")
    confidence = calculate_confidence(
        has_fast_path=has_fast_query,
        concept_count=len(concepts),
        validation_passed=validation.valid if validation is not None else True,
        repair_succeeded=repairs.success if repairs is not None else True,
    )

    return _finish(
        PipelineResult(
            original_query=text,
            normalized_query=normalized.normalized,
            intent=intent,
            slots=slots,
            concepts=concepts,
            assembled_query=assembled,
            final_query=final_query,
            validation=validation,
            repairs=repairs,
            broadening=broadening,
            source=source,
            explanation=Explanation(
                readable=build_readable_explanation(text, slots, concepts),
                assumptions=assumptions,
                confidence=confidence,
            ),
            response_time_ms=_elapsed_ms(context),
            suggestions=suggestions,
            debug=(
                DebugInfo(slots=slots, concepts=concepts, repair_steps=list(repairs.steps) if repairs else [])
                if options.debug
                else None
            ),
        ),
        context,
    )
