"""Pipeline options, context and result models (Pydantic models)."""

from __future__ import annotations

from time import monotonic
from typing import Literal
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.intent.schema import ClassifiedIntent, ExtractedSlots, Suggestion
from src.query.schema import AssembledQuery, ConceptMatch
from src.search.schema import BroadenResult, RepairResult, ValidationResult

Source = Literal["deterministic", "concept_match", "ai", "fallback"]


class PipelineOptions(BaseModel):
    """Per-request switches."""

    model_config = ConfigDict(extra="forbid")

    validate_with_search: bool = False
    max_concepts: int = Field(default=5, ge=0)
    concept_threshold: float = Field(default=0.7, ge=0.0, le=1.0)
    overly_broad_threshold: int = Field(default=1500, ge=0)
    enable_repair: bool = True
    enable_broadening: bool = True
    debug: bool = False
    max_query_length: int = Field(default=400, gt=0)


class PipelineFilters(BaseModel):
    """Caller-supplied constraints, applied only where the query has none."""

    model_config = ConfigDict(extra="forbid")

    format: str | None = None
    color_identity: list[str] = Field(default_factory=list)
    max_cmc: int | None = Field(default=None, ge=0)

    @field_validator("color_identity")
    @classmethod
    def validate_color_identity(cls, value: list[str]) -> list[str]:
        """Accept color codes only (w, u, b, r, g, c)."""

        codes = [v.strip().lower() for v in value if v.strip()]
        invalid = [c for c in codes if c not in {"w", "u", "b", "r", "g", "c"}]
        if invalid:
            raise ValueError(f"unknown color codes: {invalid}")
        return codes


class PipelineContext(BaseModel):
    """Request-scoped inputs besides the text itself."""

    model_config = ConfigDict(extra="forbid")

    request_id: str = Field(default_factory=lambda: uuid4().hex)
    start_time: float = Field(default_factory=monotonic)
    options: PipelineOptions = Field(default_factory=PipelineOptions)
    filters: PipelineFilters = Field(default_factory=PipelineFilters)
    deadline: float | None = None


class Explanation(BaseModel):
    """Human-readable summary of a translation."""

    model_config = ConfigDict(extra="forbid")

    readable: str
    assumptions: list[str] = Field(default_factory=list)
    confidence: float = Field(ge=0.0, le=1.0)


class DebugInfo(BaseModel):
    """Stage internals, returned only when requested."""

    model_config = ConfigDict(extra="forbid")

    slots: ExtractedSlots
    concepts: list[ConceptMatch] = Field(default_factory=list)
    repair_steps: list[str] = Field(default_factory=list)


class PipelineResult(BaseModel):
    """Everything one translation produced."""

    model_config = ConfigDict(extra="forbid")

    original_query: str
    normalized_query: str
    intent: ClassifiedIntent = Field(default_factory=ClassifiedIntent)
    slots: ExtractedSlots = Field(default_factory=ExtractedSlots)
    concepts: list[ConceptMatch] = Field(default_factory=list)
    assembled_query: AssembledQuery = Field(default_factory=AssembledQuery)
    final_query: str
    validation: ValidationResult | None = None
    repairs: RepairResult | None = None
    broadening: BroadenResult | None = None
    source: Source
    explanation: Explanation
    response_time_ms: int = Field(ge=0)
    suggestions: list[Suggestion] = Field(default_factory=list)
    debug: DebugInfo | None = None
