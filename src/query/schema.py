"""Query-side data model (Pydantic models)."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

MatchType = Literal["exact", "alias", "vector"]


class ConceptMatch(BaseModel):
    """A named search concept matched against residual text."""

    model_config = ConfigDict(extra="forbid")

    concept_id: str
    pattern: str
    templates: list[str] = Field(min_length=1)
    negative_templates: list[str] = Field(default_factory=list)
    description: str = ""
    confidence: float = Field(ge=0.0, le=1.0)
    category: str = "general"
    priority: int = 50
    similarity: float = Field(ge=0.0, le=1.0)
    match_type: MatchType


class AssembledQuery(BaseModel):
    """Query text built from slots and concepts, plus what went into it."""

    model_config = ConfigDict(extra="forbid")

    query: str = ""
    parts: list[str] = Field(default_factory=list)
    concepts_applied: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class ConflictReport(BaseModel):
    """Output of conflict detection over top-level clauses."""

    model_config = ConfigDict(extra="forbid")

    conflicts: list[str] = Field(default_factory=list)
    deduplicated: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class SanitizeResult(BaseModel):
    """Output of the query sanitizer."""

    model_config = ConfigDict(extra="forbid")

    valid: bool
    sanitized: str
    issues: list[str] = Field(default_factory=list)
