"""Validation-side data model (Pydantic models)."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ValidationResult(BaseModel):
    """Outcome of checking one query against the search backend."""

    model_config = ConfigDict(extra="forbid")

    valid: bool
    status: int
    total_cards: int | None = None
    error: str | None = None
    warnings: list[str] = Field(default_factory=list)
    overly_broad: bool | None = None
    zero_results: bool | None = None

    @property
    def has_results(self) -> bool:
        return self.valid and not self.zero_results


class RepairResult(BaseModel):
    """Outcome of the repair loop for an invalid query."""

    model_config = ConfigDict(extra="forbid")

    original_query: str
    repaired_query: str
    steps: list[str] = Field(default_factory=list)
    success: bool = False
    validation: ValidationResult | None = None


class BroadenResult(BaseModel):
    """Outcome of the broadening loop for a valid query with no results."""

    model_config = ConfigDict(extra="forbid")

    original_query: str
    broadened_query: str
    relaxed_constraints: list[str] = Field(default_factory=list)
    validation: ValidationResult | None = None


class ValidationOutcome(BaseModel):
    """Final state of validate / repair / broaden for one query."""

    model_config = ConfigDict(extra="forbid")

    final_query: str
    validation: ValidationResult | None = None
    repairs: RepairResult | None = None
    broadening: BroadenResult | None = None
    calls: int = 0
