# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""
Core type definitions for the behavioral trust engine.

Runtime data models are Pydantic v2 models. Inputs (signals, task entries,
history entries) are frozen; the TrustRecord aggregate is mutable and owned
exclusively by the TrustEngine. Timestamps are epoch milliseconds internally
and ISO 8601 strings in JSON output.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator

from .clock import TimestampMs
from .levels import TrustLevel

# ---------------------------------------------------------------------------
# Components
# ---------------------------------------------------------------------------

ComponentName = Literal["behavioral", "compliance", "identity", "context"]

COMPONENT_NAMES: tuple[ComponentName, ...] = (
    "behavioral",
    "compliance",
    "identity",
    "context",
)

#: Fixed contribution of each component to the total score. Sums to 1.0.
SIGNAL_WEIGHTS: dict[ComponentName, float] = {
    "behavioral": 0.40,
    "compliance": 0.25,
    "identity": 0.20,
    "context": 0.15,
}

#: Signal type prefix (text before the first ".") to component.
COMPONENT_PREFIXES: dict[str, ComponentName] = {name: name for name in COMPONENT_NAMES}


def component_for_signal_type(signal_type: str) -> ComponentName | None:
    """Return the component a dotted signal type routes to, or None."""
    prefix, separator, _ = signal_type.partition(".")
    if not separator:
        return None
    return COMPONENT_PREFIXES.get(prefix)


class TrustComponents(BaseModel, frozen=True):
    """The four weighted sub-scores of a trust score, each in [0, 1]."""

    behavioral: float = Field(default=0.5, ge=0.0, le=1.0)
    compliance: float = Field(default=0.5, ge=0.0, le=1.0)
    identity: float = Field(default=0.5, ge=0.0, le=1.0)
    context: float = Field(default=0.5, ge=0.0, le=1.0)

    @classmethod
    def uniform(cls, value: float) -> TrustComponents:
        """Build components where every dimension has the same value."""
        return cls(behavioral=value, compliance=value, identity=value, context=value)

    def get(self, name: ComponentName) -> float:
        return float(getattr(self, name))


# ---------------------------------------------------------------------------
# Signals and task entries
# ---------------------------------------------------------------------------


class TrustSignal(BaseModel, frozen=True):
    """A single timestamped behavioral observation about an entity."""

    entity_id: str = Field(..., min_length=1, description="Entity the signal is about.")
    type: str = Field(
        ...,
        min_length=1,
        description="Dotted signal type, e.g. 'behavioral.success'.",
    )
    value: float = Field(..., ge=0.0, le=1.0, description="Observed value in [0, 1].")
    timestamp: TimestampMs = Field(..., description="When the observation was made.")

    @field_validator("entity_id")
    @classmethod
    def entity_id_must_not_be_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("entity_id must be a non-empty string")
        return value

    @property
    def component(self) -> ComponentName | None:
        """The component this signal scores against, or None if unrecognised."""
        return component_for_signal_type(self.type)


class TaskComplexityEntry(BaseModel, frozen=True):
    """One completed task's difficulty and outcome."""

    complexity: int = Field(..., ge=1, le=5)
    success: bool
    timestamp: TimestampMs
    task_type: str | None = None


class TrustHistoryEntry(BaseModel, frozen=True):
    """A significant score change retained in a record's history."""

    score: int = Field(..., ge=0, le=1000)
    level: TrustLevel
    reason: str
    timestamp: TimestampMs


# ---------------------------------------------------------------------------
# TrustRecord: the per-entity aggregate
# ---------------------------------------------------------------------------


class TrustRecord(BaseModel):
    """
    Complete trust state for one entity.

    Mutated only by the TrustEngine. ``level`` always equals
    ``score_to_level(score)``; bounded lists are append-then-trim.
    """

    entity_id: str = Field(..., min_length=1)
    score: int = Field(..., ge=0, le=1000)
    level: TrustLevel
    components: TrustComponents = Field(default_factory=TrustComponents)
    signals: list[TrustSignal] = Field(default_factory=list)
    last_calculated_at: TimestampMs
    history: list[TrustHistoryEntry] = Field(default_factory=list)
    recent_failures: list[TimestampMs] = Field(default_factory=list)
    recent_tasks: list[TaskComplexityEntry] = Field(default_factory=list)
    complexity_bonus: float = Field(default=0.0, ge=0.0, le=0.8)


# ---------------------------------------------------------------------------
# Read models
# ---------------------------------------------------------------------------


class TrustCalculation(BaseModel, frozen=True):
    """Result of a side-effect-free score calculation."""

    score: int = Field(..., ge=0, le=1000)
    level: TrustLevel
    components: TrustComponents
    factors: list[str] = Field(default_factory=list)


class ComplexityStats(BaseModel, frozen=True):
    """Summary of an entity's recent task-complexity history."""

    recent_task_count: int = Field(..., ge=0)
    avg_complexity: float = Field(..., ge=0.0, le=5.0)
    success_rate: float = Field(..., ge=0.0, le=1.0)
    complexity_bonus: float = Field(..., ge=0.0, le=0.8)


class TrustSummary(BaseModel, frozen=True):
    """One row of the engine-wide trust summary."""

    entity_id: str
    score: int
    level: TrustLevel
    level_name: str
    accelerated_decay: bool
    failure_count: int
