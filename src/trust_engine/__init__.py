# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""
trust-engine — behavioral trust scoring with lazy decay for AI agents.

Key invariants:
- Scores are integers in [0, 1000]; the tier (0–5) is always derived from the score.
- Decay is applied lazily on read — there are no background timers.
- Recent failure clusters accelerate decay; recent successful complex work dampens it.
- The engine is an explicitly constructed instance — there is no global singleton.

Quick start::

    import asyncio
    from trust_engine import TrustEngine, TrustSignal, TrustLevel

    async def main() -> None:
        engine = TrustEngine()
        await engine.initialize_entity("agent-1", TrustLevel.PROVISIONAL)
        await engine.record_signal(TrustSignal(
            entity_id="agent-1",
            type="behavioral.success",
            value=0.9,
            timestamp="2026-01-01T00:00:00Z",
        ))
        record = await engine.get_score("agent-1")
        print(record.score, record.level)

    asyncio.run(main())
"""

from .clock import Clock, TimestampMs, ms_to_iso, now_ms, to_epoch_ms
from .complexity import (
    calculate_complexity_bonus,
    clamp_complexity,
    complexity_stats,
    prune_recent_tasks,
)
from .config import TrustEngineConfig
from .decay import (
    DecayResult,
    compute_decay,
    effective_decay_rate,
    has_accelerated_decay,
    prune_failures,
)
from .engine import TrustEngine, create_trust_engine, validate_entity_id
from .errors import (
    ConfigurationError,
    PersistenceError,
    TrustEngineError,
    TrustLevelError,
)
from .events import (
    AnyTrustEvent,
    TrustDecayAppliedEvent,
    TrustEvent,
    TrustEventBus,
    TrustEventHandler,
    TrustEventType,
    TrustFailureDetectedEvent,
    TrustInitializedEvent,
    TrustScoreChangedEvent,
    TrustSignalRecordedEvent,
    TrustTierChangedEvent,
)
from .levels import (
    DEFAULT_TRUST_LEVEL,
    SCORE_MAX,
    SCORE_MIN,
    TRUST_LEVEL_MAX,
    TRUST_LEVEL_MIN,
    TRUST_LEVEL_NAMES,
    TRUST_THRESHOLDS,
    TrustLevel,
    clamp_score,
    is_valid_trust_level,
    level_floor,
    score_to_level,
    trust_level_name,
    validate_level,
)
from .scoring import calculate_trust, significant_factors, weighted_score
from .storage import MemoryStorage, TrustStorage
from .types import (
    COMPONENT_NAMES,
    COMPONENT_PREFIXES,
    SIGNAL_WEIGHTS,
    ComplexityStats,
    ComponentName,
    TaskComplexityEntry,
    TrustCalculation,
    TrustComponents,
    TrustHistoryEntry,
    TrustRecord,
    TrustSignal,
    TrustSummary,
    component_for_signal_type,
)
from .validator import TrustCheckResult, validate_tier

__all__ = [
    # Engine
    "TrustEngine",
    "create_trust_engine",
    "validate_entity_id",
    # Configuration
    "TrustEngineConfig",
    # Levels
    "TrustLevel",
    "TRUST_THRESHOLDS",
    "TRUST_LEVEL_NAMES",
    "TRUST_LEVEL_MIN",
    "TRUST_LEVEL_MAX",
    "DEFAULT_TRUST_LEVEL",
    "SCORE_MIN",
    "SCORE_MAX",
    "is_valid_trust_level",
    "validate_level",
    "trust_level_name",
    "level_floor",
    "clamp_score",
    "score_to_level",
    # Types
    "ComponentName",
    "COMPONENT_NAMES",
    "COMPONENT_PREFIXES",
    "SIGNAL_WEIGHTS",
    "component_for_signal_type",
    "TrustComponents",
    "TrustSignal",
    "TaskComplexityEntry",
    "TrustHistoryEntry",
    "TrustRecord",
    "TrustCalculation",
    "ComplexityStats",
    "TrustSummary",
    # Scoring
    "calculate_trust",
    "weighted_score",
    "significant_factors",
    # Decay
    "DecayResult",
    "compute_decay",
    "effective_decay_rate",
    "has_accelerated_decay",
    "prune_failures",
    # Complexity
    "calculate_complexity_bonus",
    "clamp_complexity",
    "complexity_stats",
    "prune_recent_tasks",
    # Gating
    "TrustCheckResult",
    "validate_tier",
    # Events
    "TrustEventType",
    "TrustEvent",
    "AnyTrustEvent",
    "TrustEventBus",
    "TrustEventHandler",
    "TrustInitializedEvent",
    "TrustSignalRecordedEvent",
    "TrustScoreChangedEvent",
    "TrustTierChangedEvent",
    "TrustDecayAppliedEvent",
    "TrustFailureDetectedEvent",
    # Storage
    "TrustStorage",
    "MemoryStorage",
    # Time
    "Clock",
    "TimestampMs",
    "now_ms",
    "ms_to_iso",
    "to_epoch_ms",
    # Errors
    "TrustEngineError",
    "ConfigurationError",
    "PersistenceError",
    "TrustLevelError",
]

__version__ = "0.1.0"
