# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""
TrustEngine — primary entry point for behavioral trust scoring.

The engine owns one TrustRecord per entity. It coordinates four concerns:

1. Scoring — recomputing weighted component scores from recorded signals.
2. Lazy decay — applying owed time decay whenever a record is read.
3. Events — publishing typed events through a composed TrustEventBus.
4. Persistence — mirroring mutated records to an optional TrustStorage.

Usage::

    engine = TrustEngine(storage=MemoryStorage())
    await engine.load_from_persistence()
    await engine.initialize_entity("agent-1", TrustLevel.PROVISIONAL)
    await engine.record_signal(
        TrustSignal(entity_id="agent-1", type="behavioral.success",
                    value=0.9, timestamp=datetime.now(timezone.utc))
    )
    record = await engine.get_score("agent-1")
    await engine.close()
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from .clock import Clock, now_ms
from .complexity import (
    calculate_complexity_bonus,
    clamp_complexity,
    complexity_stats,
    prune_recent_tasks,
)
from .config import TrustEngineConfig
from .decay import compute_decay, has_accelerated_decay, prune_failures
from .errors import ConfigurationError, PersistenceError, TrustLevelError
from .events import (
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
    TrustLevel,
    level_floor,
    score_to_level,
    trust_level_name,
    validate_level,
)
from .scoring import calculate_trust
from .storage.interface import TrustStorage
from .types import (
    ComplexityStats,
    TaskComplexityEntry,
    TrustCalculation,
    TrustComponents,
    TrustHistoryEntry,
    TrustRecord,
    TrustSignal,
    TrustSummary,
)
from .validator import TrustCheckResult, validate_tier

logger = logging.getLogger("aumos.trust.engine")

#: Most recent signals retained per record.
MAX_SIGNALS: int = 1000

#: Most recent history entries retained per record.
MAX_HISTORY: int = 100

#: Minimum absolute score change recorded in history.
HISTORY_DELTA_THRESHOLD: int = 10

#: Minimum absolute score change that emits ``trust:score_changed``.
SCORE_CHANGE_EVENT_THRESHOLD: int = 5


def validate_entity_id(entity_id: object) -> str:
    """
    Validate that *entity_id* is a non-empty string.

    Raises:
        TypeError:  If entity_id is not a string.
        ValueError: If entity_id is empty or whitespace-only.
    """
    if not isinstance(entity_id, str):
        raise TypeError(f"entity_id must be a string, got {type(entity_id).__name__!r}.")
    if not entity_id.strip():
        raise ValueError("entity_id must be a non-empty string.")
    return entity_id


def _trim(items: list, limit: int) -> None:
    """Drop the oldest entries of *items* in place so at most *limit* remain."""
    if len(items) > limit:
        del items[: len(items) - limit]


class TrustEngine:
    """
    Maintains decaying, signal-driven trust scores and tiers for entities.

    ## Invariants

    - ``score`` is always in [0, 1000] and ``level`` always matches it.
    - Decay is pull-based: it is applied when a record is read, never by a
      timer. Reads within one decay interval are no-ops.
    - Mutations of one entity are serialised by a per-entity asyncio lock;
      different entities proceed independently.
    - The in-memory record is updated before persistence is awaited, so a
      storage failure never rolls back state.

    Args:
        config:  Optional :class:`TrustEngineConfig`. Defaults apply when omitted.
        storage: Optional :class:`TrustStorage` provider.
        clock:   Optional callable returning the current epoch milliseconds.
    """

    def __init__(
        self,
        config: TrustEngineConfig | None = None,
        storage: TrustStorage | None = None,
        *,
        clock: Clock | None = None,
    ) -> None:
        self._config = config or TrustEngineConfig()
        self._storage = storage
        self._auto_persist = (
            self._config.auto_persist
            if self._config.auto_persist is not None
            else storage is not None
        )
        self._clock: Clock = clock or now_ms
        self._records: dict[str, TrustRecord] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}
        self._events = TrustEventBus()

    # ------------------------------------------------------------------
    # Configuration accessors
    # ------------------------------------------------------------------

    @property
    def config(self) -> TrustEngineConfig:
        return self._config

    @property
    def decay_rate(self) -> float:
        return self._config.decay_rate

    @property
    def decay_interval_ms(self) -> int:
        return self._config.decay_interval_ms

    @property
    def failure_threshold(self) -> float:
        return self._config.failure_threshold

    @property
    def accelerated_decay_multiplier(self) -> float:
        return self._config.accelerated_decay_multiplier

    @property
    def storage(self) -> TrustStorage | None:
        return self._storage

    @property
    def auto_persist(self) -> bool:
        return self._auto_persist

    @property
    def events(self) -> TrustEventBus:
        """The event bus this engine publishes to."""
        return self._events

    # ------------------------------------------------------------------
    # Event subscription
    # ------------------------------------------------------------------

    def subscribe(
        self,
        event_type: TrustEventType | str,
        handler: TrustEventHandler,
    ) -> str:
        """
        Subscribe *handler* to one event type, or to ``TrustEventType.ALL``.

        Returns:
            A subscription id for :meth:`unsubscribe`.
        """
        return self._events.subscribe(event_type, handler)

    def unsubscribe(self, subscription_id: str) -> bool:
        """Remove a subscription created with :meth:`subscribe`."""
        return self._events.unsubscribe(subscription_id)

    # ------------------------------------------------------------------
    # Lifecycle and persistence
    # ------------------------------------------------------------------

    async def load_from_persistence(self) -> int:
        """
        Replace all in-memory records with the records held by storage.

        Returns:
            The number of records loaded.

        Raises:
            ConfigurationError: If no storage provider is configured.
            PersistenceError:   If the provider fails to return records.
        """
        storage = self._require_storage()
        try:
            records = await storage.query()
        except Exception as exc:
            raise PersistenceError("query") from exc

        self._records.clear()
        for record in records:
            # Level is always derived from score.
            record.level = score_to_level(record.score)
            self._records[record.entity_id] = record

        logger.info("trust_records_loaded", extra={"count": len(records)})
        return len(records)

    async def save_to_persistence(self) -> int:
        """
        Save every in-memory record through the storage provider.

        Returns:
            The number of records saved.

        Raises:
            ConfigurationError: If no storage provider is configured.
            PersistenceError:   On the first record the provider fails to save.
        """
        self._require_storage()
        count = 0
        for entity_id in list(self._records):
            record = self._records.get(entity_id)
            if record is None:
                continue
            await self._save(record)
            count += 1

        logger.info("trust_records_saved", extra={"count": count})
        return count

    async def close(self) -> None:
        """
        Close the storage provider (if any) and drop every event subscription.

        Subscriptions are cleared even when the provider fails to close.
        """
        try:
            if self._storage is not None:
                try:
                    await self._storage.close()
                except Exception as exc:
                    raise PersistenceError("close") from exc
        finally:
            self._events.clear()

    # ------------------------------------------------------------------
    # Entity lifecycle
    # ------------------------------------------------------------------

    async def initialize_entity(
        self,
        entity_id: str,
        initial_level: int | TrustLevel = DEFAULT_TRUST_LEVEL,
    ) -> TrustRecord:
        """
        Create (or reset) the record for *entity_id* at the floor of a tier.

        Components are set uniformly to ``score / 1000`` so that a
        recalculation with no signals reproduces the starting score.

        Returns:
            A copy of the new record.

        Raises:
            TypeError / ValueError: On an invalid entity id or level.
            PersistenceError: If auto-persist is enabled and the save fails.
        """
        validated_id = validate_entity_id(entity_id)
        level = validate_level(initial_level)
        score = level_floor(level)

        async with self._entity_lock(validated_id):
            now = self._clock()
            record = TrustRecord(
                entity_id=validated_id,
                score=score,
                level=level,
                components=TrustComponents.uniform(score / 1000),
                last_calculated_at=now,
                history=[
                    TrustHistoryEntry(
                        score=score,
                        level=level,
                        reason="Initial registration",
                        timestamp=now,
                    )
                ],
            )
            self._records[validated_id] = record

            self._emit(
                TrustInitializedEvent(
                    entity_id=validated_id,
                    timestamp=now,
                    initial_score=score,
                    initial_level=level,
                )
            )
            logger.info(
                "trust_entity_initialized",
                extra={"entity_id": validated_id, "initial_level": int(level)},
            )

            await self._auto_persist_record(record)
            return record.model_copy(deep=True)

    async def remove_entity(self, entity_id: str) -> bool:
        """
        Stop tracking *entity_id* and delete it from storage when configured.

        Returns:
            True if the entity existed.

        Raises:
            PersistenceError: If the provider fails to delete. The entity is
                already removed from memory.
        """
        async with self._entity_lock(entity_id):
            existed = self._records.pop(entity_id, None) is not None
            logger.info("trust_entity_removed", extra={"entity_id": entity_id, "removed": existed})

            if existed and self._storage is not None:
                try:
                    await self._storage.delete(entity_id)
                except Exception as exc:
                    raise PersistenceError("delete", entity_id) from exc
        return existed

    def get_entity_ids(self) -> list[str]:
        """Return all tracked entity ids in insertion order."""
        return list(self._records)

    # ------------------------------------------------------------------
    # Scoring
    # ------------------------------------------------------------------

    def calculate(self, entity_id: str) -> TrustCalculation:
        """
        Calculate the trust score for an entity without changing any state.

        Unknown entities are scored from an empty history with every
        component at 0.5.
        """
        record = self._records.get(entity_id)
        if record is None:
            return calculate_trust([], TrustComponents(), self._clock())

        calculation = calculate_trust(record.signals, record.components, self._clock())
        logger.debug(
            "trust_calculated",
            extra={
                "entity_id": entity_id,
                "score": calculation.score,
                "level": int(calculation.level),
            },
        )
        return calculation

    async def record_signal(self, signal: TrustSignal) -> None:
        """
        Record a behavioral signal and recompute the entity's score.

        Unknown entities are created at the Provisional floor. Emits
        ``failure_detected`` (value below the failure threshold),
        ``signal_recorded`` (always), ``score_changed`` (|delta| >= 5) and
        ``tier_changed`` (level changed on an existing entity).

        Raises:
            PersistenceError: If auto-persist is enabled and the save fails.
                The in-memory update has already been applied.
        """
        async with self._entity_lock(signal.entity_id):
            record = self._apply_signal(signal)
            await self._auto_persist_record(record)

    async def get_score(self, entity_id: str) -> TrustRecord | None:
        """
        Return a copy of the entity's record after applying owed decay.

        Returns None for unknown entities.

        Raises:
            PersistenceError: If decay changed the score, auto-persist is
                enabled and the save fails. The decay has been applied.
        """
        if entity_id not in self._records:
            return None

        async with self._entity_lock(entity_id):
            record = self._records.get(entity_id)
            if record is None:
                return None
            if self._apply_decay(record):
                await self._auto_persist_record(record)
            return record.model_copy(deep=True)

    def get_level_name(self, level: int | TrustLevel) -> str:
        """Return the display name for a trust level."""
        return trust_level_name(level)

    # ------------------------------------------------------------------
    # Failure tracking
    # ------------------------------------------------------------------

    def is_accelerated_decay_active(self, entity_id: str) -> bool:
        """True when the entity has enough recent failures to decay faster."""
        record = self._records.get(entity_id)
        if record is None:
            return False
        return has_accelerated_decay(record.recent_failures, self._clock(), self._config)

    def get_failure_count(self, entity_id: str) -> int:
        """Return the number of failures inside the window, pruning older ones."""
        record = self._records.get(entity_id)
        if record is None:
            return 0
        record.recent_failures = prune_failures(
            record.recent_failures, self._clock(), self._config.failure_window_ms
        )
        return len(record.recent_failures)

    # ------------------------------------------------------------------
    # Complexity-aware decay
    # ------------------------------------------------------------------

    async def record_task_complexity(
        self,
        entity_id: str,
        complexity: float,
        success: bool,
        task_type: str | None = None,
    ) -> None:
        """
        Record a completed task to adjust the entity's complexity bonus.

        Complexity is clamped to [1, 5]. Unknown entities are ignored with a
        warning.

        Raises:
            PersistenceError: If auto-persist is enabled and the save fails.
        """
        if entity_id not in self._records:
            logger.warning("trust_task_complexity_unknown_entity", extra={"entity_id": entity_id})
            return

        async with self._entity_lock(entity_id):
            record = self._records.get(entity_id)
            if record is None:
                logger.warning(
                    "trust_task_complexity_unknown_entity", extra={"entity_id": entity_id}
                )
                return

            now = self._clock()
            clamped = clamp_complexity(complexity)
            record.recent_tasks.append(
                TaskComplexityEntry(
                    complexity=clamped,
                    success=success,
                    timestamp=now,
                    task_type=task_type,
                )
            )
            record.recent_tasks = prune_recent_tasks(record.recent_tasks, now)
            record.complexity_bonus = calculate_complexity_bonus(record.recent_tasks, now)

            logger.debug(
                "trust_task_complexity_recorded",
                extra={
                    "entity_id": entity_id,
                    "complexity": clamped,
                    "success": success,
                    "complexity_bonus": record.complexity_bonus,
                },
            )
            await self._auto_persist_record(record)

    def get_complexity_bonus(self, entity_id: str) -> float:
        """Return the entity's current complexity bonus, or 0.0 if unknown."""
        record = self._records.get(entity_id)
        if record is None:
            return 0.0
        return record.complexity_bonus

    def get_complexity_stats(self, entity_id: str) -> ComplexityStats | None:
        """Return recent task statistics for the entity, or None if unknown."""
        record = self._records.get(entity_id)
        if record is None:
            return None
        return complexity_stats(record.recent_tasks, record.complexity_bonus)

    # ------------------------------------------------------------------
    # Tier gating
    # ------------------------------------------------------------------

    async def check_tier(
        self,
        entity_id: str,
        required_level: int | TrustLevel,
    ) -> TrustCheckResult:
        """
        Check whether the entity's effective tier meets *required_level*.

        Decay is applied first. Unknown entities are evaluated at the
        Provisional tier without creating a record.
        """
        required = validate_level(required_level)
        record = await self.get_score(entity_id)
        if record is None:
            return validate_tier(
                entity_id,
                required,
                DEFAULT_TRUST_LEVEL,
                score=None,
                known_entity=False,
            )
        return validate_tier(entity_id, required, record.level, score=record.score)

    async def meets_requirement(
        self,
        entity_id: str,
        required_level: int | TrustLevel,
    ) -> bool:
        """Return True if the entity's effective tier meets *required_level*."""
        result = await self.check_tier(entity_id, required_level)
        return result.permitted

    async def require_tier(
        self,
        entity_id: str,
        required_level: int | TrustLevel,
    ) -> TrustCheckResult:
        """
        Like :meth:`check_tier` but raises when the requirement is not met.

        Raises:
            TrustLevelError: If the effective tier is below *required_level*.
        """
        result = await self.check_tier(entity_id, required_level)
        if not result.permitted:
            raise TrustLevelError(
                entity_id=entity_id,
                required_level=int(result.required_level),
                actual_level=int(result.effective_level),
            )
        return result

    async def get_trust_summary(self) -> list[TrustSummary]:
        """Return one summary row per tracked entity, with decay applied."""
        summary: list[TrustSummary] = []
        for entity_id in self.get_entity_ids():
            record = await self.get_score(entity_id)
            if record is None:
                continue
            summary.append(
                TrustSummary(
                    entity_id=entity_id,
                    score=record.score,
                    level=record.level,
                    level_name=trust_level_name(record.level),
                    accelerated_decay=self.is_accelerated_decay_active(entity_id),
                    failure_count=self.get_failure_count(entity_id),
                )
            )
        return summary

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def _entity_lock(self, entity_id: str) -> AsyncIterator[None]:
        """
        Hold the per-entity lock for the duration of the block.

        The lock is dropped once no caller holds or waits on it, so the lock
        table only contains entities with operations in flight.
        """
        lock = self._locks.get(entity_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[entity_id] = lock
        self._lock_users[entity_id] = self._lock_users.get(entity_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            remaining = self._lock_users[entity_id] - 1
            if remaining:
                self._lock_users[entity_id] = remaining
            else:
                del self._lock_users[entity_id]
                del self._locks[entity_id]

    def _require_storage(self) -> TrustStorage:
        if self._storage is None:
            raise ConfigurationError("No persistence provider configured.")
        return self._storage

    async def _save(self, record: TrustRecord) -> None:
        assert self._storage is not None
        try:
            await self._storage.save(record)
        except Exception as exc:
            raise PersistenceError("save", record.entity_id) from exc

    async def _auto_persist_record(self, record: TrustRecord) -> None:
        if self._storage is not None and self._auto_persist:
            await self._save(record)

    def _emit(self, event: TrustEvent) -> None:
        self._events.emit(event)
        logger.debug(
            "trust_event_emitted",
            extra={"event_type": event.type.value, "entity_id": event.entity_id},
        )

    def _create_default_record(self, entity_id: str, now: int) -> TrustRecord:
        score = level_floor(DEFAULT_TRUST_LEVEL)
        return TrustRecord(
            entity_id=entity_id,
            score=score,
            level=DEFAULT_TRUST_LEVEL,
            components=TrustComponents.uniform(score / 1000),
            last_calculated_at=now,
        )

    def _apply_signal(self, signal: TrustSignal) -> TrustRecord:
        """Apply one signal to the in-memory record and emit its events."""
        now = self._clock()
        record = self._records.get(signal.entity_id)
        is_new_entity = record is None
        if record is None:
            record = self._create_default_record(signal.entity_id, now)
            self._records[signal.entity_id] = record

        previous_score = record.score
        previous_level = record.level

        if signal.value < self._config.failure_threshold:
            record.recent_failures.append(signal.timestamp)
            record.recent_failures = prune_failures(
                record.recent_failures, now, self._config.failure_window_ms
            )
            accelerated = has_accelerated_decay(record.recent_failures, now, self._config)
            failure_count = len(record.recent_failures)

            self._emit(
                TrustFailureDetectedEvent(
                    entity_id=signal.entity_id,
                    timestamp=now,
                    signal=signal,
                    failure_count=failure_count,
                    accelerated_decay_active=accelerated,
                )
            )
            logger.warning(
                "trust_failure_signal_detected",
                extra={
                    "entity_id": signal.entity_id,
                    "signal_type": signal.type,
                    "signal_value": signal.value,
                    "failure_count": failure_count,
                    "accelerated_decay_active": accelerated,
                },
            )

        record.signals.append(signal)
        _trim(record.signals, MAX_SIGNALS)

        calculation = calculate_trust(record.signals, record.components, now)
        record.score = calculation.score
        record.level = calculation.level
        record.components = calculation.components
        record.last_calculated_at = now

        delta = calculation.score - previous_score
        reason = f"Signal: {signal.type}"

        if abs(delta) >= HISTORY_DELTA_THRESHOLD:
            record.history.append(
                TrustHistoryEntry(
                    score=calculation.score,
                    level=calculation.level,
                    reason=reason,
                    timestamp=now,
                )
            )
            _trim(record.history, MAX_HISTORY)

        self._emit(
            TrustSignalRecordedEvent(
                entity_id=signal.entity_id,
                timestamp=now,
                signal=signal,
                previous_score=previous_score,
                new_score=calculation.score,
            )
        )

        if abs(delta) >= SCORE_CHANGE_EVENT_THRESHOLD:
            self._emit(
                TrustScoreChangedEvent(
                    entity_id=signal.entity_id,
                    timestamp=now,
                    previous_score=previous_score,
                    new_score=calculation.score,
                    delta=delta,
                    reason=reason,
                )
            )

        # TODO: confirm with product whether the first signal for an
        # auto-created entity should announce its tier change.
        if calculation.level != previous_level and not is_new_entity:
            self._emit_tier_change(signal.entity_id, now, previous_level, calculation.level)

        logger.debug(
            "trust_signal_recorded",
            extra={
                "entity_id": signal.entity_id,
                "signal_type": signal.type,
                "new_score": calculation.score,
            },
        )
        return record

    def _apply_decay(self, record: TrustRecord) -> bool:
        """
        Apply owed decay to *record* in place. Returns True if the score changed.

        Failures outside the window are pruned on every call; the decay
        watermark moves only when at least one full interval has elapsed.
        """
        now = self._clock()
        record.recent_failures = prune_failures(
            record.recent_failures, now, self._config.failure_window_ms
        )

        accelerated = has_accelerated_decay(record.recent_failures, now, self._config)
        result = compute_decay(
            record.score,
            record.last_calculated_at,
            now,
            self._config,
            accelerated=accelerated,
            complexity_bonus=record.complexity_bonus,
        )
        if result is None:
            return False

        previous_level = record.level
        record.score = result.new_score
        record.level = result.new_level
        record.last_calculated_at = now

        if not result.changed:
            return False

        self._emit(
            TrustDecayAppliedEvent(
                entity_id=record.entity_id,
                timestamp=now,
                previous_score=result.previous_score,
                new_score=result.new_score,
                decay_amount=result.decay_amount,
                staleness_ms=result.staleness_ms,
                accelerated=result.accelerated,
            )
        )
        if result.new_level != previous_level:
            self._emit_tier_change(record.entity_id, now, previous_level, result.new_level)
        return True

    def _emit_tier_change(
        self,
        entity_id: str,
        now: int,
        previous_level: TrustLevel,
        new_level: TrustLevel,
    ) -> None:
        self._emit(
            TrustTierChangedEvent(
                entity_id=entity_id,
                timestamp=now,
                previous_level=previous_level,
                new_level=new_level,
                previous_level_name=trust_level_name(previous_level),
                new_level_name=trust_level_name(new_level),
                direction="promoted" if new_level > previous_level else "demoted",
            )
        )


def create_trust_engine(
    config: TrustEngineConfig | None = None,
    storage: TrustStorage | None = None,
    *,
    clock: Clock | None = None,
) -> TrustEngine:
    """Create a new, independently owned TrustEngine instance."""
    return TrustEngine(config, storage, clock=clock)
