# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation
"""Tests for complexity-aware decay dampening."""

from __future__ import annotations

import asyncio

import pytest

from conftest import T0, FakeClock
from trust_engine.clock import MS_PER_DAY
from trust_engine.complexity import (
    MAX_RECENT_TASKS,
    calculate_complexity_bonus,
    clamp_complexity,
    complexity_stats,
    prune_recent_tasks,
)
from trust_engine.engine import TrustEngine
from trust_engine.levels import TrustLevel
from trust_engine.types import TaskComplexityEntry


def _task(complexity: int, success: bool = True, timestamp: int = T0) -> TaskComplexityEntry:
    return TaskComplexityEntry(complexity=complexity, success=success, timestamp=timestamp)


class TestBonus:
    def test_empty_history_earns_nothing(self) -> None:
        assert calculate_complexity_bonus([], T0) == 0.0

    def test_medium_work_with_some_failures(self) -> None:
        tasks = [_task(3)] * 4 + [_task(3, success=False)]
        assert calculate_complexity_bonus(tasks, T0) == pytest.approx(0.384)

    def test_maximum_bonus(self) -> None:
        assert calculate_complexity_bonus([_task(5)] * 5, T0) == pytest.approx(0.8)

    def test_all_failures_earn_nothing(self) -> None:
        assert calculate_complexity_bonus([_task(5, success=False)] * 3, T0) == 0.0

    def test_recent_tasks_dominate_average(self) -> None:
        old = _task(5, timestamp=T0 - 3 * MS_PER_DAY)
        new = _task(1, timestamp=T0)
        bonus = calculate_complexity_bonus([old, new], T0)
        assert bonus < calculate_complexity_bonus([_task(3)], T0)


class TestPruning:
    def test_clamp_complexity(self) -> None:
        assert clamp_complexity(0) == 1
        assert clamp_complexity(9) == 5
        assert clamp_complexity(2.5) == 3
        assert clamp_complexity(float("inf")) == 5
        assert clamp_complexity(1e400) == 5
        assert clamp_complexity(float("-inf")) == 1

    def test_tasks_older_than_a_week_are_dropped(self) -> None:
        stale = _task(4, timestamp=T0 - 7 * MS_PER_DAY)
        fresh = _task(2, timestamp=T0 - MS_PER_DAY)
        assert prune_recent_tasks([stale, fresh], T0) == [fresh]

    def test_at_most_fifty_tasks_retained(self) -> None:
        tasks = [_task(1 + i % 5, timestamp=T0 - i) for i in range(60)]
        pruned = prune_recent_tasks(tasks, T0)
        assert len(pruned) == MAX_RECENT_TASKS
        assert pruned == tasks[-MAX_RECENT_TASKS:]

    def test_stats(self) -> None:
        stats = complexity_stats([_task(2), _task(4, success=False)], 0.2)
        assert stats.recent_task_count == 2
        assert stats.avg_complexity == 3.0
        assert stats.success_rate == 0.5
        assert stats.complexity_bonus == 0.2

    def test_stats_for_empty_history(self) -> None:
        stats = complexity_stats([], 0.0)
        assert stats.recent_task_count == 0
        assert stats.success_rate == 0.0


class TestEngineComplexity:
    def test_unknown_entity_is_ignored(self, engine: TrustEngine) -> None:
        asyncio.run(engine.record_task_complexity("ghost", 5, True))
        assert engine.get_entity_ids() == []
        assert engine.get_complexity_bonus("ghost") == 0.0
        assert engine.get_complexity_stats("ghost") is None

    def test_tasks_update_bonus_and_stats(self, engine: TrustEngine, clock: FakeClock) -> None:
        async def run() -> None:
            await engine.initialize_entity("agent-001", TrustLevel.STANDARD)
            for _ in range(4):
                await engine.record_task_complexity("agent-001", 3, True, task_type="report")
            await engine.record_task_complexity("agent-001", 3, False)

        asyncio.run(run())
        assert engine.get_complexity_bonus("agent-001") == pytest.approx(0.384)
        stats = engine.get_complexity_stats("agent-001")
        assert stats is not None
        assert stats.recent_task_count == 5
        assert stats.success_rate == pytest.approx(0.8)

    def test_recorded_complexity_is_clamped(self, engine: TrustEngine) -> None:
        async def run() -> None:
            await engine.initialize_entity("agent-001")
            await engine.record_task_complexity("agent-001", 12, True)

        asyncio.run(run())
        assert engine.get_complexity_stats("agent-001").avg_complexity == 5.0

    def test_infinite_complexity_earns_maximum_bonus(self, engine: TrustEngine) -> None:
        async def run() -> None:
            await engine.initialize_entity("agent-001")
            await engine.record_task_complexity("agent-001", float("inf"), True)

        asyncio.run(run())
        assert engine.get_complexity_bonus("agent-001") == pytest.approx(0.8)
