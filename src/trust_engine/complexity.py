# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""
Complexity-aware decay dampening.

Entities that recently completed difficult tasks successfully earn a
complexity bonus in [0, 0.8] which shrinks their decay rate:

    bonus = clamp((avg_complexity / 5) × success_rate × 0.8, 0, 0.8)

where avg_complexity is recency-weighted (3-day time constant) and
success_rate is the plain fraction of successful tasks.

Complexity scale:

- 1: Trivial (lookups, status checks)
- 2: Low (basic CRUD, simple validation)
- 3: Medium (multi-step workflows)
- 4: High (complex analysis, multi-agent coordination)
- 5: Critical (system-wide or autonomous decisions)
"""

from __future__ import annotations

from collections.abc import Sequence

from .clock import MS_PER_DAY
from .scoring import round_half_up, weighted_average
from .types import ComplexityStats, TaskComplexityEntry

COMPLEXITY_MIN: int = 1
COMPLEXITY_MAX: int = 5
MAX_RECENT_TASKS: int = 50
TASK_WINDOW_MS: int = 7 * MS_PER_DAY
COMPLEXITY_HALF_LIFE_MS: int = 3 * MS_PER_DAY
MAX_COMPLEXITY_BONUS: float = 0.8


def clamp_complexity(value: float) -> int:
    """Clamp *value* to [1, 5] and round it to an integer."""
    return round_half_up(max(COMPLEXITY_MIN, min(COMPLEXITY_MAX, value)))


def prune_recent_tasks(
    tasks: Sequence[TaskComplexityEntry],
    now_ms: int,
) -> list[TaskComplexityEntry]:
    """Drop tasks older than seven days, then keep at most the last 50."""
    recent = [task for task in tasks if now_ms - task.timestamp < TASK_WINDOW_MS]
    if len(recent) > MAX_RECENT_TASKS:
        recent = recent[-MAX_RECENT_TASKS:]
    return recent


def calculate_complexity_bonus(
    tasks: Sequence[TaskComplexityEntry],
    now_ms: int,
) -> float:
    """Return the decay-dampening bonus earned by *tasks*. Empty history earns 0."""
    if not tasks:
        return 0.0

    avg_complexity = weighted_average(
        ((float(task.complexity), task.timestamp) for task in tasks),
        now_ms,
        COMPLEXITY_HALF_LIFE_MS,
        default=0.0,
    )
    success_rate = sum(1 for task in tasks if task.success) / len(tasks)

    bonus = (avg_complexity / COMPLEXITY_MAX) * success_rate * MAX_COMPLEXITY_BONUS
    return min(MAX_COMPLEXITY_BONUS, max(0.0, bonus))


def complexity_stats(
    tasks: Sequence[TaskComplexityEntry],
    complexity_bonus: float,
) -> ComplexityStats:
    """Unweighted summary statistics over *tasks*."""
    if not tasks:
        return ComplexityStats(
            recent_task_count=0,
            avg_complexity=0.0,
            success_rate=0.0,
            complexity_bonus=0.0,
        )

    count = len(tasks)
    return ComplexityStats(
        recent_task_count=count,
        avg_complexity=sum(task.complexity for task in tasks) / count,
        success_rate=sum(1 for task in tasks if task.success) / count,
        complexity_bonus=complexity_bonus,
    )
