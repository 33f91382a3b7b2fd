# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""
Stateless lazy-decay arithmetic.

Decay is computed from elapsed wall-clock time at the moment a record is
read; there is no background timer. All functions are pure functions of their
arguments — the engine applies results to the stored record and emits events.

Decay is strictly one-directional: scores only decrease.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

from .config import TrustEngineConfig
from .levels import TrustLevel, score_to_level
from .scoring import round_half_up


# ---------------------------------------------------------------------------
# Failure window helpers
# ---------------------------------------------------------------------------


def prune_failures(failures: Sequence[int], now_ms: int, window_ms: int) -> list[int]:
    """Keep failure timestamps strictly inside the rolling window, in order."""
    return [timestamp for timestamp in failures if now_ms - timestamp < window_ms]


def has_accelerated_decay(
    failures: Sequence[int],
    now_ms: int,
    config: TrustEngineConfig,
) -> bool:
    """True when enough failures fall inside the window to accelerate decay."""
    recent = prune_failures(failures, now_ms, config.failure_window_ms)
    return len(recent) >= config.min_failures_for_acceleration


def effective_decay_rate(
    config: TrustEngineConfig,
    accelerated: bool,
    complexity_bonus: float,
) -> float:
    """
    Per-interval decay rate after acceleration and complexity dampening.

    ``rate = decay_rate × (multiplier if accelerated else 1) × (1 − bonus)``
    """
    rate = config.decay_rate
    if accelerated:
        rate *= config.accelerated_decay_multiplier
    rate *= 1.0 - min(0.8, max(0.0, complexity_bonus))
    return min(1.0, max(0.0, rate))


# ---------------------------------------------------------------------------
# Decay result
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DecayResult:
    """The outcome of applying owed decay to one score."""

    previous_score: int
    new_score: int
    new_level: TrustLevel
    periods: int
    """Number of complete decay intervals that elapsed."""
    staleness_ms: int
    effective_rate: float
    accelerated: bool

    @property
    def decay_amount(self) -> int:
        return self.previous_score - self.new_score

    @property
    def changed(self) -> bool:
        return self.new_score != self.previous_score


def compute_decay(
    score: int,
    last_calculated_at: int,
    now_ms: int,
    config: TrustEngineConfig,
    *,
    accelerated: bool,
    complexity_bonus: float,
) -> DecayResult | None:
    """
    Compute the score owed after the time elapsed since *last_calculated_at*.

    Returns None when no more than one decay interval has elapsed; the caller
    must then leave the record (and its decay watermark) untouched.

    ``new_score = max(0, round(score × (1 − rate) ^ floor(staleness / interval)))``
    """
    staleness = now_ms - last_calculated_at
    if staleness <= config.decay_interval_ms:
        return None

    rate = effective_decay_rate(config, accelerated, complexity_bonus)
    periods = math.floor(staleness / config.decay_interval_ms)
    decayed = round_half_up(score * math.pow(1.0 - rate, periods))
    new_score = max(0, min(score, decayed))

    return DecayResult(
        previous_score=score,
        new_score=new_score,
        new_level=score_to_level(new_score),
        periods=periods,
        staleness_ms=staleness,
        effective_rate=rate,
        accelerated=accelerated,
    )
