# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""
Pure trust score calculation.

All functions here are side-effect free functions of (signals, previous
components, now_ms). The engine applies the returned TrustCalculation to the
stored record; nothing in this module touches engine state.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence

from .clock import MS_PER_DAY
from .levels import clamp_score, score_to_level
from .types import (
    COMPONENT_NAMES,
    SIGNAL_WEIGHTS,
    ComponentName,
    TrustCalculation,
    TrustComponents,
    TrustSignal,
)

#: Time constant of the exponential recency weight applied to signals.
SIGNAL_HALF_LIFE_MS: int = 7 * MS_PER_DAY

#: Components below this value are reported as significant factors.
LOW_COMPONENT_THRESHOLD: float = 0.3

FACTOR_MESSAGES: dict[ComponentName, str] = {
    "behavioral": "Low behavioral trust",
    "compliance": "Low compliance score",
    "identity": "Weak identity verification",
    "context": "Unusual context signals",
}


def round_half_up(value: float) -> int:
    """Round to the nearest integer, with halves rounded up."""
    return int(math.floor(value + 0.5))


def recency_weight(age_ms: float, half_life_ms: float) -> float:
    """
    Exponential recency weight ``exp(-age / half_life)``.

    Negative ages (timestamps in the future) are treated as zero age.
    """
    return math.exp(-max(0.0, age_ms) / half_life_ms)


def weighted_average(
    samples: Iterable[tuple[float, int]],
    now_ms: int,
    half_life_ms: float,
    default: float,
) -> float:
    """
    Recency-weighted mean of ``(value, timestamp_ms)`` samples.

    Returns *default* when there are no samples or every weight underflows
    to zero.
    """
    weighted_sum = 0.0
    total_weight = 0.0
    for value, timestamp_ms in samples:
        weight = recency_weight(now_ms - timestamp_ms, half_life_ms)
        weighted_sum += value * weight
        total_weight += weight
    if total_weight <= 0.0:
        return default
    return weighted_sum / total_weight


def partition_signals(
    signals: Iterable[TrustSignal],
) -> dict[ComponentName, list[TrustSignal]]:
    """Group signals by component. Signals with unknown prefixes are dropped."""
    buckets: dict[ComponentName, list[TrustSignal]] = {name: [] for name in COMPONENT_NAMES}
    for signal in signals:
        component = signal.component
        if component is not None:
            buckets[component].append(signal)
    return buckets


def calculate_components(
    signals: Sequence[TrustSignal],
    current: TrustComponents,
    now_ms: int,
) -> TrustComponents:
    """
    Compute each component from its signals, falling back to the value in
    *current* for components that have no signals.
    """
    buckets = partition_signals(signals)
    values: dict[str, float] = {}
    for name in COMPONENT_NAMES:
        average = weighted_average(
            ((signal.value, signal.timestamp) for signal in buckets[name]),
            now_ms,
            SIGNAL_HALF_LIFE_MS,
            default=current.get(name),
        )
        values[name] = min(1.0, max(0.0, average))
    return TrustComponents(**values)


def weighted_score(components: TrustComponents) -> int:
    """Combine components into a clamped integer score in [0, 1000]."""
    total = sum(components.get(name) * SIGNAL_WEIGHTS[name] * 1000 for name in COMPONENT_NAMES)
    return clamp_score(round_half_up(total))


def significant_factors(components: TrustComponents) -> list[str]:
    """Describe every component that is below the low-trust threshold."""
    return [
        FACTOR_MESSAGES[name]
        for name in COMPONENT_NAMES
        if components.get(name) < LOW_COMPONENT_THRESHOLD
    ]


def calculate_trust(
    signals: Sequence[TrustSignal],
    current: TrustComponents,
    now_ms: int,
) -> TrustCalculation:
    """
    Calculate score, level, components and factors from a signal history.

    Args:
        signals: The entity's retained signals, oldest first.
        current: Previously stored components; used for empty dimensions.
        now_ms:  Reference time for recency weighting.
    """
    components = calculate_components(signals, current, now_ms)
    score = weighted_score(components)
    return TrustCalculation(
        score=score,
        level=score_to_level(score),
        components=components,
        factors=significant_factors(components),
    )
