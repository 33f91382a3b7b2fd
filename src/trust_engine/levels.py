# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""
Trust tier definitions for the behavioral trust engine.

A trust score is an integer in [0, 1000]. The score space is split into six
contiguous, non-overlapping bands; each band maps to one TrustLevel. Levels
are always derived from a score and never set independently.
"""

from __future__ import annotations

from enum import IntEnum


class TrustLevel(IntEnum):
    """
    Six ordered authority tiers for autonomous agents.

    Higher values grant broader authority. The level of a record is always
    ``score_to_level(record.score)``.
    """

    SANDBOX = 0
    PROVISIONAL = 1
    STANDARD = 2
    TRUSTED = 3
    CERTIFIED = 4
    AUTONOMOUS = 5


#: Lowest possible trust score.
SCORE_MIN: int = 0

#: Highest possible trust score.
SCORE_MAX: int = 1000

#: Inclusive (min, max) score band for each tier.
TRUST_THRESHOLDS: dict[TrustLevel, tuple[int, int]] = {
    TrustLevel.SANDBOX: (0, 99),
    TrustLevel.PROVISIONAL: (100, 299),
    TrustLevel.STANDARD: (300, 499),
    TrustLevel.TRUSTED: (500, 699),
    TrustLevel.CERTIFIED: (700, 899),
    TrustLevel.AUTONOMOUS: (900, 1000),
}

TRUST_LEVEL_NAMES: dict[TrustLevel, str] = {
    TrustLevel.SANDBOX: "Sandbox",
    TrustLevel.PROVISIONAL: "Provisional",
    TrustLevel.STANDARD: "Standard",
    TrustLevel.TRUSTED: "Trusted",
    TrustLevel.CERTIFIED: "Certified",
    TrustLevel.AUTONOMOUS: "Autonomous",
}

#: Minimum trust level.
TRUST_LEVEL_MIN: TrustLevel = TrustLevel.SANDBOX

#: Maximum trust level.
TRUST_LEVEL_MAX: TrustLevel = TrustLevel.AUTONOMOUS

#: Level assigned to entities first seen through a signal.
DEFAULT_TRUST_LEVEL: TrustLevel = TrustLevel.PROVISIONAL


def is_valid_trust_level(value: object) -> bool:
    """Return True if *value* is a valid TrustLevel integer [0, 5]."""
    return (
        isinstance(value, int)
        and not isinstance(value, bool)
        and TRUST_LEVEL_MIN <= value <= TRUST_LEVEL_MAX
    )


def validate_level(level: object) -> TrustLevel:
    """
    Validate that *level* is a valid trust level integer [0, 5].

    Raises:
        TypeError:  If level is not an integer.
        ValueError: If level is out of the valid range.
    """
    if not isinstance(level, int) or isinstance(level, bool):
        raise TypeError(f"Trust level must be an integer, got {type(level).__name__!r}.")
    if not is_valid_trust_level(level):
        raise ValueError(f"Trust level must be an integer in [0, 5]. Received: {level!r}.")
    return TrustLevel(level)


def trust_level_name(level: int) -> str:
    """
    Return the display name for a numeric trust level.

    Raises:
        ValueError: If *level* is out of the valid range [0, 5].
    """
    if not is_valid_trust_level(level):
        raise ValueError(
            f"Trust level {level!r} is out of range "
            f"[{int(TRUST_LEVEL_MIN)}, {int(TRUST_LEVEL_MAX)}]."
        )
    return TRUST_LEVEL_NAMES[TrustLevel(level)]


def level_floor(level: int) -> int:
    """Return the minimum score of the band for *level*."""
    return TRUST_THRESHOLDS[validate_level(level)][0]


def clamp_score(value: float) -> int:
    """Clamp *value* to the valid score range [0, 1000] as an integer."""
    return int(max(SCORE_MIN, min(SCORE_MAX, value)))


def score_to_level(score: float) -> TrustLevel:
    """
    Return the tier whose band contains *score*.

    Scores outside every band (only possible for unclamped input) map to
    SANDBOX.
    """
    for level, (low, high) in TRUST_THRESHOLDS.items():
        if low <= score <= high:
            return level
    return TRUST_LEVEL_MIN
