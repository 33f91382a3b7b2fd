# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation
from __future__ import annotations

from pydantic import BaseModel, Field


class TrustEngineConfig(BaseModel, frozen=True):
    """
    Configuration for the TrustEngine.

    All fields are optional — the defaults reproduce the standard decay and
    failure-detection behaviour.

    Attributes:
        decay_rate: Fraction of the score lost per elapsed decay interval.
        decay_interval_ms: Length of one decay period in milliseconds. Reads
            within one interval of the last calculation apply no decay.
        failure_threshold: Signals with a value strictly below this are
            counted as failures.
        accelerated_decay_multiplier: Factor applied to ``decay_rate`` while
            accelerated decay is active.
        failure_window_ms: Rolling window within which failures are counted.
        min_failures_for_acceleration: Failures inside the window needed to
            activate accelerated decay.
        auto_persist: Save each mutated record through the storage provider.
            ``None`` means "enabled when a storage provider is supplied".

    Example::

        config = TrustEngineConfig(decay_rate=0.02, failure_window_ms=1_800_000)
        engine = TrustEngine(config, storage=MemoryStorage())
    """

    decay_rate: float = Field(default=0.01, ge=0.0, lt=1.0)
    decay_interval_ms: int = Field(default=60_000, gt=0)
    failure_threshold: float = Field(default=0.3, ge=0.0, le=1.0)
    accelerated_decay_multiplier: float = Field(default=3.0, ge=1.0)
    failure_window_ms: int = Field(default=3_600_000, gt=0)
    min_failures_for_acceleration: int = Field(default=2, ge=1)
    auto_persist: bool | None = None
