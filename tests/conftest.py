# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation
"""Shared fixtures for trust-engine tests."""

from __future__ import annotations

import pytest

from trust_engine.engine import TrustEngine
from trust_engine.storage.memory import MemoryStorage
from trust_engine.types import TrustSignal

#: 2026-01-01T00:00:00Z in epoch milliseconds.
T0 = 1_767_225_600_000


class FakeClock:
    """Controllable epoch-millisecond clock."""

    def __init__(self, start_ms: int = T0) -> None:
        self.now = start_ms

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


def make_signal(
    clock: FakeClock,
    entity_id: str,
    value: float,
    signal_type: str = "behavioral.success",
) -> TrustSignal:
    """A signal stamped with the fake clock's current time (zero age)."""
    return TrustSignal(entity_id=entity_id, type=signal_type, value=value, timestamp=clock())


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def engine(clock: FakeClock) -> TrustEngine:
    """A TrustEngine with default config, no storage and a fake clock."""
    return TrustEngine(clock=clock)


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def persistent_engine(clock: FakeClock, storage: MemoryStorage) -> TrustEngine:
    """A TrustEngine backed by MemoryStorage (auto-persist on)."""
    return TrustEngine(storage=storage, clock=clock)
