# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation
"""Tests for timestamp normalisation."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from conftest import T0
from trust_engine.clock import ms_to_iso, to_epoch_ms
from trust_engine.types import TrustSignal


class TestToEpochMs:
    def test_iso_with_z_suffix(self) -> None:
        assert to_epoch_ms("2026-01-01T00:00:00Z") == T0

    def test_iso_with_offset(self) -> None:
        assert to_epoch_ms("2026-01-01T02:00:00+02:00") == T0

    def test_naive_datetime_is_utc(self) -> None:
        assert to_epoch_ms(datetime(2026, 1, 1)) == T0

    def test_aware_datetime(self) -> None:
        eastern = timezone(timedelta(hours=-5))
        assert to_epoch_ms(datetime(2025, 12, 31, 19, 0, tzinfo=eastern)) == T0

    def test_numbers_pass_through(self) -> None:
        assert to_epoch_ms(T0) == T0
        assert to_epoch_ms(float(T0)) == T0

    def test_bool_rejected(self) -> None:
        with pytest.raises(TypeError):
            to_epoch_ms(True)

    def test_garbage_string_rejected(self) -> None:
        with pytest.raises(ValueError):
            to_epoch_ms("yesterday")


class TestIso:
    def test_ms_to_iso(self) -> None:
        assert ms_to_iso(T0 + 250) == "2026-01-01T00:00:00.250+00:00"

    def test_signal_timestamp_coercion(self) -> None:
        signal = TrustSignal(
            entity_id="agent-001",
            type="identity.verified",
            value=1.0,
            timestamp=datetime(2026, 1, 1, tzinfo=timezone.utc),
        )
        assert signal.timestamp == T0
        assert signal.model_dump(mode="json")["timestamp"] == "2026-01-01T00:00:00.000+00:00"
