# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""
Trust event models and the in-process publish/subscribe bus.

Every mutating engine operation emits one or more typed events. Handlers
subscribe to a single event type or to the ``trust:*`` wildcard, which
receives every event. Dispatch is synchronous and best-effort: a handler that
raises is logged and skipped, and never affects engine state or the
remaining handlers.

Usage::

    bus = TrustEventBus()
    sub_id = bus.subscribe(TrustEventType.TIER_CHANGED, on_tier_change)
    bus.subscribe(TrustEventType.ALL, audit_everything)
    bus.unsubscribe(sub_id)
"""

from __future__ import annotations

import logging
import uuid
from enum import Enum
from typing import Callable, Literal, Union

from pydantic import BaseModel, Field

from .clock import TimestampMs
from .levels import TrustLevel
from .types import TrustSignal

logger = logging.getLogger("aumos.trust.events")


class TrustEventType(str, Enum):
    """Trust event channels."""

    INITIALIZED = "trust:initialized"
    SIGNAL_RECORDED = "trust:signal_recorded"
    SCORE_CHANGED = "trust:score_changed"
    TIER_CHANGED = "trust:tier_changed"
    DECAY_APPLIED = "trust:decay_applied"
    FAILURE_DETECTED = "trust:failure_detected"
    ALL = "trust:*"


# ---------------------------------------------------------------------------
# Event models
# ---------------------------------------------------------------------------


class TrustEvent(BaseModel, frozen=True):
    """Fields shared by every trust event."""

    type: TrustEventType
    entity_id: str
    timestamp: TimestampMs


class TrustInitializedEvent(TrustEvent, frozen=True):
    type: Literal[TrustEventType.INITIALIZED] = TrustEventType.INITIALIZED
    initial_score: int
    initial_level: TrustLevel


class TrustSignalRecordedEvent(TrustEvent, frozen=True):
    type: Literal[TrustEventType.SIGNAL_RECORDED] = TrustEventType.SIGNAL_RECORDED
    signal: TrustSignal
    previous_score: int
    new_score: int


class TrustScoreChangedEvent(TrustEvent, frozen=True):
    type: Literal[TrustEventType.SCORE_CHANGED] = TrustEventType.SCORE_CHANGED
    previous_score: int
    new_score: int
    delta: int
    reason: str


class TrustTierChangedEvent(TrustEvent, frozen=True):
    type: Literal[TrustEventType.TIER_CHANGED] = TrustEventType.TIER_CHANGED
    previous_level: TrustLevel
    new_level: TrustLevel
    previous_level_name: str
    new_level_name: str
    direction: Literal["promoted", "demoted"]


class TrustDecayAppliedEvent(TrustEvent, frozen=True):
    type: Literal[TrustEventType.DECAY_APPLIED] = TrustEventType.DECAY_APPLIED
    previous_score: int
    new_score: int
    decay_amount: int
    staleness_ms: int
    accelerated: bool


class TrustFailureDetectedEvent(TrustEvent, frozen=True):
    type: Literal[TrustEventType.FAILURE_DETECTED] = TrustEventType.FAILURE_DETECTED
    signal: TrustSignal
    failure_count: int = Field(..., ge=0)
    accelerated_decay_active: bool


AnyTrustEvent = Union[
    TrustInitializedEvent,
    TrustSignalRecordedEvent,
    TrustScoreChangedEvent,
    TrustTierChangedEvent,
    TrustDecayAppliedEvent,
    TrustFailureDetectedEvent,
]

TrustEventHandler = Callable[[TrustEvent], None]


# ---------------------------------------------------------------------------
# Event bus
# ---------------------------------------------------------------------------


class TrustEventBus:
    """
    Synchronous in-process publish/subscribe utility for trust events.

    Thread-safety: not thread-safe. The engine emits from the event loop
    thread; subscribe from the same thread.
    """

    def __init__(self) -> None:
        # subscription id -> (channel, handler), in subscription order
        self._subscriptions: dict[str, tuple[TrustEventType, TrustEventHandler]] = {}

    def subscribe(
        self,
        event_type: TrustEventType | str,
        handler: TrustEventHandler,
    ) -> str:
        """
        Register *handler* for one event type, or for every event when
        *event_type* is ``TrustEventType.ALL`` / ``"trust:*"``.

        Returns:
            An opaque subscription id for :meth:`unsubscribe`.

        Raises:
            ValueError: If *event_type* is not a known channel.
            TypeError:  If *handler* is not callable.
        """
        channel = TrustEventType(event_type)
        if not callable(handler):
            raise TypeError("Event handler must be callable.")
        subscription_id = uuid.uuid4().hex
        self._subscriptions[subscription_id] = (channel, handler)
        return subscription_id

    def unsubscribe(self, subscription_id: str) -> bool:
        """Remove a subscription. Returns False if it did not exist."""
        return self._subscriptions.pop(subscription_id, None) is not None

    def clear(self) -> None:
        """Remove every subscription."""
        self._subscriptions.clear()

    def subscriber_count(self, event_type: TrustEventType | str | None = None) -> int:
        """Count subscriptions, optionally only those on one channel."""
        if event_type is None:
            return len(self._subscriptions)
        channel = TrustEventType(event_type)
        return sum(1 for subscribed, _ in self._subscriptions.values() if subscribed == channel)

    def emit(self, event: TrustEvent) -> None:
        """
        Deliver *event* to handlers of its own type, then to wildcard handlers.

        Handlers registered or removed during dispatch take effect from the
        next event.
        """
        targets = [
            handler
            for channel, handler in list(self._subscriptions.values())
            if channel == event.type
        ]
        targets.extend(
            handler
            for channel, handler in list(self._subscriptions.values())
            if channel == TrustEventType.ALL
        )
        for handler in targets:
            try:
                handler(event)
            except Exception:
                logger.exception(
                    "trust_event_handler_failed",
                    extra={"event_type": event.type.value, "entity_id": event.entity_id},
                )
