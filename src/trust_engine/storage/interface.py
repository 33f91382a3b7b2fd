# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""
Abstract base class that every trust record storage backend must implement.

The engine's in-memory state is authoritative. Storage is a write-behind
mirror used to restore state at startup; the engine never reads from it
during normal operation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from trust_engine.types import TrustRecord


class TrustStorage(ABC):
    """
    Contract for trust record persistence backends.

    Implementors may back this with Postgres, Supabase, Redis, a JSON file or
    any key-value store. Records are keyed by ``entity_id``;
    ``record.model_dump(mode="json")`` gives a JSON-compatible representation
    and ``TrustRecord.model_validate`` restores it.

    Implementations must not keep a reference to the record passed to
    :meth:`save` — the engine keeps mutating it after the call returns.
    """

    @abstractmethod
    async def query(self) -> list[TrustRecord]:
        """Return every stored record. Used for bulk load at startup."""
        ...

    @abstractmethod
    async def save(self, record: TrustRecord) -> None:
        """Insert or replace the record for ``record.entity_id``."""
        ...

    @abstractmethod
    async def delete(self, entity_id: str) -> None:
        """Delete the record for *entity_id*. Deleting a missing record is a no-op."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release any resources held by the backend."""
        ...
