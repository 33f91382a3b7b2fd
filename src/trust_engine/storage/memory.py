# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""
Volatile in-memory storage backend.

Records are held as deep copies in a dict keyed by entity id. Suitable for
testing and single-process use; data is lost when the process exits.
"""

from __future__ import annotations

from trust_engine.storage.interface import TrustStorage
from trust_engine.types import TrustRecord


class MemoryStorage(TrustStorage):
    """In-memory, non-persistent TrustStorage implementation."""

    def __init__(self) -> None:
        self._records: dict[str, TrustRecord] = {}
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def query(self) -> list[TrustRecord]:
        return [record.model_copy(deep=True) for record in self._records.values()]

    async def save(self, record: TrustRecord) -> None:
        self._records[record.entity_id] = record.model_copy(deep=True)

    async def delete(self, entity_id: str) -> None:
        self._records.pop(entity_id, None)

    async def close(self) -> None:
        self._closed = True

    def get(self, entity_id: str) -> TrustRecord | None:
        """Return a copy of the stored record for *entity_id*, if any."""
        record = self._records.get(entity_id)
        return record.model_copy(deep=True) if record is not None else None

    def __len__(self) -> int:
        return len(self._records)
