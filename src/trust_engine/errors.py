# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation
from __future__ import annotations


class TrustEngineError(Exception):
    """Base class for all trust-engine errors."""

    def __init__(self, message: str, code: str = "TRUST_ENGINE_ERROR") -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"


class ConfigurationError(TrustEngineError):
    """Raised when an operation needs something the engine was not given."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="CONFIGURATION_ERROR")


class PersistenceError(TrustEngineError):
    """
    Raised when the storage provider fails.

    The in-memory state of the engine is authoritative and is never rolled
    back; the original provider exception is chained as ``__cause__``.

    Attributes:
        operation: The storage operation that failed (save, delete, query, close).
        entity_id: The affected entity, when the operation concerned one.
    """

    def __init__(self, operation: str, entity_id: str | None = None) -> None:
        entity_text = f" for entity '{entity_id}'" if entity_id else ""
        super().__init__(
            f"Storage provider failed during {operation}{entity_text}.",
            code="PERSISTENCE_ERROR",
        )
        self.operation = operation
        self.entity_id = entity_id


class TrustLevelError(TrustEngineError):
    """
    Raised when an entity's effective trust tier is below a requirement.

    Attributes:
        entity_id: The entity whose tier was evaluated.
        required_level: The minimum tier required.
        actual_level: The entity's effective tier after decay.
    """

    def __init__(self, entity_id: str, required_level: int, actual_level: int) -> None:
        super().__init__(
            f"Entity '{entity_id}' has trust level {actual_level} "
            f"but action requires level {required_level}.",
            code="TRUST_LEVEL_INSUFFICIENT",
        )
        self.entity_id = entity_id
        self.required_level = required_level
        self.actual_level = actual_level
