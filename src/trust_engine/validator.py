# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation
from __future__ import annotations

from pydantic import BaseModel

from .levels import TrustLevel, trust_level_name


class TrustCheckResult(BaseModel, frozen=True):
    """
    Result of gating an entity against a required trust tier.

    Attributes:
        permitted: True if the effective level meets or exceeds the requirement.
        entity_id: The entity that was evaluated.
        required_level: The minimum tier required.
        effective_level: The entity's tier after lazy decay.
        score: The entity's score after lazy decay.
        known_entity: False when the entity has no record and was evaluated
            at the default tier.
        reason: Human-readable explanation of the decision.
    """

    permitted: bool
    entity_id: str
    required_level: TrustLevel
    effective_level: TrustLevel
    score: int | None = None
    known_entity: bool = True
    reason: str


def validate_tier(
    entity_id: str,
    required_level: TrustLevel,
    effective_level: TrustLevel,
    score: int | None = None,
    known_entity: bool = True,
) -> TrustCheckResult:
    """
    Decide whether *effective_level* satisfies *required_level*.

    This is a pure function — it does not read engine state or log anything.
    """
    permitted = effective_level >= required_level
    comparison = "satisfies" if permitted else "is below"
    score_text = f", score {score}" if score is not None else ""
    default_text = "" if known_entity else " (unregistered, default tier)"

    reason = (
        f"Entity '{entity_id}'{default_text} has trust level "
        f"{trust_level_name(effective_level)} ({int(effective_level)}{score_text}), "
        f"which {comparison} the required level "
        f"{trust_level_name(required_level)} ({int(required_level)})."
    )

    return TrustCheckResult(
        permitted=permitted,
        entity_id=entity_id,
        required_level=required_level,
        effective_level=effective_level,
        score=score,
        known_entity=known_entity,
        reason=reason,
    )
