# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

from .interface import TrustStorage
from .memory import MemoryStorage

__all__ = ["TrustStorage", "MemoryStorage"]
