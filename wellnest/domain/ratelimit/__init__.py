# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .entities import (
    CounterSnapshot,
    RateLimitDecision,
    RateLimitRule,
    StoreFailure,
    StoreResult,
)
from .exceptions import RateLimitExceededError
from .repositories import CounterStore

__all__ = [
    "CounterSnapshot",
    "CounterStore",
    "RateLimitDecision",
    "RateLimitExceededError",
    "RateLimitRule",
    "StoreFailure",
    "StoreResult",
]
