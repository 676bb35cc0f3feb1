# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from dataclasses import dataclass
from typing import TypeAlias


@dataclass(slots=True, frozen=True)
class RateLimitRule:
    name: str
    limit: int
    window_seconds: int


@dataclass(slots=True, frozen=True)
class CounterSnapshot:
    """Counter value observed right after an atomic increment."""

    count: int
    reset_in: int


@dataclass(slots=True, frozen=True)
class StoreFailure:
    """The counter store could not be reached or answered with an error."""

    reason: str


StoreResult: TypeAlias = CounterSnapshot | StoreFailure


@dataclass(slots=True, frozen=True)
class RateLimitDecision:
    allowed: bool
    limit: int
    remaining: int
    reset_in: int
    degraded: bool = False

    def headers(self) -> dict[str, str]:
        return {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": str(self.reset_in),
        }
