# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from wellnest.domain.ratelimit.entities import (
    CounterSnapshot,
    RateLimitDecision,
    StoreFailure,
)
from wellnest.domain.ratelimit.repositories import CounterStore
from wellnest.infrastructure.observability import RATE_LIMIT_DECISIONS
from wellnest.shared.logging import logger


class RateLimiter:
    """Fixed-window admission on top of a ``CounterStore``.

    A window edge can admit up to twice ``limit`` requests in quick
    succession; that burst is accepted in exchange for a single counter per key.
    """

    def __init__(self, store: CounterStore) -> None:
        self._store = store

    def check_and_increment(self, key: str, limit: int, window_seconds: int) -> RateLimitDecision:
        result = self._store.increment(key, window_seconds)

        if isinstance(result, StoreFailure):
            logger.warning(
                f"rate_limit: store unavailable, failing open key={key} reason={result.reason}"
            )
            RATE_LIMIT_DECISIONS.labels(outcome="degraded").inc()
            return RateLimitDecision(
                allowed=True,
                limit=limit,
                remaining=limit,
                reset_in=window_seconds,
                degraded=True,
            )

        decision = _decide(result, limit)
        if decision.allowed:
            RATE_LIMIT_DECISIONS.labels(outcome="allowed").inc()
            if decision.remaining <= limit * 0.2:
                logger.debug(
                    f"rate_limit: approaching limit key={key} remaining={decision.remaining}"
                )
        else:
            RATE_LIMIT_DECISIONS.labels(outcome="denied").inc()
            logger.warning(
                f"rate_limit: exceeded key={key} count={result.count} limit={limit} "
                f"reset_in={decision.reset_in}s"
            )
        return decision

    def status(self, key: str, limit: int) -> dict[str, int]:
        count = self._store.current(key)
        return {
            "count": count,
            "limit": limit,
            "remaining": max(limit - count, 0),
            "reset_in": self._store.ttl(key),
        }

    def reset(self, key: str) -> None:
        self._store.reset(key)
        logger.info(f"rate_limit: reset key={key}")


def _decide(snapshot: CounterSnapshot, limit: int) -> RateLimitDecision:
    return RateLimitDecision(
        allowed=snapshot.count <= limit,
        limit=limit,
        remaining=max(limit - snapshot.count, 0),
        reset_in=snapshot.reset_in,
    )


__all__ = ["RateLimiter"]
