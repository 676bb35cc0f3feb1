# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import redis
from redis.exceptions import RedisError

from wellnest.domain.ratelimit.entities import CounterSnapshot, StoreFailure, StoreResult
from wellnest.domain.ratelimit.repositories import CounterStore
from wellnest.shared.logging import logger


class RedisCounterStore(CounterStore):
    """Shared counters for multi-process deployments.

    ``INCR``, ``EXPIRE NX`` and ``TTL`` run in one MULTI/EXEC transaction, so
    the window expiry is attached by the same atomic step that creates the
    key. ``EXPIRE NX`` needs Redis 7 or newer.
    """

    def __init__(self, client: redis.Redis, *, namespace: str = "wellnest:rl") -> None:
        self._client = client
        self._namespace = namespace

    @classmethod
    def from_url(cls, url: str, *, timeout: float) -> RedisCounterStore:
        client = redis.Redis.from_url(
            url,
            socket_timeout=timeout,
            socket_connect_timeout=timeout,
            decode_responses=True,
        )
        return cls(client)

    def _name(self, key: str) -> str:
        return f"{self._namespace}:{key}"

    def increment(self, key: str, window_seconds: int) -> StoreResult:
        name = self._name(key)
        try:
            with self._client.pipeline(transaction=True) as pipe:
                pipe.incr(name)
                pipe.expire(name, window_seconds, nx=True)
                pipe.ttl(name)
                count, _, ttl = pipe.execute()
        except RedisError as exc:
            return StoreFailure(reason=f"{type(exc).__name__}: {exc}")

        ttl = int(ttl)
        return CounterSnapshot(count=int(count), reset_in=ttl if ttl > 0 else window_seconds)

    def current(self, key: str) -> int:
        try:
            value = self._client.get(self._name(key))
        except RedisError as exc:
            logger.warning(f"rate_limit.redis: read failed key={key} error={exc}")
            return 0
        return int(value) if value else 0

    def ttl(self, key: str) -> int:
        try:
            ttl = int(self._client.ttl(self._name(key)))
        except RedisError as exc:
            logger.warning(f"rate_limit.redis: ttl failed key={key} error={exc}")
            return 0
        return max(ttl, 0)

    def reset(self, key: str) -> None:
        try:
            self._client.delete(self._name(key))
        except RedisError as exc:
            logger.warning(f"rate_limit.redis: reset failed key={key} error={exc}")

    def sweep(self) -> int:
        # Keys expire on their own.
        return 0

    def ping(self) -> bool:
        try:
            return bool(self._client.ping())
        except RedisError as exc:
            logger.error(f"rate_limit.redis: connection failed error={exc}")
            return False


__all__ = ["RedisCounterStore"]
