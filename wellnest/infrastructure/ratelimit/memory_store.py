# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from threading import Lock

from wellnest.domain.ratelimit.entities import CounterSnapshot, StoreResult
from wellnest.domain.ratelimit.repositories import CounterStore
from wellnest.shared.clock import Clock
from wellnest.shared.logging import logger


@dataclass(slots=True)
class _Window:
    count: int
    window_start: datetime
    window_seconds: int
    last_seen: datetime


@dataclass(slots=True)
class _Shard:
    lock: Lock = field(default_factory=Lock)
    windows: dict[str, _Window] = field(default_factory=dict)


def _elapsed(now: datetime, since: datetime) -> float:
    return (now - since).total_seconds()


class InMemoryCounterStore(CounterStore):
    """Process-local fixed-window counters.

    Keys are spread over independently locked shards: the read-check-increment
    for one key is atomic, and keys in different shards never contend. Only
    valid for single-process deployments; counters are lost on restart.
    """

    def __init__(self, *, clock: Clock, shards: int = 64, idle_multiple: int = 5) -> None:
        if idle_multiple < 5:
            raise ValueError("idle_multiple must be at least 5 windows")
        self._clock = clock
        self._idle_multiple = idle_multiple
        self._shards = tuple(_Shard() for _ in range(max(1, shards)))

    def _shard(self, key: str) -> _Shard:
        return self._shards[hash(key) % len(self._shards)]

    def increment(self, key: str, window_seconds: int) -> StoreResult:
        shard = self._shard(key)
        with shard.lock:
            now = self._clock.now()
            window = shard.windows.get(key)
            if window is None or _elapsed(now, window.window_start) >= window.window_seconds:
                window = _Window(
                    count=1, window_start=now, window_seconds=window_seconds, last_seen=now
                )
                shard.windows[key] = window
            else:
                window.count += 1
                window.last_seen = now
            count = window.count
            reset_in = math.ceil(window.window_seconds - _elapsed(now, window.window_start))
        return CounterSnapshot(count=count, reset_in=reset_in)

    def current(self, key: str) -> int:
        shard = self._shard(key)
        with shard.lock:
            window = shard.windows.get(key)
            if window is None:
                return 0
            if _elapsed(self._clock.now(), window.window_start) >= window.window_seconds:
                return 0
            return window.count

    def ttl(self, key: str) -> int:
        shard = self._shard(key)
        with shard.lock:
            window = shard.windows.get(key)
            if window is None:
                return 0
            remaining = window.window_seconds - _elapsed(self._clock.now(), window.window_start)
            return max(math.ceil(remaining), 0)

    def reset(self, key: str) -> None:
        shard = self._shard(key)
        with shard.lock:
            shard.windows.pop(key, None)

    def sweep(self) -> int:
        removed = 0
        for shard in self._shards:
            with shard.lock:
                now = self._clock.now()
                idle = [
                    key
                    for key, window in shard.windows.items()
                    if _elapsed(now, window.last_seen)
                    > window.window_seconds * self._idle_multiple
                ]
                for key in idle:
                    del shard.windows[key]
                removed += len(idle)
        if removed:
            logger.debug(f"rate_limit.memory: swept {removed} idle counters")
        return removed

    def __len__(self) -> int:
        total = 0
        for shard in self._shards:
            with shard.lock:
                total += len(shard.windows)
        return total


__all__ = ["InMemoryCounterStore"]
