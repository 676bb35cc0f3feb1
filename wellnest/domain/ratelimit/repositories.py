# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from typing import Protocol

from .entities import StoreResult


class CounterStore(Protocol):
    """Key to counter mapping with store-managed fixed windows.

    ``increment`` must be atomic per key: concurrent callers on one key never
    lose an update. Connectivity problems are reported as ``StoreFailure``
    values instead of exceptions.
    """

    def increment(self, key: str, window_seconds: int) -> StoreResult: ...
    def current(self, key: str) -> int: ...
    def ttl(self, key: str) -> int: ...
    def reset(self, key: str) -> None: ...
    def sweep(self) -> int: ...
