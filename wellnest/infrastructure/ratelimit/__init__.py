# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .memory_store import InMemoryCounterStore
from .redis_store import RedisCounterStore
from .sweeper import CounterSweeper

__all__ = ["CounterSweeper", "InMemoryCounterStore", "RedisCounterStore"]
