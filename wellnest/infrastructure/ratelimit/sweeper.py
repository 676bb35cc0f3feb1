# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import threading

from wellnest.domain.ratelimit.repositories import CounterStore
from wellnest.shared.logging import logger


class CounterSweeper:
    def __init__(self, store: CounterStore, *, interval: float) -> None:
        self._store = store
        self._interval = interval
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._run, name="ratelimit-sweeper", daemon=True
        )
        self._thread.start()
        logger.info(f"rate_limit.sweeper: started interval={self._interval}s")

    def stop(self, timeout: float | None = 5.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        logger.info("rate_limit.sweeper: stopped")

    def run_once(self) -> int:
        try:
            removed = self._store.sweep()
        except Exception:
            logger.exception("rate_limit.sweeper: sweep failed")
            return 0
        if removed:
            logger.info(f"rate_limit.sweeper: cleaned up {removed} idle counters")
        return removed

    def _run(self) -> None:
        while not self._stop.wait(self._interval):
            self.run_once()


__all__ = ["CounterSweeper"]
