# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import UTC, datetime
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock(Clock):
    def now(self) -> datetime:
        return datetime.now(UTC)


def to_millis(instant: datetime) -> datetime:
    """Drop sub-millisecond precision so the value survives a JWT round trip."""
    return instant.replace(microsecond=(instant.microsecond // 1000) * 1000)


def as_utc(instant: datetime) -> datetime:
    # SQLite hands back naive datetimes for timezone-aware columns.
    if instant.tzinfo is None:
        return instant.replace(tzinfo=UTC)
    return instant.astimezone(UTC)


__all__ = ["Clock", "SystemClock", "as_utc", "to_millis"]
