# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from .entities import OtpCode, User


class UserRepository(Protocol):
    def find_by_phone(self, phone: str) -> User | None: ...
    def find_by_id(self, user_id: int) -> User | None: ...
    def add(self, user: User) -> User: ...


class CredentialStore(Protocol):
    def load(self, user_id: int) -> User | None: ...
    def set_last_login(self, user_id: int, instant: datetime) -> datetime: ...


class OtpRepository(Protocol):
    """One-time codes keyed by phone.

    ``record_failure`` and ``consume`` are conditional writes: each succeeds
    for at most ``max_attempts`` failures or one consumption per code, even
    when callers race.
    """

    def get(self, phone: str) -> OtpCode | None: ...
    def save(self, otp: OtpCode) -> None: ...
    def record_failure(self, phone: str, max_attempts: int) -> int | None: ...
    def consume(self, phone: str, max_attempts: int, now: datetime) -> bool: ...


class CodeHasher(Protocol):
    def hash(self, code: str) -> str: ...
    def verify(self, code: str, hashed: str) -> bool: ...


class SmsSender(Protocol):
    def send_otp(self, phone: str, code: str) -> None: ...
