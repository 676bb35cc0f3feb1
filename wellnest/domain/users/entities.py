# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True, frozen=True)
class User:

    id: int
    phone: str
    name: str
    role: str
    is_active: bool
    profile_completed: bool
    created_at: datetime
    last_login_at: datetime | None = None

    def summary(self) -> dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "phone": self.phone,
            "role": self.role,
            "profileCompleted": self.profile_completed,
            "lastLoginAt": self.last_login_at.isoformat() if self.last_login_at else None,
        }


@dataclass(slots=True)
class OtpCode:

    phone: str
    code_hash: str
    expires_at: datetime
    updated_at: datetime
    attempts: int = 0
    is_used: bool = False

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at

    def attempts_left(self, max_attempts: int) -> int:
        return max(max_attempts - self.attempts, 0)
