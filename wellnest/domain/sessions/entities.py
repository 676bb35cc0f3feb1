# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True, frozen=True)
class IssuedToken:

    token: str
    user_id: int
    issued_at: datetime
    expires_at: datetime


@dataclass(slots=True, frozen=True)
class TokenClaims:

    user_id: int
    issued_at: datetime
    expires_at: datetime
