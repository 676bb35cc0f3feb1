# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from http import HTTPStatus
from typing import Any

from wellnest.shared.errors.base import DomainError

from .entities import RateLimitDecision


class RateLimitExceededError(DomainError):
    code = "rate_limited"
    status = HTTPStatus.TOO_MANY_REQUESTS

    def __init__(self, decision: RateLimitDecision, message: str | None = None) -> None:
        self.decision = decision
        self.message = message or (
            f"Rate limit exceeded. Try again in {decision.reset_in} seconds."
        )
        super().__init__(context={"retry_after": decision.reset_in})

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "Too many requests",
            "retryAfter": self.decision.reset_in,
            "message": self.message,
        }

    def headers(self) -> dict[str, str]:
        headers = self.decision.headers()
        headers["Retry-After"] = str(self.decision.reset_in)
        return headers
