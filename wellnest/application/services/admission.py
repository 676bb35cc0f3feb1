# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from dataclasses import dataclass

from wellnest.application.services.rate_limiter import RateLimiter
from wellnest.application.services.session_guard import SessionValidityGuard
from wellnest.application.services.token_issuer import JwtTokenIssuer
from wellnest.domain.ratelimit.entities import RateLimitDecision, RateLimitRule
from wellnest.domain.ratelimit.exceptions import RateLimitExceededError
from wellnest.domain.ratelimit.keys import identity_key, ip_route_key
from wellnest.domain.sessions.exceptions import (
    AuthenticationError,
    CredentialMalformedError,
    CredentialMissingError,
)
from wellnest.domain.users.entities import User
from wellnest.shared.errors.base import AppError


def extract_bearer(authorization: str | None) -> str:
    parts = (authorization or "").split()
    if not parts or (len(parts) == 1 and parts[0].lower() == "bearer"):
        raise CredentialMissingError()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise CredentialMalformedError(context={"reason": "not_a_bearer_credential"})
    return parts[1]


@dataclass(slots=True, frozen=True)
class AdmissionResult:
    user: User | None = None
    decision: RateLimitDecision | None = None
    rejection: AppError | None = None

    @property
    def admitted(self) -> bool:
        return self.rejection is None


class RequestAdmission:
    """Authenticates a request, then counts it against its rate limit rule.

    Credential checks run first and rejections are returned as values.
    A request without a usable identity is still counted, against its
    client IP and route, so invalid tokens cannot be replayed without limit.
    """

    def __init__(
        self,
        *,
        issuer: JwtTokenIssuer,
        guard: SessionValidityGuard,
        limiter: RateLimiter,
        rate_limit_enabled: bool = True,
    ) -> None:
        self._issuer = issuer
        self._guard = guard
        self._limiter = limiter
        self._rate_limit_enabled = rate_limit_enabled

    def admit(
        self,
        authorization: str | None,
        client_ip: str,
        path: str,
        rule: RateLimitRule,
    ) -> AdmissionResult:
        try:
            claims = self._issuer.verify(extract_bearer(authorization))
            user = self._guard.authenticate(claims)
        except AuthenticationError as exc:
            decision = self._count(ip_route_key(rule.name, client_ip, path), rule)
            if decision is not None and not decision.allowed:
                return AdmissionResult(decision=decision, rejection=RateLimitExceededError(decision))
            return AdmissionResult(decision=decision, rejection=exc)

        decision = self._count(identity_key(rule.name, user.id), rule)
        if decision is not None and not decision.allowed:
            return AdmissionResult(
                user=user, decision=decision, rejection=RateLimitExceededError(decision)
            )
        return AdmissionResult(user=user, decision=decision)

    def _count(self, key: str, rule: RateLimitRule) -> RateLimitDecision | None:
        if not self._rate_limit_enabled:
            return None
        return self._limiter.check_and_increment(key, rule.limit, rule.window_seconds)


__all__ = ["AdmissionResult", "RequestAdmission", "extract_bearer"]
