# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from dataclasses import dataclass, replace

from wellnest.application.services.session_guard import SessionValidityGuard
from wellnest.application.services.token_issuer import JwtTokenIssuer
from wellnest.domain.sessions.entities import IssuedToken
from wellnest.domain.users.entities import User
from wellnest.domain.users.exceptions import AccountDisabledError, InvalidOtpError, OtpExpiredError
from wellnest.domain.users.repositories import CodeHasher, OtpRepository, UserRepository
from wellnest.shared.clock import Clock
from wellnest.shared.config.settings import OtpConfig


@dataclass(slots=True, frozen=True)
class LoginResult:
    user: User
    token: IssuedToken
    created: bool


class VerifyOtpUseCase:
    def __init__(
        self,
        *,
        users: UserRepository,
        otps: OtpRepository,
        hasher: CodeHasher,
        issuer: JwtTokenIssuer,
        guard: SessionValidityGuard,
        clock: Clock,
        config: OtpConfig,
    ) -> None:
        self._users = users
        self._otps = otps
        self._hasher = hasher
        self._issuer = issuer
        self._guard = guard
        self._clock = clock
        self._config = config

    def execute(self, phone: str, code: str) -> LoginResult:
        self._consume_code(phone, code)

        user = self._users.find_by_phone(phone)
        created = user is None
        if user is None:
            user = self._users.add(
                User(
                    id=0,
                    phone=phone,
                    name="New User",
                    role="user",
                    is_active=True,
                    profile_completed=False,
                    created_at=self._clock.now(),
                )
            )
        if not user.is_active:
            raise AccountDisabledError()

        token = self._issuer.issue(user.id)
        # The marker takes the token's own iat, so this token stays current and
        # every older one is superseded.
        marker = self._guard.record_login(user.id, at=token.issued_at)
        return LoginResult(user=replace(user, last_login_at=marker), token=token, created=created)

    def _consume_code(self, phone: str, code: str) -> None:
        now = self._clock.now()
        max_attempts = self._config.max_attempts
        otp = self._otps.get(phone)
        if (
            otp is None
            or otp.is_used
            or otp.is_expired(now)
            or otp.attempts >= max_attempts
        ):
            raise OtpExpiredError()

        if not self._hasher.verify(code, otp.code_hash):
            attempts = self._otps.record_failure(phone, max_attempts)
            if attempts is None:
                raise OtpExpiredError()
            raise InvalidOtpError(remaining_attempts=max(max_attempts - attempts, 0))

        if not self._otps.consume(phone, max_attempts, now):
            raise OtpExpiredError()


__all__ = ["LoginResult", "VerifyOtpUseCase"]
