# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import datetime

from wellnest.domain.sessions.entities import TokenClaims
from wellnest.domain.sessions.exceptions import (
    IdentityInactiveOrMissingError,
    SessionSupersededError,
)
from wellnest.domain.sessions.policy import is_current
from wellnest.domain.users.entities import User
from wellnest.domain.users.exceptions import CredentialStoreUnavailable
from wellnest.domain.users.repositories import CredentialStore
from wellnest.shared.clock import Clock, to_millis
from wellnest.shared.logging import logger


class SessionValidityGuard:
    """Single active session per identity, derived from ``last_login_at``.

    No token registry is kept: a newer login (or a logout) advances the
    marker past the ``iat`` of every previously issued token.
    """

    def __init__(self, *, credentials: CredentialStore, clock: Clock) -> None:
        self._credentials = credentials
        self._clock = clock

    @staticmethod
    def is_current(issued_at: datetime, last_login_at: datetime | None) -> bool:
        return is_current(issued_at, last_login_at)

    def record_login(self, user_id: int, at: datetime | None = None) -> datetime:
        instant = to_millis(at or self._clock.now())
        marker = self._credentials.set_last_login(user_id, instant)
        logger.debug(f"session: marker user={user_id} at={marker.isoformat()}")
        return marker

    def authenticate(self, claims: TokenClaims) -> User:
        try:
            user = self._credentials.load(claims.user_id)
        except CredentialStoreUnavailable as exc:
            logger.warning(
                f"session: credential store unavailable for user={claims.user_id}, "
                f"failing closed ({exc.context})"
            )
            raise IdentityInactiveOrMissingError(context={"reason": "store_unavailable"}) from exc

        if user is None or not user.is_active:
            raise IdentityInactiveOrMissingError(context={"user_id": claims.user_id})

        if not self.is_current(claims.issued_at, user.last_login_at):
            raise SessionSupersededError(
                context={
                    "user_id": user.id,
                    "issued_at": claims.issued_at.isoformat(),
                    "last_login_at": user.last_login_at.isoformat()
                    if user.last_login_at
                    else None,
                }
            )
        return user


__all__ = ["SessionValidityGuard"]
