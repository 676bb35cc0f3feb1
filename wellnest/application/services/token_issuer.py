# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import jwt

from wellnest.domain.sessions.entities import IssuedToken, TokenClaims
from wellnest.domain.sessions.exceptions import (
    CredentialExpiredError,
    CredentialMalformedError,
    SignatureInvalidError,
)
from wellnest.shared.clock import Clock, to_millis
from wellnest.shared.logging import logger

_REQUIRED_CLAIMS = ["sub", "iat", "exp"]


class JwtTokenIssuer:
    """Mints and verifies HMAC-signed bearer tokens.

    Expiry is checked against the injected clock rather than PyJWT's wall
    clock. ``iat``/``exp`` carry millisecond precision so a logout in the same
    second as the login still supersedes the token.
    """

    def __init__(
        self,
        *,
        secret: str,
        clock: Clock,
        ttl_seconds: int,
        algorithm: str = "HS256",
    ) -> None:
        if not secret:
            raise ValueError("JWT secret must not be empty")
        self._secret = secret
        self._clock = clock
        self._ttl = timedelta(seconds=ttl_seconds)
        self._algorithm = algorithm

    def issue(self, user_id: int) -> IssuedToken:
        issued_at = to_millis(self._clock.now())
        expires_at = issued_at + self._ttl
        payload = {
            "sub": str(user_id),
            "iat": issued_at.timestamp(),
            "exp": expires_at.timestamp(),
        }
        token = jwt.encode(payload, self._secret, algorithm=self._algorithm)
        return IssuedToken(
            token=token, user_id=user_id, issued_at=issued_at, expires_at=expires_at
        )

    def verify(self, raw_token: str) -> TokenClaims:
        try:
            payload = jwt.decode(
                raw_token,
                self._secret,
                algorithms=[self._algorithm],
                options={
                    "require": _REQUIRED_CLAIMS,
                    "verify_exp": False,
                    "verify_iat": False,
                    "verify_nbf": False,
                },
            )
        except jwt.InvalidSignatureError as exc:
            raise SignatureInvalidError() from exc
        except jwt.InvalidTokenError as exc:
            raise CredentialMalformedError(context={"reason": type(exc).__name__}) from exc

        claims = _parse_claims(payload)
        if self._clock.now() >= claims.expires_at:
            raise CredentialExpiredError(context={"user_id": claims.user_id})
        return claims


def _parse_claims(payload: dict) -> TokenClaims:
    try:
        user_id = int(payload["sub"])
        issued_at = _from_timestamp(payload["iat"])
        expires_at = _from_timestamp(payload["exp"])
    except (KeyError, TypeError, ValueError, OverflowError, OSError) as exc:
        logger.debug(f"token: unusable claims {type(exc).__name__}")
        raise CredentialMalformedError(context={"reason": "claims"}) from exc
    return TokenClaims(user_id=user_id, issued_at=issued_at, expires_at=expires_at)


def _from_timestamp(value: object) -> datetime:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError("timestamp claim must be numeric")
    return datetime.fromtimestamp(value, UTC)


__all__ = ["JwtTokenIssuer"]
