# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Rejections produced while admitting an authenticated request.

Every subtype except ``CredentialMissingError`` and ``SessionSupersededError``
renders the same client body, so a caller cannot learn which check failed.
The precise ``code`` is only written to the log.
"""

from __future__ import annotations

from http import HTTPStatus
from typing import Any

from wellnest.shared.errors.base import DomainError

REDIRECT_TO_LOGIN = "redirect_to_login"


class AuthenticationError(DomainError):
    code = "invalid_token"
    status = HTTPStatus.FORBIDDEN
    message = "Invalid or expired token"

    def to_dict(self) -> dict[str, Any]:
        return {"success": False, "error": self.message, "action": REDIRECT_TO_LOGIN}


class CredentialMissingError(AuthenticationError):
    code = "credential_missing"
    status = HTTPStatus.UNAUTHORIZED
    message = "Access token required"


class CredentialMalformedError(AuthenticationError):
    code = "credential_malformed"


class SignatureInvalidError(AuthenticationError):
    code = "signature_invalid"


class CredentialExpiredError(AuthenticationError):
    code = "credential_expired"


class IdentityInactiveOrMissingError(AuthenticationError):
    code = "identity_inactive_or_missing"


class SessionSupersededError(AuthenticationError):
    code = "session_superseded"
    status = HTTPStatus.UNAUTHORIZED
    message = "Session expired due to login from another device"
