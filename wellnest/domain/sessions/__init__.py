# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .entities import IssuedToken, TokenClaims
from .exceptions import (
    AuthenticationError,
    CredentialExpiredError,
    CredentialMalformedError,
    CredentialMissingError,
    IdentityInactiveOrMissingError,
    SessionSupersededError,
    SignatureInvalidError,
)
from .policy import is_current

__all__ = [
    "AuthenticationError",
    "CredentialExpiredError",
    "CredentialMalformedError",
    "CredentialMissingError",
    "IdentityInactiveOrMissingError",
    "IssuedToken",
    "SessionSupersededError",
    "SignatureInvalidError",
    "TokenClaims",
    "is_current",
]
