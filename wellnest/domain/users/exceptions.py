# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from http import HTTPStatus

from wellnest.shared.errors.base import DomainError, InfrastructureError


class InvalidOtpError(DomainError):
    code = "invalid_otp"

    def __init__(self, remaining_attempts: int) -> None:
        super().__init__(context={"remaining_attempts": remaining_attempts})


class OtpExpiredError(DomainError):
    code = "otp_expired_or_missing"


class OtpCooldownError(DomainError):
    code = "otp_cooldown"
    status = HTTPStatus.TOO_MANY_REQUESTS

    def __init__(self, wait_seconds: int) -> None:
        self.wait_seconds = wait_seconds
        super().__init__(context={"wait_seconds": wait_seconds})

    def headers(self) -> dict[str, str]:
        return {"Retry-After": str(self.wait_seconds)}


class OtpDeliveryError(InfrastructureError):
    def __init__(self) -> None:
        super().__init__("otp_delivery_failed", status=HTTPStatus.BAD_GATEWAY)


class CredentialStoreUnavailable(InfrastructureError):
    def __init__(self, reason: str) -> None:
        super().__init__(
            "credential_store_unavailable",
            status=HTTPStatus.SERVICE_UNAVAILABLE,
            context={"reason": reason},
        )


class AccountDisabledError(DomainError):
    code = "account_disabled"
    status = HTTPStatus.FORBIDDEN
