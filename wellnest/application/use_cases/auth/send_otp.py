# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import math
import secrets
from datetime import timedelta

from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from wellnest.domain.users.entities import OtpCode
from wellnest.domain.users.exceptions import OtpCooldownError, OtpDeliveryError
from wellnest.domain.users.repositories import CodeHasher, OtpRepository, SmsSender
from wellnest.shared.clock import Clock
from wellnest.shared.config.settings import OtpConfig, ResilienceConfig
from wellnest.shared.logging import logger, mask_phone


def generate_code(length: int) -> str:
    low = 10 ** (length - 1)
    return str(low + secrets.randbelow(9 * low))


class SendOtpUseCase:
    def __init__(
        self,
        *,
        otps: OtpRepository,
        hasher: CodeHasher,
        sms: SmsSender,
        clock: Clock,
        config: OtpConfig,
        resilience: ResilienceConfig,
    ) -> None:
        self._otps = otps
        self._hasher = hasher
        self._sms = sms
        self._clock = clock
        self._config = config
        self._resilience = resilience

    def execute(self, phone: str) -> str:
        now = self._clock.now()
        existing = self._otps.get(phone)
        if existing is not None:
            elapsed = (now - existing.updated_at).total_seconds()
            cooldown = self._config.resend_cooldown_seconds
            if elapsed < cooldown:
                raise OtpCooldownError(wait_seconds=math.ceil(cooldown - elapsed))

        code = generate_code(self._config.length)
        self._otps.save(
            OtpCode(
                phone=phone,
                code_hash=self._hasher.hash(code),
                expires_at=now + timedelta(seconds=self._config.expiry_seconds),
                updated_at=now,
            )
        )
        self._deliver(phone, code)
        return code

    def _deliver(self, phone: str, code: str) -> None:
        retrying = Retrying(
            stop=stop_after_attempt(self._resilience.max_retries + 1),
            wait=wait_exponential(
                multiplier=self._resilience.backoff_base,
                max=self._resilience.backoff_cap,
            ),
            retry=retry_if_exception_type(Exception),
            reraise=True,
        )
        try:
            for attempt in retrying:
                with attempt:
                    logger.debug(
                        f"otp: delivery attempt={attempt.retry_state.attempt_number} "
                        f"to {mask_phone(phone)}"
                    )
                    self._sms.send_otp(phone, code)
        except Exception as exc:
            logger.error(f"otp: delivery failed to {mask_phone(phone)}: {type(exc).__name__}")
            raise OtpDeliveryError() from exc


__all__ = ["SendOtpUseCase", "generate_code"]
