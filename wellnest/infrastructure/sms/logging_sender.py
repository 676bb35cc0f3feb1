# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from wellnest.domain.users.repositories import SmsSender
from wellnest.shared.logging import logger, mask_phone


class LoggingSmsSender(SmsSender):
    """Development sender: records the delivery instead of calling a gateway."""

    def __init__(self) -> None:
        self.sent: list[str] = []

    def send_otp(self, phone: str, code: str) -> None:
        self.sent.append(phone)
        logger.info(f"sms: one-time code dispatched to {mask_phone(phone)}")
