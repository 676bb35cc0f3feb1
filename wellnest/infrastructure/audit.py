# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import json
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from wellnest.shared.logging import logger


class AuditAction(str, Enum):
    OTP_REQUESTED = "otp_requested"
    LOGIN_SUCCESS = "login_success"
    LOGIN_FAILED = "login_failed"
    LOGOUT = "logout"
    ACCOUNT_CREATED = "account_created"
    SESSION_SUPERSEDED = "session_superseded"


_SENSITIVE_KEYS = {"token", "otp", "code", "phone", "secret"}


def _sanitize_details(details: dict[str, Any]) -> dict[str, Any]:
    sanitized = {}
    for key, value in details.items():
        key_lower = key.lower()

        if any(sensitive in key_lower for sensitive in _SENSITIVE_KEYS):
            sanitized[key] = "***REDACTED***"
        else:
            sanitized[key] = value

    return sanitized


def audit_log(
    action: AuditAction,
    user_id: int | None = None,
    ip_address: str | None = None,
    details: dict[str, Any] | None = None,
    success: bool = True,
) -> None:
    safe_details = _sanitize_details(details) if details else {}

    log_message = (
        f"AUDIT: {action.value} | "
        f"user_id={user_id} | "
        f"ip={ip_address} | "
        f"success={success}"
    )
    if safe_details:
        log_message += f" | details={safe_details}"

    if success:
        logger.info(log_message)
    else:
        logger.warning(log_message)

    _store_audit_log(
        timestamp=datetime.now(UTC),
        action=action.value,
        user_id=user_id,
        ip_address=ip_address,
        success=success,
        details=safe_details,
    )


def _store_audit_log(
    timestamp: datetime,
    action: str,
    user_id: int | None,
    ip_address: str | None,
    success: bool,
    details: dict[str, Any],
) -> None:
    from wellnest.infrastructure.db.models import AuditLog
    from wellnest.infrastructure.db.session import session_scope

    try:
        with session_scope() as session:
            session.add(
                AuditLog(
                    timestamp=timestamp,
                    action=action,
                    user_id=user_id,
                    ip_address=ip_address,
                    success=success,
                    details_json=json.dumps(details) if details else None,
                )
            )
    except SQLAlchemyError as exc:
        logger.warning(f"Failed to store audit log in database: {exc}")


__all__ = ["AuditAction", "audit_log"]
