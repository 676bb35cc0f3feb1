# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable
from functools import wraps

from flask import g, request

from wellnest.application.services.admission import RequestAdmission
from wellnest.domain.ratelimit.entities import RateLimitRule
from wellnest.domain.sessions.exceptions import SessionSupersededError
from wellnest.infrastructure.audit import AuditAction, audit_log
from wellnest.infrastructure.observability import ADMISSION_REJECTIONS
from wellnest.shared.errors.http import client_ip, handle_app_error
from wellnest.shared.logging import logger

from .rate_limit import remember_decision


class AuthenticationMiddleware:
    def __init__(self, admission: RequestAdmission, *, trust_forwarded_for: bool = True) -> None:
        self._admission = admission
        self._trust_forwarded_for = trust_forwarded_for

    def protect(self, view: Callable, rule: RateLimitRule) -> Callable:
        @wraps(view)
        def wrapper(*args, **kwargs):
            ip_address = client_ip(trust_forwarded=self._trust_forwarded_for)
            result = self._admission.admit(
                request.headers.get("Authorization"), ip_address, request.path, rule
            )
            remember_decision(result.decision)

            rejection = result.rejection
            if rejection is not None:
                ADMISSION_REJECTIONS.labels(kind=rejection.code).inc()
                logger.warning(
                    f"admission: rejected {rejection.code} on {request.method} {request.path} "
                    f"from {ip_address}"
                )
                if isinstance(rejection, SessionSupersededError):
                    audit_log(
                        AuditAction.SESSION_SUPERSEDED,
                        user_id=(rejection.context or {}).get("user_id"),
                        ip_address=ip_address,
                        details={"path": request.path},
                        success=False,
                    )
                return handle_app_error(rejection)

            g.user = result.user
            g.user_id = result.user.id
            return view(*args, **kwargs)

        return wrapper


__all__ = ["AuthenticationMiddleware"]
