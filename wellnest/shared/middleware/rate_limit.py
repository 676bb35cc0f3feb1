# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable
from functools import wraps

from flask import Flask, Response, g, request

from wellnest.application.services.rate_limiter import RateLimiter
from wellnest.domain.ratelimit.entities import RateLimitDecision, RateLimitRule
from wellnest.domain.ratelimit.exceptions import RateLimitExceededError
from wellnest.domain.ratelimit.keys import ip_route_key, phone_or_ip_key
from wellnest.shared.errors.http import client_ip, handle_app_error


def remember_decision(decision: RateLimitDecision | None) -> None:
    if decision is not None:
        g.rate_limit_decision = decision


def configure_rate_limit_headers(app: Flask) -> None:
    @app.after_request
    def _apply_rate_limit_headers(response: Response) -> Response:
        decision: RateLimitDecision | None = getattr(g, "rate_limit_decision", None)
        if decision is not None:
            for name, value in decision.headers().items():
                response.headers.setdefault(name, value)
        return response


class RateLimitMiddleware:
    """Per-IP and per-phone limits for requests that run before a user is known."""

    def __init__(
        self,
        limiter: RateLimiter,
        *,
        enabled: bool = True,
        trust_forwarded_for: bool = True,
    ) -> None:
        self._limiter = limiter
        self._enabled = enabled
        self._trust_forwarded_for = trust_forwarded_for

    def install_global(self, app: Flask, rule: RateLimitRule, *, prefix: str = "/api/") -> None:
        """Per-IP ceiling shared by every route under ``prefix``."""
        if not self._enabled:
            return

        @app.before_request
        def _global_limit():
            if request.method == "OPTIONS" or not request.path.startswith(prefix):
                return None
            key = ip_route_key(rule.name, self._ip(), "*")
            decision = self._limiter.check_and_increment(key, rule.limit, rule.window_seconds)
            remember_decision(decision)
            if not decision.allowed:
                return handle_app_error(RateLimitExceededError(decision))
            return None

    def per_ip(self, view: Callable, rule: RateLimitRule) -> Callable:
        def key() -> str:
            return ip_route_key(rule.name, self._ip(), request.path)

        return self._guard(view, rule, key)

    def per_phone(self, view: Callable, rule: RateLimitRule) -> Callable:
        def key() -> str:
            body = request.get_json(silent=True)
            phone = body.get("phone") if isinstance(body, dict) else None
            return phone_or_ip_key(phone, self._ip(), request.path, prefix=rule.name)

        return self._guard(view, rule, key)

    def _ip(self) -> str:
        return client_ip(trust_forwarded=self._trust_forwarded_for)

    def _guard(self, view: Callable, rule: RateLimitRule, key: Callable[[], str]) -> Callable:
        if not self._enabled:
            return view

        @wraps(view)
        def wrapper(*args, **kwargs):
            decision = self._limiter.check_and_increment(key(), rule.limit, rule.window_seconds)
            remember_decision(decision)
            if not decision.allowed:
                return handle_app_error(RateLimitExceededError(decision))
            return view(*args, **kwargs)

        return wrapper


__all__ = ["RateLimitMiddleware", "configure_rate_limit_headers", "remember_decision"]
