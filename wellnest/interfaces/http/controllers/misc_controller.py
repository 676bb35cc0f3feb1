# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable

from flask import Blueprint, Response, jsonify
from sqlalchemy.exc import SQLAlchemyError

from wellnest.infrastructure.db.health import check_database
from wellnest.infrastructure.observability import render_metrics


class MiscController:
    def __init__(
        self,
        *,
        metrics_enabled: bool = True,
        service_name: str = "wellnest-backend",
        counter_store_probe: Callable[[], bool] | None = None,
    ) -> None:
        self._metrics_enabled = metrics_enabled
        self._service_name = service_name
        self._counter_store_probe = counter_store_probe

    def as_blueprint(self) -> Blueprint:
        bp = Blueprint("misc", __name__)
        bp.add_url_rule("/api/health", view_func=self.health, methods=["GET"])
        if self._metrics_enabled:
            bp.add_url_rule("/metrics", view_func=self.metrics, methods=["GET"])
        return bp

    def health(self):
        status: dict[str, object] = {"ok": True, "service": self._service_name}
        try:
            check_database()
            status["database"] = "ok"
        except SQLAlchemyError as exc:
            status["ok"] = False
            status["database"] = f"error: {type(exc).__name__}"

        # Store outages never fail the health check.
        if self._counter_store_probe is not None:
            status["rate_limit_store"] = "ok" if self._counter_store_probe() else "degraded"
        return jsonify(status), 200 if status["ok"] else 503

    def metrics(self) -> Response:
        body, content_type = render_metrics()
        return Response(body, content_type=content_type)
