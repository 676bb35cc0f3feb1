# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import atexit

from flask import Flask
from flask_cors import CORS

from wellnest.container import Container
from wellnest.infrastructure.db import init_db
from wellnest.infrastructure.ratelimit import InMemoryCounterStore
from wellnest.shared.logging import logger, setup_logging
from wellnest.shared.middleware.error_handler import configure_error_handling
from wellnest.shared.middleware.rate_limit import configure_rate_limit_headers
from wellnest.shared.middleware.request_logger import configure_request_logging


def create_app(container: Container | None = None, *, start_sweeper: bool = True) -> Flask:
    container = container or Container()
    config = container.config

    setup_logging(debug_mode=config.debug_logging)
    init_db()

    app = Flask(__name__)
    app.extensions["wellnest.container"] = container

    configure_error_handling(app, debug_mode=config.debug_logging)
    configure_request_logging(app, debug_mode=config.debug_logging)
    configure_rate_limit_headers(app)
    container.rate_limit_middleware.install_global(app, container.rules["global"])

    cors_kwargs: dict[str, object] = {
        "resources": {r"/api/*": {"origins": config.security.allowed_origins}},
        "expose_headers": [
            "Authorization",
            "Retry-After",
            "X-RateLimit-Limit",
            "X-RateLimit-Remaining",
            "X-RateLimit-Reset",
        ],
    }
    CORS(app, **cors_kwargs)

    app.register_blueprint(container.misc_controller.as_blueprint())
    app.register_blueprint(container.auth_controller.as_blueprint())

    if start_sweeper and isinstance(container.counter_store, InMemoryCounterStore):
        sweeper = container.counter_sweeper
        sweeper.start()
        atexit.register(sweeper.stop)

    @app.after_request
    def _add_security_headers(resp):
        resp.headers.setdefault("X-Frame-Options", "DENY")
        resp.headers.setdefault("Referrer-Policy", "no-referrer")
        resp.headers.setdefault("X-Content-Type-Options", "nosniff")
        resp.headers.setdefault("Cross-Origin-Resource-Policy", "same-origin")
        if config.security.enable_hsts:
            resp.headers.setdefault(
                "Strict-Transport-Security",
                "max-age=31536000; includeSubDomains; preload",
            )
        return resp

    logger.info(
        f"Flask app initialized env={config.app_env} "
        f"rate_limit={config.rate_limit.backend if config.rate_limit.enabled else 'off'}"
    )
    return app


__all__ = ["create_app"]
