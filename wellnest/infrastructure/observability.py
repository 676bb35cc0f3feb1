# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

REQUEST_LATENCY = Histogram(
    "wellnest_request_latency_seconds",
    "Request latency",
    labelnames=("method", "status"),
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1, 2, 5),
)
RATE_LIMIT_DECISIONS = Counter(
    "wellnest_rate_limit_decisions_total",
    "Rate limiter outcomes",
    labelnames=("outcome",),
)
ADMISSION_REJECTIONS = Counter(
    "wellnest_admission_rejections_total",
    "Requests rejected by the admission middleware",
    labelnames=("kind",),
)


def render_metrics() -> tuple[bytes, str]:
    return generate_latest(), CONTENT_TYPE_LATEST


__all__ = [
    "ADMISSION_REJECTIONS",
    "RATE_LIMIT_DECISIONS",
    "REQUEST_LATENCY",
    "render_metrics",
]
