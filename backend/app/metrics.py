from __future__ import annotations

from prometheus_client import Counter, Histogram

REQUEST_COUNT = Counter(
    "orbit_requests_total",
    "Total HTTP requests processed by Orbit",
    ("method", "path", "status"),
)

REQUEST_LATENCY = Histogram(
    "orbit_request_latency_seconds",
    "HTTP request latency in seconds",
    ("method", "path"),
)

REQUEST_ERRORS = Counter(
    "orbit_request_errors_total",
    "HTTP requests resulting in server errors",
    ("method", "path", "status"),
)

API_HITS = Counter(
    "orbit_api_hits_total",
    "API hits per endpoint",
    ("endpoint",),
)

MOODS_WRITTEN = Counter(
    "orbit_moods_written_total",
    "Mood entries created, updated or deleted",
    ("operation",),
)

LOGIN_ATTEMPTS = Counter(
    "orbit_login_attempts_total",
    "Login attempts by outcome",
    ("result",),
)

__all__ = [
    "API_HITS",
    "LOGIN_ATTEMPTS",
    "MOODS_WRITTEN",
    "REQUEST_COUNT",
    "REQUEST_ERRORS",
    "REQUEST_LATENCY",
]
