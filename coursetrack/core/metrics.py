"""Prometheus metric inventory.

All metrics are declared here and imported by the module that owns the
behavior being counted.  Scraped through GET /metrics.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# ---------------------------------------------------------------------------
# HTTP (MetricsMiddleware)
# ---------------------------------------------------------------------------

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests by method, endpoint, and status code",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

ACTIVE_REQUESTS = Gauge(
    "http_active_requests",
    "Number of HTTP requests currently being processed",
)

# ---------------------------------------------------------------------------
# Progress ledger
# ---------------------------------------------------------------------------

ENROLLMENTS = Counter(
    "enrollments_total",
    "Successful course enrollments",
)

PROGRESS_UPDATES = Counter(
    "progress_updates_total",
    "Progress records written, by submitted status",
    ["status"],  # not_started | in_progress | completed
)

RECOMPUTE_DURATION = Histogram(
    "progress_recompute_seconds",
    "Time spent recomputing an enrollment's completion percentage",
    # Two small queries and one update; anything past 250ms is a slow database.
    buckets=[0.001, 0.0025, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25],
)

# ---------------------------------------------------------------------------
# Event recorder / auth
# ---------------------------------------------------------------------------

ANALYTICS_EVENTS = Counter(
    "analytics_events_total",
    "Telemetry events recorded",
    ["kind"],  # page_view | click | video | quiz_attempt
)

TOKEN_REVOCATION_CHECKS = Counter(
    "token_revocation_checks_total",
    "Revocation lookups performed while authenticating requests",
    ["result"],  # revoked | valid
)
