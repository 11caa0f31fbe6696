"""Prometheus metrics for the work-log service.

All metric objects are defined here so they can be imported from any module.
"""

from prometheus_client import Counter, Gauge, Histogram

# ---------------------------------------------------------------------------
# Note operation metrics
# ---------------------------------------------------------------------------

NOTE_OPERATIONS = Counter(
    "worklog_note_operations_total",
    "Total note CRUD operations",
    ["operation", "outcome"],  # outcome: ok, invalid, not_found, error
)

NOTES_STORED = Gauge(
    "worklog_notes_stored",
    "Number of notes in storage, as last observed",
)

# ---------------------------------------------------------------------------
# HTTP request metrics
# ---------------------------------------------------------------------------

HTTP_REQUESTS = Counter(
    "worklog_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

HTTP_DURATION = Histogram(
    "worklog_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["endpoint"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 5.0),
)
