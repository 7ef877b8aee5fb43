"""Prometheus metrics definitions for Hugin.

Tracks container runtime calls and restart outcomes. Everything here is
process-local; Hugin runs as a single process.
"""

from prometheus_client import Counter, Histogram

from hugin.models import RestartOutcome

# =============================================================================
# Histogram Buckets
# =============================================================================
# Docker calls range from fast inspects to stops that wait out the grace period
_BUCKETS_DOCKER = (
    0.01, 0.05, 0.1, 0.25, 0.5,
    1, 2.5, 5, 10, 30,
)  # 10 buckets

_OPERATIONS = ("inspect", "start", "stop", "kill", "logs")

# =============================================================================
# Runtime Call Metrics
# =============================================================================

HUGIN_RUNTIME_CALL_DURATION = Histogram(
    "hugin_runtime_call_duration_seconds",
    "Duration of container runtime calls",
    ["operation"],  # inspect, start, stop, kill, logs
    buckets=_BUCKETS_DOCKER,
)

HUGIN_RUNTIME_CALL_ERRORS = Counter(
    "hugin_runtime_call_errors_total",
    "Total container runtime call errors",
    ["operation", "error_type"],  # error_type: ErrorCode value, lowercased
)

# =============================================================================
# Restart Metrics
# =============================================================================

HUGIN_RESTART_OUTCOMES = Counter(
    "hugin_restart_outcomes_total",
    "Restart invocations by terminal outcome",
    ["outcome"],
)


def _init_metrics() -> None:
    """Initialize labeled metrics with zero values."""
    for op in _OPERATIONS:
        HUGIN_RUNTIME_CALL_DURATION.labels(operation=op)
        HUGIN_RUNTIME_CALL_ERRORS.labels(operation=op, error_type="runtime_unavailable")
        HUGIN_RUNTIME_CALL_ERRORS.labels(operation=op, error_type="container_not_found")

    for outcome in RestartOutcome:
        HUGIN_RESTART_OUTCOMES.labels(outcome=outcome.value)


_init_metrics()
