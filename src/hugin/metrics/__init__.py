"""Prometheus metrics for Hugin."""

from hugin.metrics.collector import (
    HUGIN_RESTART_OUTCOMES,
    HUGIN_RUNTIME_CALL_DURATION,
    HUGIN_RUNTIME_CALL_ERRORS,
)

__all__ = [
    "HUGIN_RESTART_OUTCOMES",
    "HUGIN_RUNTIME_CALL_DURATION",
    "HUGIN_RUNTIME_CALL_ERRORS",
]
