"""Server lifecycle operations."""

from hugin.lifecycle.controller import ServerLifecycleController, render_logs
from hugin.lifecycle.restart import (
    OUTCOME_MESSAGES,
    RestartAction,
    RestartState,
    Transition,
    transition,
)

__all__ = [
    "OUTCOME_MESSAGES",
    "RestartAction",
    "RestartState",
    "ServerLifecycleController",
    "Transition",
    "render_logs",
    "transition",
]
