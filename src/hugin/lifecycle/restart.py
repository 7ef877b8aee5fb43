"""Restart escalation state machine.

Pure transition logic, no I/O. The controller executes the returned action,
observes the container again and feeds the observation back in.

    IDLE -> CHECKING_RUNNING
      running     -> STOPPING -> VERIFYING_AFTER_STOP
                       running     -> KILLING -> VERIFYING_AFTER_KILL
                                        running     -> TERMINAL (still running after kill)
                                        not running -> STARTING
                       not running -> STARTING
      not running -> STARTING
    STARTING -> VERIFYING_AFTER_START
      running     -> TERMINAL (restarted)
      not running -> RETRY_STARTING -> VERIFYING_AFTER_RETRY
                       running     -> TERMINAL (retry succeeded)
                       not running -> TERMINAL (start failed twice)

A container still running after the kill verification is never started:
the controller will not start what it cannot confirm has stopped.
"""

from enum import Enum

from pydantic import BaseModel

from hugin.models import RestartOutcome


class RestartState(str, Enum):
    """Restart machine states."""

    IDLE = "idle"
    CHECKING_RUNNING = "checking_running"
    STOPPING = "stopping"
    VERIFYING_AFTER_STOP = "verifying_after_stop"
    KILLING = "killing"
    VERIFYING_AFTER_KILL = "verifying_after_kill"
    STARTING = "starting"
    VERIFYING_AFTER_START = "verifying_after_start"
    RETRY_STARTING = "retry_starting"
    VERIFYING_AFTER_RETRY = "verifying_after_retry"
    TERMINAL = "terminal"


class RestartAction(str, Enum):
    """Runtime call to execute on entering a state."""

    INSPECT = "inspect"
    STOP = "stop"
    KILL = "kill"
    START = "start"
    NONE = "none"


PROGRESS_STOPPING = "Stopping server..."
PROGRESS_KILLING = "Failed to stop server. Killing server process..."
PROGRESS_STARTING = "Starting server..."
PROGRESS_RETRYING = "Failed to start server. Retrying..."

OUTCOME_MESSAGES: dict[RestartOutcome, str] = {
    RestartOutcome.ALREADY_OFFLINE_STARTED: "Server restarted successfully.",
    RestartOutcome.RESTARTED: "Server restarted successfully.",
    RestartOutcome.RETRY_SUCCEEDED: "Server restarted successfully.",
    RestartOutcome.START_FAILED_TWICE: "Server failed to start.",
    RestartOutcome.STILL_RUNNING_AFTER_STOP: "Server is still running. Aborting restart.",
    RestartOutcome.STILL_RUNNING_AFTER_KILL: "Server is still running. Aborting restart.",
    RestartOutcome.RUNTIME_UNAVAILABLE: "Unable to reach the server. Aborting restart.",
    RestartOutcome.IN_PROGRESS: "A restart is already in progress for this server.",
}


class Transition(BaseModel):
    """Result of one transition.

    Attributes:
        state: State entered
        action: Runtime call to execute now
        progress: Message to show before the action runs
        outcome: Set only when state is TERMINAL
    """

    state: RestartState
    action: RestartAction
    progress: str | None = None
    outcome: RestartOutcome | None = None

    model_config = {"frozen": True}

    @property
    def is_terminal(self) -> bool:
        return self.state is RestartState.TERMINAL


def _terminal(outcome: RestartOutcome) -> Transition:
    return Transition(state=RestartState.TERMINAL, action=RestartAction.NONE, outcome=outcome)


def _enter(state: RestartState, action: RestartAction, progress: str | None = None) -> Transition:
    return Transition(state=state, action=action, progress=progress)


def transition(
    state: RestartState,
    running: bool | None,
    *,
    was_offline: bool = False,
) -> Transition:
    """Compute the next state from the current state and latest observation.

    Args:
        state: State whose action has just been executed
        running: Latest observed running flag. None only when nothing has
            been observed yet (the initial inspect failed).
        was_offline: The container was already stopped at CHECKING_RUNNING

    Raises:
        ValueError: On TERMINAL, or a missing observation after the first check
    """
    if state is RestartState.IDLE:
        return _enter(RestartState.CHECKING_RUNNING, RestartAction.INSPECT)

    if state is RestartState.CHECKING_RUNNING:
        if running is None:
            return _terminal(RestartOutcome.RUNTIME_UNAVAILABLE)
        if running:
            return _enter(RestartState.STOPPING, RestartAction.STOP, PROGRESS_STOPPING)
        return _enter(RestartState.STARTING, RestartAction.START, PROGRESS_STARTING)

    # Action states always proceed to their verification
    if state is RestartState.STOPPING:
        return _enter(RestartState.VERIFYING_AFTER_STOP, RestartAction.INSPECT)
    if state is RestartState.KILLING:
        return _enter(RestartState.VERIFYING_AFTER_KILL, RestartAction.INSPECT)
    if state is RestartState.STARTING:
        return _enter(RestartState.VERIFYING_AFTER_START, RestartAction.INSPECT)
    if state is RestartState.RETRY_STARTING:
        return _enter(RestartState.VERIFYING_AFTER_RETRY, RestartAction.INSPECT)

    if state is RestartState.TERMINAL:
        raise ValueError("Restart already finished")

    if running is None:
        raise ValueError(f"{state.value} requires an observation")

    if state is RestartState.VERIFYING_AFTER_STOP:
        if running:
            return _enter(RestartState.KILLING, RestartAction.KILL, PROGRESS_KILLING)
        return _enter(RestartState.STARTING, RestartAction.START, PROGRESS_STARTING)

    if state is RestartState.VERIFYING_AFTER_KILL:
        if running:
            return _terminal(RestartOutcome.STILL_RUNNING_AFTER_KILL)
        return _enter(RestartState.STARTING, RestartAction.START, PROGRESS_STARTING)

    if state is RestartState.VERIFYING_AFTER_START:
        if running:
            return _terminal(
                RestartOutcome.ALREADY_OFFLINE_STARTED if was_offline else RestartOutcome.RESTARTED
            )
        return _enter(RestartState.RETRY_STARTING, RestartAction.START, PROGRESS_RETRYING)

    # VERIFYING_AFTER_RETRY: single retry, no further escalation
    if running:
        return _terminal(RestartOutcome.RETRY_SUCCEEDED)
    return _terminal(RestartOutcome.START_FAILED_TWICE)
