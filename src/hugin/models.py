"""Domain models shared by the registry, runtime and controller."""

from enum import Enum

from pydantic import BaseModel, field_validator


class ServerMapping(BaseModel):
    """Managed server bound to one container and one Discord channel."""

    name: str
    container: str
    channel_id: int

    model_config = {"frozen": True}


class ContainerObservation(BaseModel):
    """Result of one inspect call. Never cached across steps."""

    id: str
    running: bool

    model_config = {"frozen": True}


class LogBundle(BaseModel):
    """Buffered container output. Whitespace-only text counts as absent."""

    stdout: str | None = None
    stderr: str | None = None

    model_config = {"frozen": True}

    @field_validator("stdout", "stderr")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        return value

    @property
    def is_empty(self) -> bool:
        return self.stdout is None and self.stderr is None


class RestartOutcome(str, Enum):
    """Terminal value of one restart invocation."""

    ALREADY_OFFLINE_STARTED = "already_offline_started"
    RESTARTED = "restarted"
    # Declared for completeness; the stop path always escalates to kill
    STILL_RUNNING_AFTER_STOP = "still_running_after_stop"
    STILL_RUNNING_AFTER_KILL = "still_running_after_kill"
    RETRY_SUCCEEDED = "retry_succeeded"
    START_FAILED_TWICE = "start_failed_twice"
    RUNTIME_UNAVAILABLE = "runtime_unavailable"
    IN_PROGRESS = "in_progress"

    @property
    def is_success(self) -> bool:
        """Check if the container was confirmed running at the end."""
        return self in (
            RestartOutcome.ALREADY_OFFLINE_STARTED,
            RestartOutcome.RESTARTED,
            RestartOutcome.RETRY_SUCCEEDED,
        )
