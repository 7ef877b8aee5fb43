"""Log event types for structured logging."""

from enum import StrEnum


class LogEvent(StrEnum):
    """Log event types for Hugin.

    Used with logger.info/warning/error extra dict:
        logger.info("message", extra={"event": LogEvent.RESTART_COMPLETED, ...})
    """

    # Application lifecycle
    APP_STARTED = "app_started"
    APP_STOPPED = "app_stopped"
    CONFIG_ERROR = "config_error"
    COMMANDS_INSTALLED = "commands_installed"
    APPLICATION_RESOLVED = "application_resolved"
    STARTUP_FAILED = "startup_failed"

    # Registry
    DUPLICATE_CHANNEL = "duplicate_channel"

    # Commands
    COMMAND_RECEIVED = "command_received"
    COMMAND_UNKNOWN = "command_unknown"
    SERVER_NOT_FOUND = "server_not_found"

    # Restart state machine
    RESTART_STEP = "restart_step"
    RESTART_COMPLETED = "restart_completed"
    RESTART_REJECTED = "restart_rejected"

    # Runtime calls
    RUNTIME_CALL_FAILED = "runtime_call_failed"
    CONTAINER_STOPPED = "container_stopped"
    CONTAINER_KILLED = "container_killed"
    CONTAINER_STARTED = "container_started"

    # Gateway
    SIGNATURE_REJECTED = "signature_rejected"
    RESPONSE_FAILED = "response_failed"

    # Error events
    UNHANDLED_EXCEPTION = "unhandled_exception"
