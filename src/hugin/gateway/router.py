"""Command routing and the top-level exception boundary."""

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from hugin.errors import GatewayError
from hugin.gateway.interface import Responder
from hugin.logging_schema import LogEvent

logger = logging.getLogger(__name__)

CommandHandler = Callable[[int, Responder], Awaitable[Any]]


class CommandRouter:
    """Maps command names ("server status") to handler functions.

    `dispatch` never raises: a failing handler is logged and the requester
    keeps whatever response was last sent.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}

    def on_command(self, name: str, handler: CommandHandler) -> None:
        """Register a handler. Re-registering a name replaces it."""
        self._handlers[name] = handler

    @property
    def commands(self) -> list[str]:
        return sorted(self._handlers)

    async def dispatch(self, name: str, channel_id: int, responder: Responder) -> bool:
        """Run the handler for a command.

        Returns:
            False if no handler is registered for the name, True otherwise.
        """
        handler = self._handlers.get(name)
        if handler is None:
            logger.warning(
                "Unknown command",
                extra={"event": LogEvent.COMMAND_UNKNOWN, "command": name},
            )
            return False

        logger.info(
            "Command received",
            extra={"event": LogEvent.COMMAND_RECEIVED, "command": name, "channel_id": channel_id},
        )
        try:
            await handler(channel_id, responder)
        except GatewayError as e:
            logger.warning(
                "Could not deliver command response",
                extra={
                    "event": LogEvent.RESPONSE_FAILED,
                    "command": name,
                    "channel_id": channel_id,
                    "error_message": e.message,
                },
            )
        except Exception:
            logger.exception(
                "Command handler failed",
                extra={
                    "event": LogEvent.UNHANDLED_EXCEPTION,
                    "command": name,
                    "channel_id": channel_id,
                },
            )
        return True
