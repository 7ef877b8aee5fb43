"""Discord HTTP interactions endpoint.

Discord POSTs every slash command invocation to this endpoint. The request
is acknowledged with a deferred response right away and the command runs as
a background task that edits the original response as it progresses.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request
from nacl.exceptions import BadSignatureError
from nacl.signing import VerifyKey

from hugin.errors import InvalidSignatureError
from hugin.gateway.commands import command_name
from hugin.gateway.discord_rest import DiscordResponder, DiscordRestClient
from hugin.gateway.router import CommandRouter
from hugin.logging_schema import LogEvent

logger = logging.getLogger(__name__)

# Interaction types
_PING = 1
_APPLICATION_COMMAND = 2

# Interaction callback types
_PONG = 1
_CHANNEL_MESSAGE = 4
_DEFERRED_CHANNEL_MESSAGE = 5

_EPHEMERAL = 1 << 6

NOT_AVAILABLE_MESSAGE = "This command is not available here."


class InteractionGateway:
    """Verifies, acknowledges and dispatches Discord interactions.

    Args:
        public_key: Application public key (hex) for signature checks
        guild_id: The only guild whose commands are served
        router: Command router the invocations are dispatched to
        rest: Discord REST client used by responders
    """

    def __init__(
        self,
        public_key: str,
        guild_id: int,
        router: CommandRouter,
        rest: DiscordRestClient,
    ) -> None:
        self._verify_key = VerifyKey(bytes.fromhex(public_key))
        self._guild_id = guild_id
        self._router = router
        self._rest = rest

    @property
    def router(self) -> CommandRouter:
        return self._router

    def verify(self, signature: str, timestamp: str, body: bytes) -> None:
        """Check the Ed25519 signature Discord puts on every request.

        Raises:
            InvalidSignatureError: Missing, malformed or wrong signature.
        """
        if not signature or not timestamp:
            raise InvalidSignatureError("Missing signature headers")
        try:
            self._verify_key.verify(timestamp.encode() + body, bytes.fromhex(signature))
        except (BadSignatureError, ValueError) as e:
            raise InvalidSignatureError() from e

    def accept(self, payload: dict[str, Any]) -> tuple[dict[str, Any], tuple[str, int, str] | None]:
        """Decide the immediate response for an interaction.

        Returns:
            (callback body, invocation) where invocation is
            (command name, channel id, interaction token) when a command
            should run in the background, else None.
        """
        interaction_type = payload.get("type")
        if interaction_type == _PING:
            return {"type": _PONG}, None

        if interaction_type != _APPLICATION_COMMAND:
            return _ephemeral(NOT_AVAILABLE_MESSAGE), None

        guild_id = _as_int(payload.get("guild_id"))
        if guild_id != self._guild_id:
            return _ephemeral(NOT_AVAILABLE_MESSAGE), None

        name = command_name(payload.get("data") or {})
        if name not in self._router.commands:
            logger.warning(
                "Unknown command",
                extra={"event": LogEvent.COMMAND_UNKNOWN, "command": name},
            )
            return _ephemeral(NOT_AVAILABLE_MESSAGE), None

        channel = _as_int(
            payload.get("channel_id") or (payload.get("channel") or {}).get("id")
        )
        token = payload.get("token")
        if channel is None or not token:
            logger.warning(
                "Interaction without channel or token",
                extra={"event": LogEvent.COMMAND_UNKNOWN, "command": name},
            )
            return _ephemeral(NOT_AVAILABLE_MESSAGE), None

        return {"type": _DEFERRED_CHANNEL_MESSAGE}, (name, channel, token)

    async def run(self, name: str, channel_id: int, token: str) -> None:
        """Execute a command invocation."""
        await self._router.dispatch(name, channel_id, DiscordResponder(self._rest, token))


def _ephemeral(content: str) -> dict[str, Any]:
    return {"type": _CHANNEL_MESSAGE, "data": {"content": content, "flags": _EPHEMERAL}}


def _as_int(value: Any) -> int | None:
    """Parse a snowflake id; None when absent or malformed."""
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


# =============================================================================
# FastAPI endpoint
# =============================================================================

router = APIRouter(tags=["interactions"])


def get_gateway(request: Request) -> InteractionGateway:
    """Get the gateway built by the application factory."""
    return request.app.state.gateway


@router.post("/interactions")
async def handle_interaction(
    request: Request,
    background_tasks: BackgroundTasks,
    gateway: InteractionGateway = Depends(get_gateway),
) -> dict[str, Any]:
    """Receive one Discord interaction."""
    body = await request.body()
    try:
        gateway.verify(
            request.headers.get("X-Signature-Ed25519", ""),
            request.headers.get("X-Signature-Timestamp", ""),
            body,
        )
    except InvalidSignatureError as e:
        logger.warning(
            "Rejected interaction",
            extra={"event": LogEvent.SIGNATURE_REJECTED, "error_message": e.message},
        )
        raise HTTPException(status_code=401, detail="invalid request signature") from e

    response, invocation = gateway.accept(await request.json())
    if invocation is not None:
        background_tasks.add_task(gateway.run, *invocation)
    return response
