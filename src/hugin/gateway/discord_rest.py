"""Discord REST client.

Covers the two calls Hugin makes: editing an interaction's original
response and installing guild commands.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Literal

import httpx

from hugin.errors import GatewayError
from hugin.gateway.interface import Reply, Responder

logger = logging.getLogger(__name__)

HUGIN_AVATAR_URL = (
    "https://cdn.discordapp.com/avatars/1244251924262551573/e2ae8972cf82f7c2ae99997445e5411a"
)


@dataclass
class DiscordRestConfig:
    """Discord REST connection configuration."""

    token: str
    application_id: int | None = None
    base_url: str = "https://discord.com/api/v10"
    timeout: float = 15.0


def render_message(reply: Reply) -> dict[str, Any]:
    """Convert a Reply into a Discord message edit payload.

    Every field is always present so an edit replaces the previous
    content, embeds and attachments.
    """
    embeds: list[dict[str, Any]] = []
    if reply.panel is not None:
        embeds.append(
            {
                "author": {"name": reply.panel.title},
                "fields": [
                    {"name": f.name, "value": f.value, "inline": False}
                    for f in reply.panel.fields
                ],
                "footer": {"text": reply.panel.footer, "icon_url": HUGIN_AVATAR_URL},
                "timestamp": reply.panel.timestamp.isoformat(),
            }
        )
    return {
        "content": reply.content,
        "embeds": embeds,
        "attachments": [
            {"id": index, "filename": a.filename} for index, a in enumerate(reply.attachments)
        ],
    }


class DiscordRestClient:
    """HTTP client for the Discord REST API."""

    def __init__(self, config: DiscordRestConfig) -> None:
        self._config = config
        self._client: httpx.AsyncClient | None = None

    def _get_headers(self) -> dict[str, str]:
        """Get request headers with bot token."""
        return {"Authorization": f"Bot {self._config.token}"}

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self._config.base_url,
                headers=self._get_headers(),
                timeout=self._config.timeout,
            )
        return self._client

    async def _request(
        self,
        method: Literal["get", "put", "patch"],
        path: str,
        **kwargs: Any,
    ) -> httpx.Response:
        """Make HTTP request, mapping failures to GatewayError."""
        client = await self._get_client()
        try:
            resp = await getattr(client, method)(path, **kwargs)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise GatewayError(
                f"Discord {method.upper()} {path} returned HTTP {e.response.status_code}"
            ) from e
        except httpx.TransportError as e:
            raise GatewayError(f"Discord {method.upper()} {path} failed: {e!r}") from e
        return resp

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    @property
    def _application_id(self) -> int:
        if self._config.application_id is None:
            raise GatewayError("Discord application id is not known")
        return self._config.application_id

    # =========================================================================
    # Application
    # =========================================================================

    async def get_current_application(self) -> dict[str, Any]:
        """Fetch the application that owns the bot token.

        The payload carries the application `id` and its `verify_key`
        (hex Ed25519 public key).
        """
        resp = await self._request("get", "/oauth2/applications/@me")
        try:
            data = resp.json()
        except ValueError as e:
            raise GatewayError("Discord returned a non-JSON application payload") from e
        if not isinstance(data, dict):
            raise GatewayError("Discord returned an unexpected application payload")
        return data

    # =========================================================================
    # Interaction responses
    # =========================================================================

    async def edit_original_response(self, interaction_token: str, reply: Reply) -> None:
        """Replace the original response of an interaction."""
        path = f"/webhooks/{self._application_id}/{interaction_token}/messages/@original"
        payload = render_message(reply)

        if not reply.attachments:
            await self._request("patch", path, json=payload)
            return

        files = [
            (f"files[{index}]", (a.filename, a.content, "text/plain"))
            for index, a in enumerate(reply.attachments)
        ]
        await self._request(
            "patch",
            path,
            data={"payload_json": json.dumps(payload)},
            files=files,
        )

    # =========================================================================
    # Command installation
    # =========================================================================

    async def bulk_overwrite_guild_commands(
        self, guild_id: int, commands: list[dict[str, Any]]
    ) -> list[dict[str, Any]]:
        """Replace all of this application's commands in a guild."""
        path = f"/applications/{self._application_id}/guilds/{guild_id}/commands"
        resp = await self._request("put", path, json=commands)
        return resp.json()


class DiscordResponder(Responder):
    """Responder for one deferred interaction.

    The HTTP acknowledgement already sent a deferred response, so both the
    first response and later edits replace the original message.
    """

    def __init__(self, rest: DiscordRestClient, interaction_token: str) -> None:
        self._rest = rest
        self._token = interaction_token

    async def respond(self, reply: Reply) -> None:
        await self._rest.edit_original_response(self._token, reply)

    async def edit_response(self, reply: Reply) -> None:
        await self._rest.edit_original_response(self._token, reply)
