"""Tests for the Discord interactions endpoint."""

import json
import time
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient
from nacl.signing import SigningKey

from hugin.config import HuginConfig, ServerEntry
from hugin.gateway.commands import command_name, server_command_definitions
from hugin.gateway.discord_rest import DiscordRestClient
from hugin.main import create_app

GUILD_ID = 555


@pytest.fixture
def signing_key() -> SigningKey:
    return SigningKey.generate()


@pytest.fixture
def config(signing_key: SigningKey) -> HuginConfig:
    return HuginConfig(
        discord_token="secret",
        discord_application_id=4242,
        discord_public_key=signing_key.verify_key.encode().hex(),
        guild_id=GUILD_ID,
        servers=[ServerEntry(name="Minecraft", container="minecraft", channel_id=100)],
    )


@pytest.fixture
def mock_rest() -> AsyncMock:
    """Mock DiscordRestClient."""
    return AsyncMock(spec=DiscordRestClient)


@pytest.fixture
def client(config: HuginConfig, mock_runtime: AsyncMock, mock_rest: AsyncMock):
    app = create_app(config, runtime=mock_runtime, rest=mock_rest)
    with TestClient(app) as test_client:
        yield test_client


def _post(client: TestClient, key: SigningKey, payload: dict, signature: str | None = None):
    body = json.dumps(payload).encode()
    timestamp = str(int(time.time()))
    if signature is None:
        signature = key.sign(timestamp.encode() + body).signature.hex()
    return client.post(
        "/interactions",
        content=body,
        headers={
            "Content-Type": "application/json",
            "X-Signature-Ed25519": signature,
            "X-Signature-Timestamp": timestamp,
        },
    )


def _command(subcommand: str, guild_id: int = GUILD_ID, channel_id: int = 100) -> dict:
    return {
        "type": 2,
        "token": "interaction-token",
        "guild_id": str(guild_id),
        "channel_id": str(channel_id),
        "data": {"name": "server", "type": 1, "options": [{"type": 1, "name": subcommand}]},
    }


class TestSignature:
    """Tests for request signature verification."""

    def test_missing_headers_rejected(self, client: TestClient) -> None:
        response = client.post("/interactions", json={"type": 1})

        assert response.status_code == 401

    def test_wrong_key_rejected(self, client: TestClient) -> None:
        response = _post(client, SigningKey.generate(), {"type": 1})

        assert response.status_code == 401

    def test_malformed_signature_rejected(
        self, client: TestClient, signing_key: SigningKey
    ) -> None:
        response = _post(client, signing_key, {"type": 1}, signature="not-hex")

        assert response.status_code == 401


class TestInteractions:
    """Tests for interaction acknowledgement and dispatch."""

    def test_ping(self, client: TestClient, signing_key: SigningKey) -> None:
        response = _post(client, signing_key, {"type": 1})

        assert response.status_code == 200
        assert response.json() == {"type": 1}

    def test_other_guild_is_ephemeral(
        self,
        client: TestClient,
        signing_key: SigningKey,
        mock_runtime: AsyncMock,
        mock_rest: AsyncMock,
    ) -> None:
        response = _post(client, signing_key, _command("status", guild_id=1))

        assert response.json() == {
            "type": 4,
            "data": {"content": "This command is not available here.", "flags": 64},
        }
        mock_runtime.inspect.assert_not_called()
        mock_rest.edit_original_response.assert_not_called()

    def test_unknown_subcommand_is_ephemeral(
        self, client: TestClient, signing_key: SigningKey
    ) -> None:
        response = _post(client, signing_key, _command("backup"))

        assert response.json()["type"] == 4

    def test_missing_token_is_ephemeral(
        self, client: TestClient, signing_key: SigningKey, mock_runtime: AsyncMock
    ) -> None:
        payload = _command("status")
        del payload["token"]

        response = _post(client, signing_key, payload)

        assert response.status_code == 200
        assert response.json()["type"] == 4
        mock_runtime.inspect.assert_not_called()

    def test_missing_channel_is_ephemeral(
        self, client: TestClient, signing_key: SigningKey, mock_runtime: AsyncMock
    ) -> None:
        payload = _command("status")
        del payload["channel_id"]

        response = _post(client, signing_key, payload)

        assert response.status_code == 200
        assert response.json()["type"] == 4
        mock_runtime.inspect.assert_not_called()

    def test_channel_object_is_accepted(
        self, client: TestClient, signing_key: SigningKey, mock_runtime: AsyncMock
    ) -> None:
        payload = _command("status")
        del payload["channel_id"]
        payload["channel"] = {"id": "100"}

        response = _post(client, signing_key, payload)

        assert response.json() == {"type": 5}
        mock_runtime.inspect.assert_called_once_with("minecraft")

    def test_status_is_deferred_then_edited(
        self,
        client: TestClient,
        signing_key: SigningKey,
        mock_runtime: AsyncMock,
        mock_rest: AsyncMock,
    ) -> None:
        response = _post(client, signing_key, _command("status"))

        assert response.json() == {"type": 5}
        mock_runtime.inspect.assert_called_once_with("minecraft")

        edits = mock_rest.edit_original_response.await_args_list
        assert [c.args[0] for c in edits] == ["interaction-token", "interaction-token"]
        assert edits[0].args[1].content == "Getting server status..."
        assert edits[-1].args[1].panel.fields[0].value == "Online"

    def test_unmanaged_channel(
        self,
        client: TestClient,
        signing_key: SigningKey,
        mock_runtime: AsyncMock,
        mock_rest: AsyncMock,
    ) -> None:
        _post(client, signing_key, _command("restart", channel_id=999))

        mock_runtime.inspect.assert_not_called()
        last = mock_rest.edit_original_response.await_args_list[-1]
        assert last.args[1].content == "No server is assigned to this channel."


class TestCommandDefinitions:
    """Tests for command payloads and name flattening."""

    def test_server_group(self) -> None:
        (definition,) = server_command_definitions()

        assert definition["name"] == "server"
        assert [o["name"] for o in definition["options"]] == ["status", "logs", "restart"]
        assert {o["type"] for o in definition["options"]} == {1}

    def test_command_name(self) -> None:
        assert command_name(_command("logs")["data"]) == "server logs"
        assert command_name({"name": "server"}) == "server"
