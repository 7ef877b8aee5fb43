"""Shared fixtures for Hugin unit tests."""

from unittest.mock import AsyncMock

import pytest

from hugin.config import DockerConfig
from hugin.gateway.interface import Reply, Responder
from hugin.lifecycle import ServerLifecycleController
from hugin.models import ContainerObservation, LogBundle, ServerMapping
from hugin.registry import ServerRegistry
from hugin.runtime import ContainerLocks, ContainerRuntimeClient

MANAGED_CHANNEL = 100


def observe(running: bool, container_id: str = "abc123") -> ContainerObservation:
    """Build an inspect result."""
    return ContainerObservation(id=container_id, running=running)


class RecordingResponder(Responder):
    """Responder that keeps every reply in order."""

    def __init__(self) -> None:
        self.replies: list[tuple[str, Reply]] = []

    async def respond(self, reply: Reply) -> None:
        self.replies.append(("respond", reply))

    async def edit_response(self, reply: Reply) -> None:
        self.replies.append(("edit", reply))

    @property
    def messages(self) -> list[str | None]:
        return [reply.content for _, reply in self.replies]

    @property
    def last(self) -> Reply:
        return self.replies[-1][1]


@pytest.fixture
def mock_runtime() -> AsyncMock:
    """Mock ContainerRuntimeClient; every container reports running."""
    runtime = AsyncMock(spec=ContainerRuntimeClient)
    runtime.inspect = AsyncMock(return_value=observe(True))
    runtime.stop = AsyncMock()
    runtime.kill = AsyncMock()
    runtime.start = AsyncMock()
    runtime.fetch_logs = AsyncMock(return_value=LogBundle())
    return runtime


@pytest.fixture
def responder() -> RecordingResponder:
    return RecordingResponder()


@pytest.fixture
def docker_config() -> DockerConfig:
    return DockerConfig(api_timeout=30.0, stop_grace_seconds=5, kill_signal="SIGKILL")


@pytest.fixture
def registry() -> ServerRegistry:
    return ServerRegistry(
        [
            ServerMapping(name="Minecraft", container="minecraft", channel_id=MANAGED_CHANNEL),
            ServerMapping(name="Valheim", container="valheim", channel_id=200),
        ]
    )


@pytest.fixture
def controller(
    registry: ServerRegistry,
    mock_runtime: AsyncMock,
    docker_config: DockerConfig,
) -> ServerLifecycleController:
    """ServerLifecycleController with mock runtime and fresh locks."""
    return ServerLifecycleController(registry, mock_runtime, docker_config, ContainerLocks())
