"""Docker implementation of the container runtime client."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

import httpx

from hugin.errors import (
    ContainerNotFoundError,
    DockerError,
    RuntimeUnavailableError,
)
from hugin.infra import ContainerAPI, demux_log_stream, is_multiplexed
from hugin.logging_schema import LogEvent
from hugin.models import ContainerObservation, LogBundle
from hugin.runtime.client import ContainerRuntimeClient

logger = logging.getLogger(__name__)

T = TypeVar("T")


def classify_docker_error(exc: Exception, container: str) -> Exception:
    """Translate an httpx failure into a Hugin error.

    - 404 -> ContainerNotFoundError
    - other 4xx -> DockerError
    - 5xx, transport and protocol errors, unreadable bodies -> RuntimeUnavailableError
    """
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        if status == 404:
            return ContainerNotFoundError(f"Container {container} not found")
        if 400 <= status < 500:
            return DockerError(f"Docker rejected request for {container}: HTTP {status}")
        return RuntimeUnavailableError(f"Docker returned HTTP {status} for {container}")
    if isinstance(exc, httpx.TransportError):
        return RuntimeUnavailableError(f"Docker endpoint unreachable: {exc!r}")
    if isinstance(exc, (httpx.HTTPError, httpx.InvalidURL, ValueError)):
        return RuntimeUnavailableError(f"Unusable Docker response for {container}: {exc!r}")
    return exc


class DockerRuntimeClient(ContainerRuntimeClient):
    """Container runtime backed by the Docker Engine API."""

    def __init__(self, containers: ContainerAPI) -> None:
        self._containers = containers

    async def _call(self, container: str, fn: Callable[[], Awaitable[T]]) -> T:
        try:
            return await fn()
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
            raise classify_docker_error(e, container) from e

    async def inspect(self, container: str) -> ContainerObservation:
        data = await self._call(container, lambda: self._containers.inspect(container))
        if not isinstance(data, dict):
            raise RuntimeUnavailableError(
                f"Unexpected inspect payload for {container}: {type(data).__name__}"
            )
        state = data.get("State")
        if not isinstance(state, dict):
            state = {}
        return ContainerObservation(
            id=data.get("Id", container),
            running=bool(state.get("Running", False)),
        )

    async def stop(self, container: str, grace_seconds: int) -> None:
        await self._call(container, lambda: self._containers.stop(container, timeout=grace_seconds))
        logger.info(
            "Stop requested",
            extra={
                "event": LogEvent.CONTAINER_STOPPED,
                "container": container,
                "grace_seconds": grace_seconds,
            },
        )

    async def kill(self, container: str, signal: str) -> None:
        await self._call(container, lambda: self._containers.kill(container, signal=signal))
        logger.info(
            "Kill requested",
            extra={"event": LogEvent.CONTAINER_KILLED, "container": container, "signal": signal},
        )

    async def start(self, container: str) -> None:
        await self._call(container, lambda: self._containers.start(container))
        logger.info(
            "Start requested",
            extra={"event": LogEvent.CONTAINER_STARTED, "container": container},
        )

    async def fetch_logs(self, container: str) -> LogBundle:
        """Fetch logs, demultiplexing the stream unless the container has a TTY."""
        raw = await self._call(container, lambda: self._containers.logs(container))

        if is_multiplexed(raw):
            stdout, stderr = demux_log_stream(raw)
        else:
            # TTY containers emit one raw stream
            stdout, stderr = raw, b""

        return LogBundle(
            stdout=stdout.decode("utf-8", errors="replace"),
            stderr=stderr.decode("utf-8", errors="replace"),
        )
