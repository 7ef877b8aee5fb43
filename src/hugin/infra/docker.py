"""Docker Engine API client.

Provides async Docker API access for the container operations Hugin needs.
Supports Unix socket, TCP and plain HTTP(S) endpoints.
"""

import logging

import httpx

logger = logging.getLogger(__name__)

# Multiplexed log stream frame header: [stream, 0, 0, 0, size (4 bytes, big endian)]
_FRAME_HEADER_SIZE = 8
_STREAM_STDOUT = 1
_STREAM_STDERR = 2


# =============================================================================
# Docker Client
# =============================================================================


class DockerClient:
    """Async Docker API client."""

    def __init__(self, docker_host: str, timeout: float = 30.0) -> None:
        self._host = docker_host
        self._timeout = timeout
        self._client: httpx.AsyncClient | None = None

    @property
    def timeout(self) -> float:
        return self._timeout

    def _create_client(self) -> httpx.AsyncClient:
        """Create a new HTTP client."""
        if self._host.startswith("unix://"):
            socket_path = self._host.replace("unix://", "", 1)
            transport = httpx.AsyncHTTPTransport(uds=socket_path)
            return httpx.AsyncClient(
                transport=transport,
                base_url="http://localhost",
                timeout=self._timeout,
            )
        base_url = self._host
        if base_url.startswith("tcp://"):
            base_url = base_url.replace("tcp://", "http://", 1)
        return httpx.AsyncClient(base_url=base_url, timeout=self._timeout)

    async def get(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = self._create_client()
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None


# =============================================================================
# Container API
# =============================================================================


class ContainerAPI:
    """Docker Container API operations.

    Every method raises httpx errors as-is; classification happens one
    layer up in DockerRuntimeClient.
    """

    def __init__(self, client: DockerClient) -> None:
        self._docker = client

    async def inspect(self, name: str) -> dict:
        """Inspect a container."""
        client = await self._docker.get()
        resp = await client.get(f"/containers/{name}/json")
        resp.raise_for_status()
        return resp.json()

    async def start(self, name: str) -> None:
        """Start a container. 304 (already started) is not an error."""
        client = await self._docker.get()
        resp = await client.post(f"/containers/{name}/start")
        if resp.status_code != 304:
            resp.raise_for_status()
        logger.debug("Start requested: %s", name)

    async def stop(self, name: str, timeout: int = 5) -> None:
        """Stop a container, giving it `timeout` seconds before SIGKILL."""
        client = await self._docker.get()
        # The daemon holds the request open for the grace period
        http_timeout = self._docker.timeout + timeout
        resp = await client.post(
            f"/containers/{name}/stop",
            params={"t": str(timeout)},
            timeout=http_timeout,
        )
        if resp.status_code != 304:
            resp.raise_for_status()
        logger.debug("Stop requested: %s", name)

    async def kill(self, name: str, signal: str = "SIGKILL") -> None:
        """Send a signal to a container."""
        client = await self._docker.get()
        resp = await client.post(f"/containers/{name}/kill", params={"signal": signal})
        resp.raise_for_status()
        logger.debug("Kill requested: %s (%s)", name, signal)

    async def logs(self, name: str, stdout: bool = True, stderr: bool = True) -> bytes:
        """Get the buffered container logs (not followed)."""
        client = await self._docker.get()
        params = {
            "stdout": "true" if stdout else "false",
            "stderr": "true" if stderr else "false",
            "follow": "false",
        }
        resp = await client.get(f"/containers/{name}/logs", params=params)
        resp.raise_for_status()
        return resp.content


def is_multiplexed(data: bytes) -> bool:
    """Check whether a log payload starts with a multiplexed frame header.

    TTY containers return a raw stream; everything else is framed.
    """
    if len(data) < _FRAME_HEADER_SIZE:
        return False
    return data[0] in (0, _STREAM_STDOUT, _STREAM_STDERR) and data[1:4] == b"\x00\x00\x00"


def demux_log_stream(data: bytes) -> tuple[bytes, bytes]:
    """Split a multiplexed Docker log stream into (stdout, stderr).

    Frames with an unknown stream type (stdin echo) are dropped. A truncated
    trailing frame keeps whatever payload is present.
    """
    stdout = bytearray()
    stderr = bytearray()
    pos = 0
    while pos + _FRAME_HEADER_SIZE <= len(data):
        stream = data[pos]
        size = int.from_bytes(data[pos + 4 : pos + _FRAME_HEADER_SIZE], "big")
        start = pos + _FRAME_HEADER_SIZE
        payload = data[start : start + size]
        if stream == _STREAM_STDOUT:
            stdout.extend(payload)
        elif stream == _STREAM_STDERR:
            stderr.extend(payload)
        pos = start + size
    return bytes(stdout), bytes(stderr)
