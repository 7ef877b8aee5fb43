"""Container runtime access for Hugin."""

from hugin.runtime.client import ContainerRuntimeClient
from hugin.runtime.docker import DockerRuntimeClient, classify_docker_error
from hugin.runtime.lock import ContainerLocks
from hugin.runtime.result import CallResult, attempt

__all__ = [
    "CallResult",
    "ContainerLocks",
    "ContainerRuntimeClient",
    "DockerRuntimeClient",
    "attempt",
    "classify_docker_error",
]
