"""Container runtime capability surface."""

from abc import ABC, abstractmethod

from hugin.models import ContainerObservation, LogBundle


class ContainerRuntimeClient(ABC):
    """Interface the lifecycle controller drives containers through.

    Mutating calls (stop, kill, start) only *request* a change. Callers
    confirm the effect with a fresh inspect.

    Implementations: DockerRuntimeClient
    """

    @abstractmethod
    async def inspect(self, container: str) -> ContainerObservation:
        """Observe the current container state.

        Args:
            container: Container name or id

        Raises:
            RuntimeUnavailableError: Runtime endpoint unreachable
            ContainerNotFoundError: No such container
        """
        ...

    @abstractmethod
    async def stop(self, container: str, grace_seconds: int) -> None:
        """Request graceful termination.

        Args:
            container: Container name or id
            grace_seconds: Seconds before the runtime escalates to SIGKILL
        """
        ...

    @abstractmethod
    async def kill(self, container: str, signal: str) -> None:
        """Request forceful termination with a signal."""
        ...

    @abstractmethod
    async def start(self, container: str) -> None:
        """Request container start."""
        ...

    @abstractmethod
    async def fetch_logs(self, container: str) -> LogBundle:
        """Fetch the full buffered stdout/stderr of a container."""
        ...
