"""Per-container locks for mutating operations."""

import asyncio


class ContainerLocks:
    """Lazily created asyncio locks keyed by container reference.

    Prevents two restarts from interleaving stop/kill/start calls on the
    same container. Lives for the process lifetime; the key set is bounded
    by the configured server list.
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}

    def get(self, container: str) -> asyncio.Lock:
        """Get or create the lock for a container."""
        if container not in self._locks:
            self._locks[container] = asyncio.Lock()
        return self._locks[container]

    def is_locked(self, container: str) -> bool:
        lock = self._locks.get(container)
        return lock is not None and lock.locked()
