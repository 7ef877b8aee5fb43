"""Channel to server lookup."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING

from hugin.logging_schema import LogEvent
from hugin.models import ServerMapping

if TYPE_CHECKING:
    from hugin.config import HuginConfig

logger = logging.getLogger(__name__)


class ServerRegistry:
    """Immutable mapping of Discord channel -> managed server.

    Lookup returns the first mapping bound to a channel. Duplicate channel
    bindings are a configuration mistake; they are logged, not rejected.
    """

    def __init__(self, mappings: Iterable[ServerMapping]) -> None:
        self._mappings: tuple[ServerMapping, ...] = tuple(mappings)

        seen: set[int] = set()
        for mapping in self._mappings:
            if mapping.channel_id in seen:
                logger.warning(
                    "Channel bound to more than one server, only the first is used",
                    extra={
                        "event": LogEvent.DUPLICATE_CHANNEL,
                        "channel_id": mapping.channel_id,
                        "server": mapping.name,
                    },
                )
            seen.add(mapping.channel_id)

    @classmethod
    def from_config(cls, config: HuginConfig) -> ServerRegistry:
        return cls(
            ServerMapping(name=s.name, container=s.container, channel_id=s.channel_id)
            for s in config.servers
        )

    def resolve(self, channel_id: int) -> ServerMapping | None:
        """Find the server bound to a channel, or None."""
        for mapping in self._mappings:
            if mapping.channel_id == channel_id:
                return mapping
        return None

    def __len__(self) -> int:
        return len(self._mappings)

    def __iter__(self) -> Iterator[ServerMapping]:
        return iter(self._mappings)
