"""Hugin infrastructure layer."""

from hugin.infra.docker import ContainerAPI, DockerClient, demux_log_stream, is_multiplexed

__all__ = [
    "ContainerAPI",
    "DockerClient",
    "demux_log_stream",
    "is_multiplexed",
]
