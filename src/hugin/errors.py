"""Error handling module for Hugin.

This module defines error codes and exception classes. None of these
messages are ever shown to Discord users; they go to the operational log.

Usage:
    from hugin.errors import ContainerNotFoundError, RuntimeUnavailableError

    # Raise with default message
    raise RuntimeUnavailableError()

    # Raise with custom message
    raise ContainerNotFoundError("Container minecraft not found")
"""

from enum import Enum


class ErrorCode(str, Enum):
    """Error codes."""

    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    RUNTIME_UNAVAILABLE = "RUNTIME_UNAVAILABLE"
    CONTAINER_NOT_FOUND = "CONTAINER_NOT_FOUND"
    DOCKER_ERROR = "DOCKER_ERROR"
    GATEWAY_ERROR = "GATEWAY_ERROR"
    INVALID_SIGNATURE = "INVALID_SIGNATURE"


class HuginError(Exception):
    """Base exception for Hugin.

    Attributes:
        code: The error code from ErrorCode enum.
        message: Human-readable error message.
    """

    def __init__(self, code: ErrorCode, message: str) -> None:
        self.code = code
        self.message = message
        super().__init__(message)


class ConfigurationError(HuginError):
    """Configuration missing or invalid. Fatal at startup."""

    def __init__(self, message: str = "Invalid configuration") -> None:
        super().__init__(ErrorCode.CONFIGURATION_ERROR, message)


class RuntimeUnavailableError(HuginError):
    """Container runtime endpoint unreachable or failing."""

    def __init__(self, message: str = "Container runtime unavailable") -> None:
        super().__init__(ErrorCode.RUNTIME_UNAVAILABLE, message)


class ContainerNotFoundError(HuginError):
    """Container does not exist on the runtime."""

    def __init__(self, message: str = "Container not found") -> None:
        super().__init__(ErrorCode.CONTAINER_NOT_FOUND, message)


class DockerError(HuginError):
    """Docker rejected the request (4xx other than 404)."""

    def __init__(self, message: str = "Docker operation failed") -> None:
        super().__init__(ErrorCode.DOCKER_ERROR, message)


class GatewayError(HuginError):
    """Discord REST call failed."""

    def __init__(self, message: str = "Discord request failed") -> None:
        super().__init__(ErrorCode.GATEWAY_ERROR, message)


class InvalidSignatureError(HuginError):
    """Interaction request signature could not be verified."""

    def __init__(self, message: str = "Invalid request signature") -> None:
        super().__init__(ErrorCode.INVALID_SIGNATURE, message)
