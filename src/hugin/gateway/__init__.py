"""Chat gateway: capability interface, command routing and Discord binding."""

from hugin.gateway.interface import (
    Attachment,
    PanelField,
    Reply,
    Responder,
    StatusPanel,
)
from hugin.gateway.router import CommandHandler, CommandRouter

__all__ = [
    "Attachment",
    "CommandHandler",
    "CommandRouter",
    "PanelField",
    "Reply",
    "Responder",
    "StatusPanel",
]
