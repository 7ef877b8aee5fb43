"""Gateway capability interface.

The lifecycle controller only talks to a Responder and returns Reply
values; it never sees Discord types. A gateway implementation renders
replies onto its platform.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone

from pydantic import BaseModel, Field


class Attachment(BaseModel):
    """File attached to a reply."""

    filename: str
    content: bytes

    model_config = {"frozen": True}


class PanelField(BaseModel):
    """One name/value row of a panel."""

    name: str
    value: str

    model_config = {"frozen": True}


class StatusPanel(BaseModel):
    """Informational panel (rendered as an embed on Discord)."""

    title: str
    fields: list[PanelField] = []
    footer: str = "Hugin"
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = {"frozen": True}


class Reply(BaseModel):
    """Platform-neutral response content.

    Editing a response replaces all three parts, so a reply with a panel and
    no content clears any previous progress text.
    """

    content: str | None = None
    panel: StatusPanel | None = None
    attachments: list[Attachment] = []

    model_config = {"frozen": True}


class Responder(ABC):
    """Response channel for one command invocation."""

    @abstractmethod
    async def respond(self, reply: Reply) -> None:
        """Send the first response for the invocation."""
        ...

    @abstractmethod
    async def edit_response(self, reply: Reply) -> None:
        """Replace the previously sent response."""
        ...
