"""Data models for sessions, push notifications and fetched messages."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, model_validator

SESSION_COOKIE = "JSESSIONID"


class PipelineState(str, Enum):
    """Lifecycle state of an :class:`~tempinbox.pipeline.InboxPipeline`."""

    INITIALIZING = "initializing"
    RUNNING = "running"
    STOPPING = "stopping"
    STOPPED = "stopped"
    FAILED = "failed"


@dataclass(frozen=True)
class Session:
    """Session token obtained from the service's ``JSESSIONID`` cookie."""

    value: str
    host: str

    @property
    def cookie_header(self) -> str:
        return f"{SESSION_COOKIE}={self.value}"


class NotificationEvent(BaseModel):
    """A push notification announcing a new mail item.

    Only ``id`` is inspected; any other keys sent by the service are kept
    as extra fields.
    """

    model_config = {"extra": "allow"}

    id: str | None = Field(default=None, description="Identifier of a fetchable message")

    @property
    def actionable(self) -> bool:
        return bool(self.id)

    @classmethod
    def from_payload(cls, payload: Any) -> NotificationEvent:
        """Build an event from a decoded JSON frame.

        Anything that is not an object, or an ``id`` that is neither a
        string nor an integer, yields an event without an identifier.
        """
        if not isinstance(payload, dict):
            return cls()
        extra = {k: v for k, v in payload.items() if isinstance(k, str) and k != "id"}
        raw_id = payload.get("id")
        if isinstance(raw_id, bool):
            msg_id = None
        elif isinstance(raw_id, int):
            msg_id = str(raw_id)
        elif isinstance(raw_id, str):
            msg_id = raw_id
        else:
            msg_id = None
        return cls(id=msg_id, **extra)


class _WireModel(BaseModel):
    """Base for /fetch_email payload models.

    The service encodes empty values as JSON ``null``; those keys are dropped
    before validation so the field default applies instead.
    """

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


class MessageHeaders(_WireModel):
    """Selected RFC 5322 headers, keyed the way the service flattens them."""

    date: str = ""
    from_: str = Field(default="", alias="from")
    contenttype: str = ""
    dkimsignature: str = ""
    mimeversion: str = ""
    subject: str = ""
    feedbackid: str = ""
    messageid: str = ""
    received: str = ""
    to: str = ""
    xsesoutgoing: str = ""

    model_config = {"populate_by_name": True}


class PartHeaders(_WireModel):
    contenttype: str = ""
    contenttransferencoding: str = ""


class MessagePart(_WireModel):
    """One MIME body part with its own content headers."""

    headers: PartHeaders = Field(default_factory=PartHeaders)
    body: str = ""


class MessageData(_WireModel):
    fromfull: str = Field(default="", description="Raw sender string")
    headers: MessageHeaders = Field(default_factory=MessageHeaders)
    subject: str = ""
    request_id: str = Field(default="", alias="requestId")
    origfrom: str = ""
    id: str = ""
    time: int = Field(default=0, description="Arrival timestamp as reported by the service")
    seconds_ago: int = 0
    parts: list[MessagePart] = Field(default_factory=list)

    model_config = {"populate_by_name": True}


class Message(_WireModel):
    """A fully fetched and decoded email from the ``/fetch_email`` endpoint.

    Only messages with at least one body part are delivered; an empty
    ``parts`` list marks a transient, incomplete server state.
    """

    sender: str = Field(default="", alias="from", description="Sender address")
    recipient: str = Field(default="", alias="to", description="Recipient address")
    data: MessageData = Field(default_factory=MessageData)

    model_config = {"populate_by_name": True}

    @property
    def id(self) -> str:
        return self.data.id

    @property
    def subject(self) -> str:
        return self.data.subject

    @property
    def parts(self) -> list[MessagePart]:
        return self.data.parts

    @property
    def is_complete(self) -> bool:
        return len(self.data.parts) > 0
