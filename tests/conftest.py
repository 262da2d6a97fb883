"""Shared test fixtures for the tempinbox test suite."""

from __future__ import annotations

import asyncio
from typing import Any
from unittest.mock import AsyncMock

import pytest

from tempinbox.config import InboxConfig
from tempinbox.fetcher import ContentFetcher
from tempinbox.models import Message, NotificationEvent, Session

HOST = "mail.test"


@pytest.fixture
def inbox_config() -> InboxConfig:
    return InboxConfig(user_agent="tempinbox-tests/1.0", timeout_seconds=5.0)


@pytest.fixture
def session() -> Session:
    return Session(value="sess-abc123", host=HOST)


# ------------------------------------------------------------------
# Sample /fetch_email payloads
# ------------------------------------------------------------------


@pytest.fixture
def message_payload_factory():
    """Factory building a /fetch_email JSON body with overrides."""

    def _make(
        *,
        msg_id: str = "42",
        subject: str = "Confirm your account",
        parts: list[dict[str, Any]] | None = None,
    ) -> dict[str, Any]:
        if parts is None:
            parts = [
                {
                    "headers": {
                        "contenttype": "text/plain; charset=UTF-8",
                        "contenttransferencoding": "7bit",
                    },
                    "body": "Your code is 123456",
                }
            ]
        return {
            "from": "noreply@service.example",
            "to": "alice@mail.test",
            "data": {
                "fromfull": "Service <noreply@service.example>",
                "headers": {
                    "date": "Mon, 02 Jun 2025 10:00:00 +0000",
                    "from": "Service <noreply@service.example>",
                    "contenttype": "multipart/alternative",
                    "dkimsignature": "v=1; a=rsa-sha256; d=service.example",
                    "mimeversion": "1.0",
                    "subject": subject,
                    "feedbackid": "1.eu-west-1.abc:AmazonSES",
                    "messageid": "<0102018f@eu-west-1.amazonses.com>",
                    "received": "from a27-1.smtp-out.eu-west-1.amazonses.com",
                    "to": "alice@mail.test",
                    "xsesoutgoing": "2025.06.02-54.240.27.1",
                },
                "subject": subject,
                "requestId": "req-9f8e",
                "origfrom": "noreply@service.example",
                "id": msg_id,
                "time": 1748858400,
                "seconds_ago": 3,
                "parts": parts,
            },
        }

    return _make


@pytest.fixture
def message_factory(message_payload_factory):
    """Factory building decoded :class:`Message` instances."""

    def _make(**overrides: Any) -> Message:
        return Message.model_validate(message_payload_factory(**overrides))

    return _make


# ------------------------------------------------------------------
# Pipeline collaborators
# ------------------------------------------------------------------


class FakeListener:
    """Stands in for NotificationListener; events are pushed by the test.

    Pushed dicts are decoded like real frames; pushed exceptions are raised
    from :meth:`receive`.
    """

    def __init__(self) -> None:
        self._events: asyncio.Queue[Any] = asyncio.Queue()
        self.closed = False
        self.received = 0

    def push(self, *items: Any) -> None:
        for item in items:
            self._events.put_nowait(item)

    async def receive(self) -> NotificationEvent:
        item = await self._events.get()
        self.received += 1
        if isinstance(item, BaseException):
            raise item
        return NotificationEvent.from_payload(item)

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_listener() -> FakeListener:
    return FakeListener()


@pytest.fixture
def mock_fetcher() -> AsyncMock:
    """A ContentFetcher mock with async fetch/get."""
    return AsyncMock(spec=ContentFetcher)
