"""Tests for tempinbox.fetcher."""

from __future__ import annotations

import httpx
import pytest
import respx

from tempinbox.config import InboxConfig
from tempinbox.errors import FetchError
from tempinbox.fetcher import ContentFetcher
from tempinbox.models import Session

FETCH_URL = "https://mail.test/fetch_email"


@pytest.fixture
def client() -> httpx.AsyncClient:
    return httpx.AsyncClient()


@pytest.fixture
def fetcher(
    client: httpx.AsyncClient, session: Session, inbox_config: InboxConfig
) -> ContentFetcher:
    return ContentFetcher(client, "mail.test", session, inbox_config)


class TestFetch:
    @pytest.mark.asyncio
    @respx.mock
    async def test_fetch_decodes_message(self, fetcher: ContentFetcher, message_payload_factory):
        route = respx.get(FETCH_URL, params={"msgid": "42", "zone": "public"}).respond(
            200, json=message_payload_factory(msg_id="42")
        )

        message = await fetcher.fetch("42")

        assert route.called
        assert message.id == "42"
        assert len(message.parts) == 1

    @pytest.mark.asyncio
    @respx.mock
    async def test_fetch_sends_session_and_agent(
        self, fetcher: ContentFetcher, message_payload_factory
    ):
        route = respx.get(FETCH_URL).respond(200, json=message_payload_factory())

        await fetcher.fetch("42")

        request = route.calls.last.request
        assert request.headers["cookie"] == "JSESSIONID=sess-abc123"
        assert request.headers["user-agent"] == "tempinbox-tests/1.0"
        assert request.url.query == b"msgid=42&zone=public"

    @pytest.mark.asyncio
    @respx.mock
    async def test_fetch_with_empty_parts_is_returned(
        self, fetcher: ContentFetcher, message_payload_factory
    ):
        respx.get(FETCH_URL).respond(200, json=message_payload_factory(parts=[]))

        message = await fetcher.fetch("42")

        assert not message.is_complete

    @pytest.mark.asyncio
    @respx.mock
    async def test_network_error_raises_fetch_error(self, fetcher: ContentFetcher):
        respx.get(FETCH_URL).mock(side_effect=httpx.ConnectError("unreachable"))

        with pytest.raises(FetchError) as excinfo:
            await fetcher.fetch("5")

        assert excinfo.value.message_id == "5"
        assert isinstance(excinfo.value.__cause__, httpx.ConnectError)

    @pytest.mark.asyncio
    @respx.mock
    async def test_server_error_raises_fetch_error(self, fetcher: ContentFetcher):
        respx.get(FETCH_URL).respond(503)

        with pytest.raises(FetchError, match="message 5"):
            await fetcher.fetch("5")

    @pytest.mark.asyncio
    @respx.mock
    async def test_malformed_body_raises_fetch_error(self, fetcher: ContentFetcher):
        respx.get(FETCH_URL).respond(200, text="<html>maintenance</html>")

        with pytest.raises(FetchError):
            await fetcher.fetch("5")

    @pytest.mark.asyncio
    @respx.mock
    async def test_custom_zone(self, client: httpx.AsyncClient, session: Session, message_payload_factory):
        config = InboxConfig(zone="private")
        fetcher = ContentFetcher(client, "mail.test", session, config)
        route = respx.get(FETCH_URL, params={"zone": "private"}).respond(
            200, json=message_payload_factory()
        )

        await fetcher.fetch("42")

        assert route.called


class TestGet:
    @pytest.mark.asyncio
    @respx.mock
    async def test_get_returns_raw_response(self, fetcher: ContentFetcher):
        route = respx.get("https://mail.test/attachment/1").respond(404, text="gone")

        response = await fetcher.get("https://mail.test/attachment/1")

        assert response.status_code == 404
        assert response.text == "gone"
        assert route.calls.last.request.headers["cookie"] == "JSESSIONID=sess-abc123"

    @pytest.mark.asyncio
    @respx.mock
    async def test_get_transport_error(self, fetcher: ContentFetcher):
        respx.get("https://mail.test/x").mock(side_effect=httpx.ReadTimeout("slow"))

        with pytest.raises(FetchError) as excinfo:
            await fetcher.get("https://mail.test/x")

        assert excinfo.value.message_id is None
