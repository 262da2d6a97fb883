"""Authenticated HTTP retrieval of message content."""

from __future__ import annotations

import httpx
import structlog
from pydantic import ValidationError

from .config import InboxConfig
from .errors import FetchError
from .models import Message, Session

logger = structlog.get_logger()


class ContentFetcher:
    """Fetches messages from ``/fetch_email`` using the session cookie.

    The :class:`httpx.AsyncClient` is borrowed, not owned; whoever created
    it is responsible for closing it.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        host: str,
        session: Session,
        config: InboxConfig,
    ) -> None:
        self._client = client
        self._host = host
        self._session = session
        self._config = config

    @property
    def headers(self) -> dict[str, str]:
        return {
            "User-Agent": self._config.user_agent,
            "Cookie": self._session.cookie_header,
        }

    @property
    def fetch_url(self) -> str:
        return f"https://{self._host}/fetch_email"

    async def get(self, url: str) -> httpx.Response:
        """GET an arbitrary URL with the session cookie and client identity.

        The response is returned as-is; its status is not checked.
        """
        try:
            return await self._client.get(url, headers=self.headers)
        except httpx.HTTPError as exc:
            raise FetchError(None, f"GET {url}: {exc}") from exc

    async def fetch(self, message_id: str) -> Message:
        """Retrieve and decode the message identified by *message_id*.

        Raises :class:`FetchError` on transport errors, non-2xx responses
        and bodies that do not decode as a :class:`Message`.
        """
        try:
            response = await self._client.get(
                self.fetch_url,
                params={"msgid": message_id, "zone": self._config.zone},
                headers=self.headers,
            )
            response.raise_for_status()
            message = Message.model_validate_json(response.content)
        except (httpx.HTTPError, ValidationError) as exc:
            raise FetchError(message_id, str(exc)) from exc

        logger.debug(
            "message_fetched",
            message_id=message_id,
            parts=len(message.parts),
            status_code=response.status_code,
        )
        return message
