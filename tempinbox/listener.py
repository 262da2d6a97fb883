"""Push notification listener over the service's ``/ws/fetchinbox`` websocket."""

from __future__ import annotations

import json
from urllib.parse import urlencode

import structlog
from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import ConnectionClosed, WebSocketException

from .config import InboxConfig
from .errors import ConnectError, DecodeError
from .models import NotificationEvent, Session

logger = structlog.get_logger()


class NotificationListener:
    """Holds one authenticated websocket scoped to an inbox query.

    The connection is opened once by :meth:`connect`; a lost connection is
    reported as :class:`ConnectError` and never re-established.
    """

    def __init__(
        self,
        host: str,
        query: str,
        session: Session,
        config: InboxConfig,
    ) -> None:
        self._host = host
        self._query = query
        self._session = session
        self._config = config
        self._conn: ClientConnection | None = None

    @property
    def url(self) -> str:
        # Addresses go out with a literal "@", as the service expects.
        params = urlencode({"zone": self._config.zone, "query": self._query}, safe="@")
        return f"wss://{self._host}/ws/fetchinbox?{params}"

    @property
    def origin(self) -> str:
        return f"https://{self._host}"

    @property
    def connected(self) -> bool:
        return self._conn is not None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def connect(self) -> None:
        """Perform the websocket handshake (protocol version 13, no extensions)."""
        try:
            self._conn = await connect(
                self.url,
                origin=self.origin,
                additional_headers={"Cookie": self._session.cookie_header},
                user_agent_header=self._config.user_agent,
                compression=None,
                open_timeout=self._config.timeout_seconds,
            )
        except (WebSocketException, OSError, TimeoutError) as exc:
            raise ConnectError(f"push handshake with {self._host} failed: {exc}") from exc

        logger.info("listener_connected", host=self._host, query=self._query)

    async def close(self) -> None:
        if self._conn is not None:
            await self._conn.close()
            logger.info("listener_closed", host=self._host)

    # ------------------------------------------------------------------
    # Receiving
    # ------------------------------------------------------------------

    async def receive(self) -> NotificationEvent:
        """Block until the next frame arrives and decode it into an event."""
        assert self._conn is not None, "Listener not connected"
        try:
            frame = await self._conn.recv()
        except ConnectionClosed as exc:
            raise ConnectError(f"push connection to {self._host} closed: {exc}") from exc

        try:
            payload = json.loads(frame)
        except ValueError as exc:
            raise DecodeError(f"malformed notification frame: {exc}") from exc

        return NotificationEvent.from_payload(payload)
