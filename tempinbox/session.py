"""Session bootstrap: obtain the ``JSESSIONID`` token from the service host."""

from __future__ import annotations

import httpx
import structlog

from .errors import ConnectError, SessionMissingError
from .models import SESSION_COOKIE, Session

logger = structlog.get_logger()


async def bootstrap_session(client: httpx.AsyncClient, host: str) -> Session:
    """Issue one unauthenticated GET to ``https://{host}`` and return its session.

    The token is the only credential the service uses; it is replayed as a
    ``Cookie`` header on the push handshake and on every content fetch.

    Raises :class:`ConnectError` if the host cannot be reached and
    :class:`SessionMissingError` if no non-empty ``JSESSIONID`` cookie is set.
    """
    url = f"https://{host}"
    try:
        response = await client.get(url, follow_redirects=True)
    except httpx.HTTPError as exc:
        raise ConnectError(f"session bootstrap against {url} failed: {exc}") from exc

    # The cookie may have been set on a response that was later redirected.
    token = None
    for hop in (response, *reversed(response.history)):
        token = _first_session_cookie(hop)
        if token:
            break
    if not token:
        logger.warning("session_cookie_missing", host=host, status_code=response.status_code)
        raise SessionMissingError(f"no {SESSION_COOKIE} cookie in response from {url}")

    logger.info("session_established", host=host)
    return Session(value=token, host=host)


def _first_session_cookie(response: httpx.Response) -> str | None:
    # Cookies.get() raises CookieConflict when the name is set for several paths.
    for cookie in response.cookies.jar:
        if cookie.name == SESSION_COOKIE and cookie.value:
            return cookie.value
    return None
