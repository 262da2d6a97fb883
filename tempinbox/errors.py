"""Exception taxonomy for the inbox pipeline."""

from __future__ import annotations


class InboxError(Exception):
    """Base class for every error raised by :mod:`tempinbox`."""


class SessionMissingError(InboxError):
    """The bootstrap response carried no usable ``JSESSIONID`` cookie."""


class ConnectError(InboxError):
    """The service could not be reached or the push connection was lost."""


class DecodeError(InboxError):
    """A notification frame could not be decoded as JSON."""


class FetchError(InboxError):
    """Retrieving or decoding message content failed.

    Transport, HTTP status and decode failures are deliberately not told
    apart; the pipeline treats all of them as fatal.
    """

    def __init__(self, message_id: str | None, reason: str) -> None:
        self.message_id = message_id
        self.reason = reason
        target = f"message {message_id}" if message_id is not None else "request"
        super().__init__(f"fetch {target} failed: {reason}")
