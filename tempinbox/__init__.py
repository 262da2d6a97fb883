"""Disposable inbox client: push notifications in, fetched messages out.

Public API re-exported here for convenience::

    from tempinbox import InboxPipeline, InboxConfig, Message
"""

from .config import DEFAULT_USER_AGENT, InboxConfig
from .errors import ConnectError, DecodeError, FetchError, InboxError, SessionMissingError
from .fetcher import ContentFetcher
from .listener import NotificationListener
from .logging import setup_logging
from .models import (
    Message,
    MessageData,
    MessageHeaders,
    MessagePart,
    NotificationEvent,
    PartHeaders,
    PipelineState,
    Session,
)
from .pipeline import InboxPipeline
from .session import bootstrap_session
from .shutdown import install_signal_handlers

__all__ = [
    "ConnectError",
    "ContentFetcher",
    "DEFAULT_USER_AGENT",
    "DecodeError",
    "FetchError",
    "InboxConfig",
    "InboxError",
    "InboxPipeline",
    "Message",
    "MessageData",
    "MessageHeaders",
    "MessagePart",
    "NotificationEvent",
    "NotificationListener",
    "PartHeaders",
    "PipelineState",
    "Session",
    "SessionMissingError",
    "bootstrap_session",
    "install_signal_handlers",
    "setup_logging",
]
