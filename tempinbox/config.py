"""Inbox client configuration loaded from environment variables.

Uses pydantic-settings so every field can be overridden via env vars
with the ``TEMPINBOX_`` prefix.
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/62.0.3202.94 Safari/537.36"
)


class InboxConfig(BaseSettings):
    """Settings shared by the session bootstrap, listener and fetcher."""

    model_config = {"env_prefix": "TEMPINBOX_"}

    user_agent: str = Field(
        default=DEFAULT_USER_AGENT,
        description="Client identity sent as User-Agent on every request",
    )
    zone: str = Field(
        default="public",
        description="Zone query parameter required by the service endpoints",
    )
    timeout_seconds: float = Field(
        default=30.0,
        description="HTTP request and websocket opening handshake timeout",
    )
    log_level: str = Field(default="INFO", description="Root log level for the CLI")
    log_json: bool = Field(
        default=True,
        description="Render CLI logs as JSON lines instead of console output",
    )
