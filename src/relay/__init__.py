"""Upstream relay for streaming chat completions.

Forwards the conversation to an OpenAI-compatible provider and re-frames its
server-sent event stream into plain text.

Responsibilities:
    - Relay configuration from environment variables
    - Model selection (vision vs. text-only)
    - Incremental SSE parsing, independent of I/O
    - Streaming delta text back to the HTTP layer

Maintains clean separation from the HTTP layer.
"""

from src.relay.config import RelayConfig, get_relay_config
from src.relay.upstream import (
    RelayService,
    UpstreamError,
    close_relay_service,
    get_relay_service,
)

__all__ = [
    "RelayConfig",
    "RelayService",
    "UpstreamError",
    "close_relay_service",
    "get_relay_config",
    "get_relay_service",
]
