"""FastAPI endpoints for the BhattGPT chat relay.

HTTP and streaming routes with async request handling.
Streams assistant text as a plain chunked body.

Endpoints:
    - GET /health: Service health status
    - POST /api/chat: Relay a conversation and stream the reply
"""

from src.api.app import app, create_app

__all__ = ["app", "create_app"]
