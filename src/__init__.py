"""BhattGPT - streaming chat client for a software-engineering assistant.

Combines FastAPI for the streaming relay, httpx for upstream and UI
requests, NiceGUI for the chat page, and Pydantic for data validation.

Components:
    - api: HTTP endpoint relaying chats as a plain-text stream
    - relay: Upstream request construction and SSE re-framing
    - ui: Web interface for chat interactions
    - models: Request schemas
"""

__version__ = "0.1.0"
