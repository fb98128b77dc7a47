"""Integration tests for components working together as a system.

Coverage:
    - POST /api/chat with real HTTP requests through ASGITransport
    - Upstream SSE re-framing, model selection and error mapping
    - The UI conversation loop streaming from the real relay app

Only the upstream provider is replaced, by an httpx.MockTransport that
speaks its SSE format.
"""
