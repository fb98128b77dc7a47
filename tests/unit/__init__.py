"""Unit tests for individual components in isolation.

Ensures fast execution with minimal dependencies.

Coverage:
    - models/: Pydantic validation and wire aliases
    - relay/: SSE parsing, configuration, request construction
    - ui/: Conversation state machine, image checks, Markdown rendering

Uses httpx.MockTransport for HTTP. Leverages pytest-check for multiple
assertions per test.
"""
