"""Test package for BhattGPT.

Provides coverage for all components with unit tests for isolated logic
and integration tests for the relay and UI send loop working together.

Structure:
    - unit/: Individual function and class tests
    - integration/: End-to-end workflow tests through the FastAPI app

The upstream provider is always an httpx.MockTransport; no network access.
Leverages pytest with pytest-check for soft assertions.
"""
