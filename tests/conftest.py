"""Pytest fixtures and shared test configuration.

Provides reusable fixtures for unit and integration tests.

Fixtures:
    - relay_config: Relay configuration that never touches the environment
    - make_relay_service: Builds a RelayService backed by a mock upstream
    - relay_app: The FastAPI app with the relay service swapped for a mock
    - async_client: HTTPX client for API testing

The upstream provider is always replaced by ``httpx.MockTransport``; no test
reaches the network.
"""

from collections.abc import AsyncGenerator, Callable, Generator

import httpx
import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from src.api import app
from src.api.chat import relay_service_provider
from src.relay.config import RelayConfig
from src.relay.upstream import RelayService

UPSTREAM_URL = "https://upstream.test/api/v1/chat/completions"

Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture
def relay_config() -> RelayConfig:
    """Return a relay configuration with fixed test values.

    Returns:
        RelayConfig with distinct text and vision model ids.
    """
    return RelayConfig(
        api_key="sk-or-test-key",
        base_url=UPSTREAM_URL,
        site_url="http://localhost:3000",
        site_name="TestChat",
        text_model="test/text-model",
        vision_model="test/vision-model",
    )


@pytest.fixture
async def make_relay_service(
    relay_config: RelayConfig,
) -> AsyncGenerator[Callable[[Handler], RelayService]]:
    """Factory for relay services whose upstream is a request handler.

    Yields:
        Callable taking an httpx request handler and returning a RelayService.
    """
    services: list[RelayService] = []

    def factory(handler: Handler) -> RelayService:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        service = RelayService(config=relay_config, client=client)
        services.append(service)
        return service

    yield factory

    for service in services:
        await service.aclose()


@pytest.fixture
def relay_app() -> Generator[Callable[[RelayService], FastAPI]]:
    """Install a relay service on the shared app for the duration of a test.

    Yields:
        Callable taking a RelayService and returning the patched app.
    """

    def install(service: RelayService) -> FastAPI:
        app.dependency_overrides[relay_service_provider] = lambda: (lambda: service)
        return app

    yield install

    app.dependency_overrides.clear()


@pytest.fixture
async def async_client() -> AsyncGenerator[AsyncClient]:
    """Create async HTTP client for API testing.

    Yields:
        Configured AsyncClient for making test requests.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
