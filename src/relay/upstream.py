"""Upstream chat-completion relay with SSE re-framing.

Core module of the backend: turns the UI's message history into one
streaming chat-completion request and turns the provider's SSE stream back
into plain text.

Design notes:

1. **Two phases** - ``open_completion`` sends the request and checks the
   status before anything is streamed, so a failing upstream produces one
   error response and never a half-written body. ``iter_deltas`` then only
   deals with an already accepted stream.

2. **Singleton client** - one ``httpx.AsyncClient`` is shared by all
   requests and closed on application shutdown. No timeout is configured; a
   stalled upstream stalls the response.

3. **Static routing** - the vision model is used when any user message
   carries an image, the text model otherwise. Nothing else is routed.

4. **Visible failures** - malformed records are skipped but logged and
   counted; a transport failure mid-stream appends an ``[Error: ...]`` line
   to the text instead of ending silently.
"""

import logging
from collections.abc import AsyncGenerator
from typing import Any

import httpx

from src.models.schemas import ChatMessage
from src.relay.config import RelayConfig, get_relay_config
from src.relay.sse import MalformedRecordError, SSEDecoder, extract_delta, iter_data

logger = logging.getLogger(__name__)


class UpstreamError(Exception):
    """Raised when the upstream API rejects the request.

    Attributes:
        status_code: HTTP status returned by the upstream API.
        detail: Upstream response body, possibly empty.
    """

    def __init__(self, status_code: int, detail: str = "") -> None:
        super().__init__(detail or f"Upstream returned HTTP {status_code}")
        self.status_code = status_code
        self.detail = detail


def has_image(messages: list[ChatMessage]) -> bool:
    """Check whether any user message carries an image."""
    return any(m.role == "user" and m.image is not None for m in messages)


def to_upstream_message(message: ChatMessage) -> dict[str, Any]:
    """Convert one history message into the OpenAI chat format.

    User messages with an image become a multimodal content array: the text
    part (when non-blank) followed by the image as an inline data URI.
    """
    if message.role == "user" and message.image is not None:
        parts: list[dict[str, Any]] = []
        if message.content.strip():
            parts.append({"type": "text", "text": message.content})
        parts.append({"type": "image_url", "image_url": {"url": message.image.data_url}})
        return {"role": message.role, "content": parts}
    return {"role": message.role, "content": message.content}


class RelayService:
    """Service for relaying chats to the upstream provider.

    Wraps an httpx.AsyncClient with:
    - Request construction (system prompt, history, model selection)
    - Status checking before streaming starts
    - SSE parsing down to plain delta text
    """

    def __init__(
        self,
        config: RelayConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the relay service.

        Args:
            config: Optional relay configuration.
                    Loads from environment if not provided.
            client: Optional HTTP client, mainly for tests.
        """
        self._config = config or get_relay_config()
        self._client = client or httpx.AsyncClient(timeout=None)

    @property
    def config(self) -> RelayConfig:
        return self._config

    def build_payload(self, messages: list[ChatMessage]) -> dict[str, Any]:
        """Build the upstream chat-completion request body.

        Args:
            messages: Full ordered conversation history.

        Returns:
            JSON-serializable request body with streaming enabled.
        """
        return {
            "model": self._config.model_for(has_image(messages)),
            "messages": [
                {"role": "system", "content": self._config.system_prompt},
                *(to_upstream_message(m) for m in messages),
            ],
            "stream": True,
            "temperature": self._config.temperature,
        }

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._config.api_key}",
            "Content-Type": "application/json",
            "HTTP-Referer": self._config.site_url,
            "X-Title": self._config.site_name,
        }

    async def open_completion(self, messages: list[ChatMessage]) -> httpx.Response:
        """Send the streaming request and wait for the response headers.

        Args:
            messages: Full ordered conversation history.

        Returns:
            An open streaming response with a success status. The caller
            must consume it through iter_deltas, which closes it.

        Raises:
            UpstreamError: If the upstream returns a non-success status.
            httpx.HTTPError: On transport failures before the first byte.
        """
        payload = self.build_payload(messages)
        logger.info(f"Relaying {len(messages)} messages to {payload['model']}")

        request = self._client.build_request(
            "POST",
            self._config.base_url,
            json=payload,
            headers=self._headers(),
        )
        response = await self._client.send(request, stream=True)

        if not response.is_success:
            try:
                await response.aread()
                detail = response.text
            except httpx.HTTPError:
                detail = ""
            finally:
                await response.aclose()
            logger.warning(f"Upstream rejected request with HTTP {response.status_code}")
            raise UpstreamError(response.status_code, detail)

        return response

    async def iter_deltas(self, response: httpx.Response) -> AsyncGenerator[str]:
        """Stream delta text out of an open upstream response.

        Args:
            response: Response returned by open_completion.

        Yields:
            Text fragments in arrival order.
        """
        decoder = SSEDecoder()
        dropped = 0

        def deltas(records: list[str]) -> list[str]:
            nonlocal dropped
            texts = []
            for record in records:
                for payload in iter_data(record):
                    try:
                        text = extract_delta(payload)
                    except MalformedRecordError as e:
                        dropped += 1
                        logger.warning(f"Skipping malformed stream record: {e}")
                        continue
                    if text:
                        texts.append(text)
            return texts

        try:
            async for data in response.aiter_bytes():
                for text in deltas(decoder.feed(data)):
                    yield text
            for text in deltas(decoder.flush()):
                yield text
        except httpx.HTTPError as e:
            logger.error(f"Upstream stream failed: {e!r}")
            yield f"\n\n[Error: {str(e) or type(e).__name__}]"
        finally:
            await response.aclose()
            if dropped:
                logger.warning(f"Dropped {dropped} malformed stream records")

    async def aclose(self) -> None:
        await self._client.aclose()


# Module-level singleton instance
_relay_service: RelayService | None = None


def get_relay_service() -> RelayService:
    """Get or create the global relay service.

    Returns:
        The RelayService instance.

    Raises:
        ValueError: If the configuration is invalid (e.g. no API key).
    """
    global _relay_service
    if _relay_service is None:
        _relay_service = RelayService()
    return _relay_service


async def close_relay_service() -> None:
    """Close the global relay service, if it was ever created."""
    global _relay_service
    if _relay_service is not None:
        await _relay_service.aclose()
        _relay_service = None
