"""Chat relay endpoint.

Accepts the full conversation history and streams the assistant's reply
back as plain text.
"""

import logging
from collections.abc import Callable

from fastapi import APIRouter, Depends, status
from fastapi.responses import PlainTextResponse, Response, StreamingResponse

from src.models.schemas import ChatRequest
from src.relay.upstream import RelayService, UpstreamError, get_relay_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["chat"])

STREAM_HEADERS = {"Cache-Control": "no-cache, no-transform"}


def relay_service_provider() -> Callable[[], RelayService]:
    """Return the factory used to obtain the relay service.

    The service itself is created inside the handler so that a missing API
    key is reported like any other relay failure.
    """
    return get_relay_service


def _error_response(message: str) -> PlainTextResponse:
    return PlainTextResponse(message, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


@router.post("/chat")
async def chat(
    request: ChatRequest,
    provide_service: Callable[[], RelayService] = Depends(relay_service_provider),
) -> Response:
    """Relay a chat to the upstream provider and stream the reply.

    Args:
        request: Full ordered message history.

    Returns:
        A text/plain streaming response of raw assistant text.

    Raises:
        422: Invalid request body.
        500: Upstream rejected the request or could not be reached; the
             body is the plain-text error and nothing has been streamed.
    """
    try:
        service = provide_service()
        upstream = await service.open_completion(request.messages)
    except UpstreamError as e:
        return _error_response(e.detail or "Upstream error")
    except Exception as e:
        logger.error(f"Failed to start upstream request: {e}")
        return _error_response(str(e) or "Server error")

    return StreamingResponse(
        service.iter_deltas(upstream),
        media_type="text/plain; charset=utf-8",
        headers=STREAM_HEADERS,
    )
