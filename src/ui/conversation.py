"""Conversation state for the chat page.

Holds the ordered message list and the send gate, and consumes the relay's
plain-text stream into the assistant placeholder. Kept free of NiceGUI so
it can be tested without a browser.
"""

import base64
import logging
import os
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

import httpx

from src.models.schemas import ChatMessage, ImageAttachment, Role

logger = logging.getLogger(__name__)

CHAT_PATH = "/api/chat"

MAX_IMAGE_MB = 4
MAX_IMAGE_SIZE = MAX_IMAGE_MB * 1024 * 1024


class ImageRejectedError(Exception):
    """Raised when a picked file cannot be attached."""

    pass


class ChatRequestError(Exception):
    """Raised when the relay answers with a non-success status."""

    pass


class SendRejectedError(Exception):
    """Raised when a send is attempted outside the idle state or with no input."""

    pass


class ConversationState(str, Enum):
    """Send gate states."""

    IDLE = "idle"
    SENDING = "sending"


@dataclass
class Message:
    """A message shown in the conversation view.

    Attributes:
        role: Who wrote the message.
        content: Text; grows while the assistant reply streams in.
        image: Optional image attachment (user messages only).
        id: Opaque unique identifier.
    """

    role: Role
    content: str = ""
    image: ImageAttachment | None = None
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def to_payload(self) -> ChatMessage:
        return ChatMessage(role=self.role, content=self.content, image=self.image)


def api_base_url() -> str:
    """Base URL of the relay; defaults to this process on PORT."""
    return os.getenv("API_BASE_URL") or f"http://localhost:{os.getenv('PORT', '8000')}"


def encode_image(content: bytes, mime: str | None) -> ImageAttachment:
    """Validate a picked file and encode it as a data URI attachment.

    Args:
        content: Raw file bytes.
        mime: MIME type reported by the browser.

    Returns:
        The attachment to send with the next message.

    Raises:
        ImageRejectedError: If the file is not an image or exceeds 4MB.
    """
    if not mime or not mime.startswith("image/"):
        raise ImageRejectedError("Only image files are supported.")
    if len(content) > MAX_IMAGE_SIZE:
        raise ImageRejectedError(f"Image too large. Max {MAX_IMAGE_MB}MB.")

    encoded = base64.b64encode(content).decode("ascii")
    return ImageAttachment(data_url=f"data:{mime};base64,{encoded}", mime=mime)


class Conversation:
    """Manages chat state for one page.

    Messages are only ever appended; the assistant placeholder is the only
    message whose content changes after creation.
    """

    def __init__(self) -> None:
        self.messages: list[Message] = []
        self.state = ConversationState.IDLE
        self.pending_image: ImageAttachment | None = None

    @property
    def is_streaming(self) -> bool:
        return self.state is ConversationState.SENDING

    def attach_image(self, content: bytes, mime: str | None) -> ImageAttachment:
        """Validate a picked file and make it the pending attachment.

        Raises:
            ImageRejectedError: If the file is not an image or is too large.
                Messages and any already pending image are left as they were.
        """
        image = encode_image(content, mime)
        self.pending_image = image
        return image

    def clear_pending_image(self) -> None:
        self.pending_image = None

    def take_pending_image(self) -> ImageAttachment | None:
        image, self.pending_image = self.pending_image, None
        return image

    def can_send(self, text: str, image: ImageAttachment | None) -> bool:
        return self.state is ConversationState.IDLE and (bool(text.strip()) or image is not None)

    def begin_send(
        self, text: str, image: ImageAttachment | None = None
    ) -> tuple[Message, Message]:
        """Append the user message and an empty assistant placeholder.

        Returns:
            The new user message and the assistant placeholder.

        Raises:
            SendRejectedError: If a reply is streaming or there is nothing to send.
        """
        if self.state is not ConversationState.IDLE:
            raise SendRejectedError("A reply is still streaming")
        if not text.strip() and image is None:
            raise SendRejectedError("Nothing to send")

        user = Message(role="user", content=text.strip(), image=image)
        assistant = Message(role="assistant")
        self.messages.extend([user, assistant])
        self.state = ConversationState.SENDING
        return user, assistant

    def history_for(self, placeholder: Message) -> list[ChatMessage]:
        """Messages to send upstream: everything before the placeholder."""
        index = next(i for i, m in enumerate(self.messages) if m.id == placeholder.id)
        return [m.to_payload() for m in self.messages[:index]]

    def append_chunk(self, message: Message, chunk: str) -> None:
        message.content += chunk

    def fail(self, message: Message, error: str) -> None:
        message.content = f"Error: {error}"

    def finish(self) -> None:
        self.state = ConversationState.IDLE


async def stream_reply(
    conversation: Conversation,
    text: str,
    image: ImageAttachment | None,
    on_update: Callable[[], None],
    client: httpx.AsyncClient | None = None,
) -> Message:
    """Send a message and stream the reply into the conversation.

    Args:
        conversation: Conversation to append to.
        text: Text typed by the user.
        image: Pending image attachment, if any.
        on_update: Called after every change to the conversation.
        client: Optional HTTP client; a client for api_base_url() is
                created when omitted.

    Returns:
        The assistant message, complete or holding an error.

    Raises:
        SendRejectedError: If the conversation is not idle or input is empty.
    """
    _, assistant = conversation.begin_send(text, image)
    on_update()

    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient(base_url=api_base_url(), timeout=None)

    try:
        payload = {
            "messages": [
                m.model_dump(by_alias=True, exclude_none=True)
                for m in conversation.history_for(assistant)
            ]
        }
        async with client.stream("POST", CHAT_PATH, json=payload) as response:
            if not response.is_success:
                await response.aread()
                raise ChatRequestError(response.text or "Request failed")
            async for chunk in response.aiter_text():
                if chunk:
                    conversation.append_chunk(assistant, chunk)
                    on_update()
    except (httpx.HTTPError, httpx.StreamError, ChatRequestError) as e:
        logger.warning(f"Chat request failed: {e!r}")
        conversation.fail(assistant, str(e) or "Unknown error")
    finally:
        conversation.finish()
        if owns_client:
            await client.aclose()
        on_update()

    return assistant
