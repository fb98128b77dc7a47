from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

Role = Literal["user", "assistant"]


class ImageAttachment(BaseModel):
    """An image attached to a user message.

    Attributes:
        data_url: The image encoded as a data URI (serialized as ``dataUrl``).
        mime: The image MIME type, e.g. ``image/png``.
    """

    model_config = ConfigDict(populate_by_name=True)

    data_url: str = Field(..., alias="dataUrl", min_length=1)
    mime: str

    @field_validator("mime")
    @classmethod
    def validate_mime(cls, v: str) -> str:
        """Only image MIME types are accepted."""
        if not v.startswith("image/"):
            raise ValueError(f"Unsupported attachment type: {v}")
        return v

    @field_validator("data_url")
    @classmethod
    def validate_data_url(cls, v: str) -> str:
        if not v.startswith("data:"):
            raise ValueError("Image must be sent as a data URI")
        return v


class ChatMessage(BaseModel):
    """A single message of the conversation history.

    Attributes:
        role: Who wrote the message.
        content: The message text (may be empty for image-only messages).
        image: Optional image attachment, user messages only.
    """

    role: Role
    content: str = ""
    image: ImageAttachment | None = None

    @model_validator(mode="after")
    def check_image_owner(self) -> "ChatMessage":
        if self.image is not None and self.role != "user":
            raise ValueError("Only user messages can carry an image")
        return self


class ChatRequest(BaseModel):
    """Request payload for the chat relay endpoint.

    Attributes:
        messages: Full ordered conversation history.
    """

    messages: list[ChatMessage] = Field(..., min_length=1)
