"""Pydantic models for the chat relay API.

Provides type safety, validation, and automatic OpenAPI documentation.

Models:
    - ImageAttachment: Inline image carried by a user message
    - ChatMessage: Individual message in the conversation
    - ChatRequest: Incoming chat request payload (full history)
"""

from src.models.schemas import ChatMessage, ChatRequest, ImageAttachment, Role

__all__ = ["ChatMessage", "ChatRequest", "ImageAttachment", "Role"]
