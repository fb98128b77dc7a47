"""Relay configuration with environment variable loading.

Pydantic-based configuration for the upstream chat-completion relay.
Targets OpenRouter by default; any OpenAI-compatible streaming endpoint
works through OPENROUTER_URL.
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

# Load environment variables from .env file
load_dotenv()

OPENROUTER_URL = "https://openrouter.ai/api/v1/chat/completions"
DEFAULT_TEXT_MODEL = "nvidia/nemotron-nano-9b-v2:free"
DEFAULT_VISION_MODEL = "nvidia/nemotron-nano-12b-v2-vl:free"

SYSTEM_PROMPT = """
You are BhattGPT, a domain-specific assistant for software engineers.
You are not "Assistant"; you call yourself BhattGPT.

Output rules:
- Use Markdown.
- Any code MUST be inside fenced code blocks with a language tag (e.g., ```ts, ```python).
- Shell commands go in ```bash.
- When relevant: include time & space complexity.
- Mention edge cases and trade-offs.
- If the task is ambiguous, ask exactly ONE clarifying question first.

Engineering preferences:
- Default to TypeScript/JavaScript for web, Python for algorithms unless user specifies otherwise.
- Prefer modern best practices (typing, linting, tests, error handling).
- Provide minimal but complete code (runnable, not pseudocode) unless asked otherwise.
- Avoid fluff, marketing language, or motivational text.
"""


class RelayConfig(BaseModel):
    """Configuration for the upstream chat-completion relay.

    Attributes:
        api_key: Bearer token for the upstream API.
        base_url: Full chat-completions URL.
        site_url: Sent as HTTP-Referer for provider attribution.
        site_name: Sent as X-Title for provider attribution.
        text_model: Model used when no message carries an image.
        vision_model: Model used when any user message carries an image.
        temperature: Sampling temperature (0.0 = deterministic, 2.0 = creative).
        system_prompt: Instructions prepended to every conversation.
    """

    api_key: str = Field(
        default_factory=lambda: os.getenv("OPENROUTER_API_KEY", ""),
        validate_default=True,
        description="API key for the upstream provider",
    )
    base_url: str = Field(
        default_factory=lambda: os.getenv("OPENROUTER_URL") or OPENROUTER_URL,
        description="Chat-completions endpoint URL",
    )
    site_url: str = Field(
        default_factory=lambda: os.getenv("OPENROUTER_SITE_URL") or "http://localhost:3000",
        description="Referer reported to the provider",
    )
    site_name: str = Field(
        default_factory=lambda: os.getenv("OPENROUTER_SITE_NAME") or "MyChatApp",
        description="Site label reported to the provider",
    )
    text_model: str = Field(
        default_factory=lambda: os.getenv("LLM_TEXT_MODEL", DEFAULT_TEXT_MODEL),
        description="Text-only model",
    )
    vision_model: str = Field(
        default_factory=lambda: os.getenv("LLM_VISION_MODEL", DEFAULT_VISION_MODEL),
        description="Vision-capable model",
    )
    temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=2.0,
        description="Sampling temperature for response generation",
    )
    system_prompt: str = Field(default=SYSTEM_PROMPT, description="System prompt")

    @field_validator("api_key")
    @classmethod
    def validate_api_key(cls, v: str) -> str:
        """Validate that API key is provided and non-empty."""
        if not v or not v.strip():
            raise ValueError("API key required. Set OPENROUTER_API_KEY in .env")
        return v.strip()

    def model_for(self, has_image: bool) -> str:
        """Pick the upstream model for a conversation."""
        return self.vision_model if has_image else self.text_model


def get_relay_config() -> RelayConfig:
    """Create relay configuration from environment.

    Returns:
        Configured RelayConfig instance.

    Raises:
        ValueError: If no API key is set.
    """
    return RelayConfig()
