"""Unit tests for RelayConfig.

Tests configuration validation, environment loading and model selection.
"""

from unittest.mock import patch

import pytest
from pydantic import ValidationError

from src.relay.config import (
    DEFAULT_TEXT_MODEL,
    DEFAULT_VISION_MODEL,
    OPENROUTER_URL,
    RelayConfig,
    get_relay_config,
)


class TestRelayConfig:
    """Tests for RelayConfig validation."""

    def test_valid_config_with_all_fields(self) -> None:
        """Config accepts valid values for all fields."""
        config = RelayConfig(
            api_key="sk-or-12345",
            base_url="https://example.test/v1/chat/completions",
            site_url="https://chat.example.test",
            site_name="Example",
            text_model="vendor/text",
            vision_model="vendor/vision",
            temperature=0.2,
            system_prompt="Be brief.",
        )

        assert config.api_key == "sk-or-12345"
        assert config.base_url == "https://example.test/v1/chat/completions"
        assert config.site_name == "Example"
        assert config.temperature == 0.2
        assert config.system_prompt == "Be brief."

    def test_config_with_default_values(self) -> None:
        """Config falls back to OpenRouter defaults when only a key is given."""
        with patch.dict(
            "os.environ",
            {
                "OPENROUTER_URL": "",
                "OPENROUTER_SITE_URL": "",
                "OPENROUTER_SITE_NAME": "",
            },
        ):
            config = RelayConfig(api_key="sk-or-test")

        assert config.base_url == OPENROUTER_URL
        assert config.site_url == "http://localhost:3000"
        assert config.site_name == "MyChatApp"
        assert config.temperature == 0.7
        assert "Markdown" in config.system_prompt

    def test_config_fails_with_missing_api_key(self) -> None:
        """Config raises ValidationError when API key is missing."""
        with pytest.raises(ValidationError) as exc_info:
            RelayConfig(api_key="")

        assert "OPENROUTER_API_KEY" in str(exc_info.value)

    def test_config_fails_with_whitespace_api_key(self) -> None:
        """Config rejects whitespace-only API key."""
        with pytest.raises(ValidationError):
            RelayConfig(api_key="   ")

    def test_config_strips_api_key_whitespace(self) -> None:
        """Config strips leading/trailing whitespace from API key."""
        config = RelayConfig(api_key="  sk-or-test  ")

        assert config.api_key == "sk-or-test"

    def test_config_fails_with_temperature_out_of_range(self) -> None:
        """Config rejects temperature outside 0.0-2.0."""
        with pytest.raises(ValidationError) as exc_info:
            RelayConfig(api_key="sk-or-test", temperature=2.5)

        assert "temperature" in str(exc_info.value).lower()

    def test_model_for_selects_by_image_presence(self) -> None:
        """Vision model for images, text model otherwise."""
        config = RelayConfig(api_key="sk-or-test", text_model="t", vision_model="v")

        assert config.model_for(has_image=True) == "v"
        assert config.model_for(has_image=False) == "t"


class TestGetRelayConfig:
    """Tests for get_relay_config factory function."""

    def test_get_config_from_environment(self) -> None:
        """get_relay_config reads key, site and models from the environment."""
        env = {
            "OPENROUTER_API_KEY": "sk-or-env",
            "OPENROUTER_SITE_URL": "https://mine.test",
            "OPENROUTER_SITE_NAME": "Mine",
            "LLM_TEXT_MODEL": "env/text",
            "LLM_VISION_MODEL": "env/vision",
        }
        with patch.dict("os.environ", env):
            config = get_relay_config()

        assert config.api_key == "sk-or-env"
        assert config.site_url == "https://mine.test"
        assert config.site_name == "Mine"
        assert config.text_model == "env/text"
        assert config.vision_model == "env/vision"

    def test_default_models_when_unset(self) -> None:
        with patch.dict("os.environ", {"OPENROUTER_API_KEY": "sk-or-env"}) as env:
            env.pop("LLM_TEXT_MODEL", None)
            env.pop("LLM_VISION_MODEL", None)
            config = get_relay_config()

        assert config.text_model == DEFAULT_TEXT_MODEL
        assert config.vision_model == DEFAULT_VISION_MODEL

    def test_get_config_fails_without_env_var(self) -> None:
        """get_relay_config raises when OPENROUTER_API_KEY is empty."""
        with (
            patch.dict("os.environ", {"OPENROUTER_API_KEY": ""}),
            pytest.raises(ValidationError),
        ):
            get_relay_config()

    def test_env_api_key_is_validated_and_stripped(self) -> None:
        """The key read from the environment goes through the same validator."""
        with patch.dict("os.environ", {"OPENROUTER_API_KEY": "  sk-or-env  "}):
            config = RelayConfig()

        assert config.api_key == "sk-or-env"

    def test_whitespace_env_api_key_is_rejected(self) -> None:
        with (
            patch.dict("os.environ", {"OPENROUTER_API_KEY": "   "}),
            pytest.raises(ValidationError, match="OPENROUTER_API_KEY"),
        ):
            RelayConfig()
