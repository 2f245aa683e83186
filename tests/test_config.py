"""Tests for configuration management."""

import os
import pytest
from unittest.mock import patch

from pydantic import ValidationError

from eduinsight import config as config_module
from eduinsight.config import AppConfig, LLMConfig, ScoringSettings, Settings, get_settings
from scoring import DEFAULT_SCORING


def test_llm_config_defaults():
    """Test LLM configuration with defaults."""
    with patch.dict(os.environ, {}, clear=True):
        config = LLMConfig(_env_file=None)
    assert config.provider is None
    assert config.gemini_model == "gemini-2.5-flash"
    assert config.max_concurrent_requests == 5
    assert config.request_timeout == 60.0
    assert config.max_retries == 3
    assert config.retry_delay == 1.0
    assert config.has_api_key is False


def test_llm_config_keys():
    """Test API keys are read from either Gemini variable."""
    with patch.dict(os.environ, {"API_KEY": "legacy-key", "LLM_PROVIDER": "Gemini"}, clear=True):
        config = LLMConfig(_env_file=None)
    assert config.gemini_api_key == "legacy-key"
    assert config.provider == "gemini"
    assert config.has_api_key is True


def test_llm_config_invalid_provider():
    """Test unknown providers are rejected."""
    with patch.dict(os.environ, {"LLM_PROVIDER": "openai"}, clear=True):
        with pytest.raises(ValidationError, match="LLM_PROVIDER"):
            LLMConfig(_env_file=None)


def test_scoring_settings_defaults_match_engine():
    """Test scoring settings default to the engine's constants."""
    with patch.dict(os.environ, {}, clear=True):
        settings = ScoringSettings(_env_file=None)
    assert settings.to_scoring_config() == DEFAULT_SCORING


def test_scoring_settings_from_env():
    """Test scoring weights come from SCORING_ variables."""
    with patch.dict(os.environ, {
        "SCORING_RATING_WEIGHT": "0.5",
        "SCORING_SENTIMENT_WEIGHT": "0.5",
        "SCORING_TOP_TOPICS_LIMIT": "3",
    }, clear=True):
        config = ScoringSettings(_env_file=None).to_scoring_config()
    assert config.rating_weight == 0.5
    assert config.sentiment_weight == 0.5
    assert config.top_topics_limit == 3


def test_app_config_defaults():
    """Test app configuration with defaults."""
    with patch.dict(os.environ, {}, clear=True):
        config = AppConfig(_env_file=None)
    assert config.name == "eduinsight"
    assert config.version == "0.1.0"
    assert config.log_level == "INFO"
    assert config.debug is False
    assert config.prompt_templates_dir is None


def test_app_config_log_level():
    """Test log level is normalised and validated."""
    with patch.dict(os.environ, {"LOG_LEVEL": "debug"}, clear=True):
        assert AppConfig(_env_file=None).log_level == "DEBUG"
    with patch.dict(os.environ, {"LOG_LEVEL": "chatty"}, clear=True):
        with pytest.raises(ValidationError):
            AppConfig(_env_file=None)


def test_get_settings_is_cached():
    """Test settings are loaded once."""
    with patch.object(config_module, "_settings", None):
        first = get_settings()
        assert isinstance(first, Settings)
        assert get_settings() is first


def test_debug_overrides_log_level():
    """Test debug mode forces DEBUG logging."""
    with patch.dict(os.environ, {"LOG_LEVEL": "WARNING"}, clear=True):
        assert AppConfig(_env_file=None).effective_log_level == "WARNING"
    with patch.dict(os.environ, {"LOG_LEVEL": "WARNING", "DEBUG": "true"}, clear=True):
        assert AppConfig(_env_file=None).effective_log_level == "DEBUG"
