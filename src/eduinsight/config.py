"""Configuration management for EduInsight."""

import logging
from pathlib import Path
from typing import Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from scoring import ScoringConfig


class LLMConfig(BaseSettings):
    """LLM API configuration settings."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    provider: Optional[str] = Field(None, validation_alias="LLM_PROVIDER")
    gemini_api_key: Optional[str] = Field(
        None, validation_alias=AliasChoices("GEMINI_API_KEY", "API_KEY")
    )
    anthropic_api_key: Optional[str] = Field(None, validation_alias="ANTHROPIC_API_KEY")
    gemini_model: str = Field("gemini-2.5-flash", validation_alias="GEMINI_MODEL")
    claude_model: str = Field("claude-3-5-haiku-latest", validation_alias="CLAUDE_MODEL")
    max_concurrent_requests: int = Field(5, ge=1, validation_alias="MAX_CONCURRENT_REQUESTS")
    request_timeout: float = Field(60.0, validation_alias="REQUEST_TIMEOUT")
    max_retries: int = Field(3, ge=0, validation_alias="MAX_RETRIES")
    retry_delay: float = Field(1.0, validation_alias="RETRY_DELAY")

    @field_validator("provider")
    @classmethod
    def validate_provider(cls, v):
        if v is not None and v.lower() not in ("gemini", "claude"):
            raise ValueError("LLM_PROVIDER must be 'gemini' or 'claude'")
        return v.lower() if v else v

    @property
    def has_api_key(self) -> bool:
        return bool(self.gemini_api_key or self.anthropic_api_key)


class ScoringSettings(BaseSettings):
    """Quality score weights and risk thresholds (``SCORING_*`` variables)."""

    model_config = SettingsConfigDict(
        env_prefix="SCORING_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    rating_weight: float = Field(0.7, ge=0)
    sentiment_weight: float = Field(0.3, ge=0)
    high_flag_ratio: float = Field(0.3, ge=0, le=1)
    high_quality_floor: float = 4.0
    medium_flag_ratio: float = Field(0.1, ge=0, le=1)
    medium_quality_floor: float = 6.0
    top_topics_limit: int = Field(5, ge=0)

    def to_scoring_config(self) -> ScoringConfig:
        return ScoringConfig(**self.model_dump())


class AppConfig(BaseSettings):
    """Application configuration settings."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    name: str = Field("eduinsight", validation_alias="APP_NAME")
    version: str = Field("0.1.0", validation_alias="APP_VERSION")
    log_level: str = Field("INFO", validation_alias="LOG_LEVEL")
    debug: bool = Field(False, validation_alias="DEBUG")
    prompt_templates_dir: Optional[Path] = Field(None, validation_alias="PROMPT_TEMPLATES_DIR")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"LOG_LEVEL must be a logging level name, got {v!r}")
        return level

    @property
    def effective_log_level(self) -> str:
        """``DEBUG`` when debug mode is on, otherwise ``log_level``."""
        return "DEBUG" if self.debug else self.log_level


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    llm: LLMConfig = Field(default_factory=LLMConfig)
    scoring: ScoringSettings = Field(default_factory=ScoringSettings)
    app: AppConfig = Field(default_factory=AppConfig)

    @classmethod
    def load(cls) -> "Settings":
        """Load settings from environment."""
        return cls()


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Settings loaded once per process."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings
