from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

LLMProvider = Literal["gemini", "openai", "anthropic"]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # LLM provider selection
    llm_provider: LLMProvider = Field(
        default="gemini",
        validation_alias=AliasChoices("LLM_PROVIDER", "llm_provider"),
        description="Which provider adapter handles completions: gemini|openai|anthropic.",
    )
    llm_timeout_seconds: float = Field(
        default=20.0,
        ge=1.0,
        le=120.0,
        validation_alias=AliasChoices("LLM_TIMEOUT_SECONDS", "llm_timeout_seconds"),
        description="Timeout for a single provider request (seconds).",
    )

    # Google Gemini
    gemini_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("GEMINI_API_KEY", "gemini_api_key"),
        description="Gemini API key (required when LLM_PROVIDER=gemini).",
    )
    gemini_model: str = Field(
        default="gemini-2.0-flash",
        validation_alias=AliasChoices("GEMINI_MODEL", "gemini_model"),
    )
    gemini_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        validation_alias=AliasChoices("GEMINI_BASE_URL", "gemini_base_url"),
    )

    # OpenAI (or any OpenAI-compatible endpoint)
    openai_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("OPENAI_API_KEY", "openai_api_key"),
        description="OpenAI API key (required when LLM_PROVIDER=openai).",
    )
    openai_model: str = Field(
        default="gpt-4o-mini",
        validation_alias=AliasChoices("OPENAI_MODEL", "openai_model"),
    )
    openai_base_url: str = Field(
        default="https://api.openai.com/v1",
        validation_alias=AliasChoices("OPENAI_BASE_URL", "openai_base_url"),
        description="Base URL for OpenAI API (override for proxies/compatible providers).",
    )

    # Anthropic
    anthropic_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("ANTHROPIC_API_KEY", "anthropic_api_key"),
        description="Anthropic API key (required when LLM_PROVIDER=anthropic).",
    )
    anthropic_model: str = Field(
        default="claude-3-5-haiku-latest",
        validation_alias=AliasChoices("ANTHROPIC_MODEL", "anthropic_model"),
    )
    anthropic_base_url: str = Field(
        default="https://api.anthropic.com/v1",
        validation_alias=AliasChoices("ANTHROPIC_BASE_URL", "anthropic_base_url"),
    )

    # Request / response limits
    max_sentence_chars: int = Field(
        default=1_000,
        ge=10,
        validation_alias=AliasChoices("MAX_SENTENCE_CHARS", "max_sentence_chars"),
        description="Longest sentence accepted by POST /api/improve.",
    )
    max_alternatives: int = Field(
        default=5,
        ge=0,
        le=5,
        validation_alias=AliasChoices("MAX_ALTERNATIVES", "max_alternatives"),
        description="Alternatives returned to the caller are truncated to this many.",
    )
    language_guard_min_chars: int = Field(
        default=10,
        ge=0,
        validation_alias=AliasChoices("LANGUAGE_GUARD_MIN_CHARS", "language_guard_min_chars"),
        description="Sentences at or below this length are never rejected as wrong-language.",
    )
    log_raw_response_chars: int = Field(
        default=500,
        ge=0,
        validation_alias=AliasChoices("LOG_RAW_RESPONSE_CHARS", "log_raw_response_chars"),
        description="Preview length of unparsable provider output in server logs (0 disables).",
    )

    @property
    def llm_api_key(self) -> str | None:
        return {
            "gemini": self.gemini_api_key,
            "openai": self.openai_api_key,
            "anthropic": self.anthropic_api_key,
        }[self.llm_provider]

    @property
    def llm_api_key_env_var(self) -> str:
        # Name shown to operators when the key for the selected provider is missing.
        return f"{self.llm_provider.upper()}_API_KEY"


@lru_cache
def get_settings() -> Settings:
    return Settings()
