from __future__ import annotations

import httpx
from fastapi import Request

from app.core.llm.anthropic_client import AnthropicClient
from app.core.llm.base import HttpLanguageModelClient, LanguageModelClient, LLMConfig
from app.core.llm.gemini_client import GeminiClient
from app.core.llm.openai_client import OpenAIClient
from app.core.settings import Settings

_ADAPTERS: dict[str, type[HttpLanguageModelClient]] = {
    "gemini": GeminiClient,
    "openai": OpenAIClient,
    "anthropic": AnthropicClient,
}


def build_llm_client(
    settings: Settings,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> LanguageModelClient | None:
    """
    Build the adapter for the configured provider.

    Returns None when the provider has no API key so the app can still start
    (health checks keep working) and each request reports a ConfigError instead.
    """

    adapter = _ADAPTERS.get(settings.llm_provider)
    if adapter is None:
        raise ValueError(f"Unsupported LLM provider `{settings.llm_provider}`.")

    api_key = settings.llm_api_key
    if not api_key:
        return None

    base_url, model = {
        "gemini": (settings.gemini_base_url, settings.gemini_model),
        "openai": (settings.openai_base_url, settings.openai_model),
        "anthropic": (settings.anthropic_base_url, settings.anthropic_model),
    }[settings.llm_provider]

    config = LLMConfig(
        api_key=api_key,
        base_url=base_url,
        model=model,
        timeout_seconds=float(settings.llm_timeout_seconds),
    )
    return adapter(config=config, transport=transport)


def get_llm_client(request: Request) -> LanguageModelClient | None:
    """
    Dependency provider for the client built in `create_app`.

    Returns None when the credential was missing at startup; the route raises
    ConfigError only after the request body has been validated.
    """

    return getattr(request.app.state, "llm_client", None)
