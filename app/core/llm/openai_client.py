from __future__ import annotations

from typing import Any

from app.core.llm.base import HttpLanguageModelClient


class OpenAIClient(HttpLanguageModelClient):
    """
    OpenAI chat-completions adapter (also works for OpenAI-compatible endpoints).

    Deterministic generation (temperature=0); the API is asked for a JSON object but
    the reply is still returned as raw text and validated by the normalizer.
    """

    provider = "openai"

    def _url(self) -> str:
        return f"{self._config.base_url.rstrip('/')}/chat/completions"

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._config.api_key}",
            "Content-Type": "application/json",
        }

    def _payload(self, prompt: str) -> dict[str, Any]:
        return {
            "model": self._config.model,
            "temperature": 0,
            "messages": [{"role": "user", "content": prompt}],
            "response_format": {"type": "json_object"},
        }

    def _extract_text(self, data: Any) -> str:
        return data["choices"][0]["message"]["content"]
