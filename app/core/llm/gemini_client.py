from __future__ import annotations

from typing import Any

from app.core.llm.base import HttpLanguageModelClient


class GeminiClient(HttpLanguageModelClient):
    """Google Gemini `generateContent` adapter.

    The key travels in the `x-goog-api-key` header rather than the `?key=` query
    parameter so it never shows up in URL-based access logs.
    """

    provider = "gemini"

    def _url(self) -> str:
        return f"{self._config.base_url.rstrip('/')}/models/{self._config.model}:generateContent"

    def _headers(self) -> dict[str, str]:
        return {
            "x-goog-api-key": self._config.api_key,
            "Content-Type": "application/json",
        }

    def _payload(self, prompt: str) -> dict[str, Any]:
        return {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": 0,
                "responseMimeType": "application/json",
            },
        }

    def _extract_text(self, data: Any) -> str:
        return data["candidates"][0]["content"]["parts"][0]["text"]
