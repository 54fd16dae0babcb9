from __future__ import annotations

from typing import Any

from app.core.llm.base import HttpLanguageModelClient

ANTHROPIC_VERSION = "2023-06-01"


class AnthropicClient(HttpLanguageModelClient):
    provider = "anthropic"

    max_tokens = 1024

    def _url(self) -> str:
        return f"{self._config.base_url.rstrip('/')}/messages"

    def _headers(self) -> dict[str, str]:
        return {
            "x-api-key": self._config.api_key,
            "anthropic-version": ANTHROPIC_VERSION,
            "Content-Type": "application/json",
        }

    def _payload(self, prompt: str) -> dict[str, Any]:
        return {
            "model": self._config.model,
            "max_tokens": self.max_tokens,
            "temperature": 0,
            "messages": [{"role": "user", "content": prompt}],
        }

    def _extract_text(self, data: Any) -> str:
        # Content is a list of typed blocks; only text blocks carry the completion.
        texts = [
            block["text"]
            for block in data["content"]
            if isinstance(block, dict) and block.get("type") == "text"
        ]
        return "".join(texts)
