from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

import httpx


class LLMError(Exception):
    """Base error for provider client failures."""


class LLMUpstreamError(LLMError):
    """Raised when the provider call fails or returns an unexpected response."""


class LLMTimeoutError(LLMUpstreamError):
    """Raised when the provider does not answer within the configured timeout."""


class LanguageModelClient(Protocol):
    provider: str

    async def complete(self, *, prompt: str) -> str: ...


@dataclass(frozen=True)
class LLMConfig:
    api_key: str
    base_url: str
    model: str
    timeout_seconds: float


class HttpLanguageModelClient:
    """
    Shared plumbing for providers reached with a single JSON POST.

    Subclasses describe the wire format (`_url`, `_headers`, `_payload`, `_extract_text`);
    this class owns the timeout, the error mapping and the response decoding.
    The raw completion text is returned as-is; normalizing it is the caller's job.
    """

    provider = "unknown"

    def __init__(
        self,
        *,
        config: LLMConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._config = config
        # Injected by tests (httpx.MockTransport); None means a real network transport.
        self._transport = transport

    def _url(self) -> str:
        raise NotImplementedError

    def _headers(self) -> dict[str, str]:
        raise NotImplementedError

    def _payload(self, prompt: str) -> dict[str, Any]:
        raise NotImplementedError

    def _extract_text(self, data: Any) -> str:
        raise NotImplementedError

    async def complete(self, *, prompt: str) -> str:
        try:
            async with httpx.AsyncClient(
                timeout=self._config.timeout_seconds, transport=self._transport
            ) as client:
                resp = await client.post(
                    self._url(), headers=self._headers(), json=self._payload(prompt)
                )
        except httpx.TimeoutException as exc:
            raise LLMTimeoutError(f"{self.provider} request timed out") from exc
        except httpx.HTTPError as exc:
            raise LLMUpstreamError(f"{self.provider} request failed") from exc

        if resp.status_code != 200:
            # Upstream error bodies stay server-side; the edge maps this to a generic message.
            raise LLMUpstreamError(f"{self.provider} returned HTTP {resp.status_code}")

        try:
            text = self._extract_text(resp.json())
        except (ValueError, KeyError, IndexError, TypeError, AttributeError) as exc:
            raise LLMUpstreamError(f"{self.provider} response had an unexpected shape") from exc

        if not isinstance(text, str) or not text.strip():
            raise LLMUpstreamError(f"No response from {self.provider}")

        return text
