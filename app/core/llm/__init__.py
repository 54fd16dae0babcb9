"""LLM integration layer.

Kept small on purpose:
- One capability (`LanguageModelClient.complete`) with one adapter per provider.
- Configured explicitly from `Settings`; adapters never read the environment.
- No prompt/output logging here; callers decide what is safe to log.
"""

from app.core.llm.base import (
    LanguageModelClient,
    LLMError,
    LLMTimeoutError,
    LLMUpstreamError,
)
from app.core.llm.deps import build_llm_client

__all__ = [
    "LanguageModelClient",
    "LLMError",
    "LLMTimeoutError",
    "LLMUpstreamError",
    "build_llm_client",
]
