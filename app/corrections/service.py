from __future__ import annotations

import logging

from app.core.llm.base import LanguageModelClient, LLMError
from app.core.metrics import record_correction
from app.corrections.normalizer import normalize_provider_output
from app.corrections.prompt import build_correction_prompt
from app.corrections.schemas import MAX_ALTERNATIVES, CorrectionRequest, CorrectionResult
from app.domain.exceptions import ResponseParseError

logger = logging.getLogger("app.corrections")


class CorrectionService:
    """
    One inbound correction request -> one provider call -> one normalized result.

    Stateless apart from its collaborators; a new instance per request is fine.
    Sentences are never logged; unparsable provider output is logged as a
    truncated preview (`log_raw_chars`, 0 disables) for diagnostics.
    """

    def __init__(
        self,
        *,
        llm_client: LanguageModelClient,
        max_alternatives: int = MAX_ALTERNATIVES,
        min_guard_length: int = 10,
        log_raw_chars: int = 500,
    ):
        self._llm = llm_client
        self._max_alternatives = max_alternatives
        self._min_guard_length = min_guard_length
        self._log_raw_chars = log_raw_chars

    @property
    def provider(self) -> str:
        return getattr(self._llm, "provider", "unknown")

    async def improve(
        self, request: CorrectionRequest, *, request_id: str | None = None
    ) -> CorrectionResult:
        prompt = build_correction_prompt(
            sentence=request.sentence, language=request.language, tone=request.tone
        )
        log_extra = {
            "request_id": request_id,
            "provider": self.provider,
        }

        try:
            raw_text = await self._llm.complete(prompt=prompt)
        except LLMError as exc:
            record_correction(provider=self.provider, outcome="failed")
            logger.warning(
                "Provider call failed",
                extra={**log_extra, "outcome": "failed", "error": str(exc)},
            )
            raise

        try:
            result = normalize_provider_output(
                raw_text,
                request=request,
                max_alternatives=self._max_alternatives,
                min_guard_length=self._min_guard_length,
            )
        except ResponseParseError as exc:
            record_correction(provider=self.provider, outcome="failed")
            preview = exc.raw_text[: self._log_raw_chars] if self._log_raw_chars else None
            logger.warning(
                "Failed to parse AI response",
                extra={
                    **log_extra,
                    "outcome": "failed",
                    "error": f"{exc.kind}: {exc.message}",
                    "raw_response": preview,
                },
            )
            raise

        outcome = "rejected" if result.is_rejection else "corrected"
        record_correction(provider=self.provider, outcome=outcome)
        logger.info(
            "Sentence correction completed",
            extra={**log_extra, "outcome": outcome},
        )
        return result
