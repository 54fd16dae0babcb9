from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request, status

from app.core.llm.base import LanguageModelClient
from app.core.llm.deps import get_llm_client
from app.core.settings import Settings
from app.corrections.schemas import CorrectionRequest, CorrectionResult, ErrorOut
from app.corrections.service import CorrectionService
from app.domain.exceptions import ConfigError, InputValidationError

router = APIRouter(prefix="/api", tags=["corrections"])
logger = logging.getLogger("app.corrections")

_ERROR_RESPONSES = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorOut, "description": "Invalid request body."},
    status.HTTP_405_METHOD_NOT_ALLOWED: {"model": ErrorOut, "description": "Only POST is allowed."},
    status.HTTP_500_INTERNAL_SERVER_ERROR: {
        "model": ErrorOut,
        "description": "Server misconfiguration or invalid AI response.",
    },
    status.HTTP_504_GATEWAY_TIMEOUT: {"model": ErrorOut, "description": "AI provider timed out."},
}


@router.post(
    "/improve",
    response_model=CorrectionResult,
    responses=_ERROR_RESPONSES,
    summary="Correct a sentence",
)
async def improve_sentence(
    payload: CorrectionRequest,
    request: Request,
    llm_client: LanguageModelClient | None = Depends(get_llm_client),
) -> CorrectionResult:
    """
    Correct `sentence` in `language` with the requested `tone`.

    Returns the corrected sentence, an explanation and up to five alternatives.
    A sentence that is not in `language` yields `corrected=""`, an explanation
    saying so, and no alternatives.
    """

    settings: Settings = request.app.state.settings
    request_id = getattr(request.state, "request_id", None) or request.headers.get("X-Request-ID")

    if len(payload.sentence) > settings.max_sentence_chars:
        raise InputValidationError("Sentence is too long")

    if llm_client is None:
        logger.error(
            "Sentence correction failed (LLM not configured)",
            extra={"request_id": request_id, "provider": settings.llm_provider},
        )
        raise ConfigError(env_var=settings.llm_api_key_env_var)

    svc = CorrectionService(
        llm_client=llm_client,
        max_alternatives=settings.max_alternatives,
        min_guard_length=settings.language_guard_min_chars,
        log_raw_chars=settings.log_raw_response_chars,
    )
    return await svc.improve(payload, request_id=request_id)
