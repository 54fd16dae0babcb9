"""
Map application errors to `{"error": "..."}` JSON bodies.

Every non-2xx response has the same shape so the browser client only needs to read
`error`. Provider and parse failures collapse into one generic message; details go
to the server log only.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.llm.base import LLMTimeoutError, LLMUpstreamError
from app.corrections.schemas import SUPPORTED_LANGUAGES, SUPPORTED_TONES
from app.domain.exceptions import ConfigError, InputValidationError, ResponseParseError

logger = logging.getLogger("app.errors")

INVALID_AI_RESPONSE = "Invalid AI response"
AI_TIMEOUT = "AI provider timed out"
SENTENCE_REQUIRED = "Sentence is required"
INVALID_BODY = "Invalid request body"
INTERNAL_ERROR = "Internal server error"


def _request_meta(request: Request, status_code: int) -> dict[str, Any]:
    # Metadata only: no body, no query string.
    return {
        "request_id": getattr(request.state, "request_id", None)
        or request.headers.get("X-Request-ID"),
        "http_method": request.method,
        "request_path": request.url.path,
        "status_code": status_code,
    }


def _error(status_code: int, message: str, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


def validation_message(errors: list[dict[str, Any]]) -> str:
    """Pick the user-facing message for the first body validation error."""

    if not errors:
        return INVALID_BODY

    first = errors[0]
    loc = tuple(first.get("loc", ()))
    if first.get("type") == "json_invalid":
        return INVALID_BODY

    field = loc[1] if len(loc) > 1 and loc[0] == "body" else None
    # A missing body, or one that is not a JSON object, has no sentence either.
    if field == "sentence" or (
        loc == ("body",) and first.get("type") in {"missing", "model_attributes_type"}
    ):
        return SENTENCE_REQUIRED
    if field == "language":
        return f"Invalid language. Supported values: {', '.join(SUPPORTED_LANGUAGES)}."
    if field == "tone":
        return f"Invalid tone. Supported values: {', '.join(SUPPORTED_TONES)}."
    return INVALID_BODY


def register_exception_handlers(app: FastAPI) -> None:
    """Register application exception handlers."""

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        # Pydantic error entries echo the offending input; log the error types only.
        logger.info(
            "Request validation failed",
            extra={
                **_request_meta(request, status.HTTP_400_BAD_REQUEST),
                "error": ",".join(str(e.get("type")) for e in exc.errors()),
            },
        )
        return _error(status.HTTP_400_BAD_REQUEST, validation_message(list(exc.errors())))

    @app.exception_handler(InputValidationError)
    async def handle_input_validation_error(
        request: Request, exc: InputValidationError
    ) -> JSONResponse:
        logger.info(
            "Input validation failed",
            extra={**_request_meta(request, status.HTTP_400_BAD_REQUEST), "error": exc.message},
        )
        return _error(status.HTTP_400_BAD_REQUEST, exc.message)

    @app.exception_handler(ConfigError)
    async def handle_config_error(request: Request, exc: ConfigError) -> JSONResponse:
        logger.error(
            "Server misconfiguration",
            extra={
                **_request_meta(request, status.HTTP_500_INTERNAL_SERVER_ERROR),
                "error": f"missing {exc.env_var}",
            },
        )
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, exc.message)

    @app.exception_handler(LLMTimeoutError)
    async def handle_llm_timeout(request: Request, exc: LLMTimeoutError) -> JSONResponse:
        logger.warning(
            "AI provider timed out",
            extra={**_request_meta(request, status.HTTP_504_GATEWAY_TIMEOUT), "error": str(exc)},
        )
        return _error(status.HTTP_504_GATEWAY_TIMEOUT, AI_TIMEOUT)

    @app.exception_handler(LLMUpstreamError)
    async def handle_llm_upstream_error(request: Request, exc: LLMUpstreamError) -> JSONResponse:
        logger.warning(
            "AI provider call failed",
            extra={
                **_request_meta(request, status.HTTP_500_INTERNAL_SERVER_ERROR),
                "error": str(exc),
            },
        )
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, INVALID_AI_RESPONSE)

    @app.exception_handler(ResponseParseError)
    async def handle_response_parse_error(
        request: Request, exc: ResponseParseError
    ) -> JSONResponse:
        # The raw provider text was already logged (truncated) by the service.
        logger.warning(
            "Invalid AI response",
            extra={
                **_request_meta(request, status.HTTP_500_INTERNAL_SERVER_ERROR),
                "error": exc.kind,
            },
        )
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, INVALID_AI_RESPONSE)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        # Keep headers such as `Allow` on 405 responses.
        return _error(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        # Served by Starlette's outermost error middleware, which re-raises afterwards;
        # HttpLoggingMiddleware has already logged the stack trace.
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR)
