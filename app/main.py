from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.openapi.docs import get_redoc_html

from app.api.exception_handlers import register_exception_handlers
from app.api.schemas import HealthOut
from app.core.llm.deps import build_llm_client
from app.core.logging import setup_logging
from app.core.metrics import PrometheusMetricsMiddleware, metrics_router
from app.core.middleware.http_logging import HttpLoggingMiddleware
from app.core.settings import Settings, get_settings
from app.corrections.router import router as corrections_router

setup_logging()

logger = logging.getLogger("app.startup")


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Build the application.

    Settings are resolved once here and the provider client is built from them;
    request handlers only read `app.state`, never the environment.
    """

    settings = settings or get_settings()

    app = FastAPI(
        title="Sentence Fixer API",
        description=(
            "Corrects a sentence in English or Spanish with the requested tone by relaying it "
            "to a large-language-model provider.\n\n"
            "Design principles:\n"
            "- Stateless: one request, one provider call, nothing stored.\n"
            "- Provider output is untrusted and normalized into a fixed response shape.\n"
            "- Errors are always `{\"error\": \"...\"}`; provider details stay in server logs."
        ),
        docs_url="/swagger",
        redoc_url=None,  # custom ReDoc page at /docs
        openapi_tags=[
            {
                "name": "health",
                "description": "Basic uptime check for load balancers and monitoring.",
            },
            {
                "name": "corrections",
                "description": "Sentence correction with explanation and alternatives.",
            },
            {
                "name": "metrics",
                "description": "Prometheus-compatible metrics endpoint.",
            },
        ],
    )

    app.state.settings = settings
    app.state.llm_client = build_llm_client(settings)
    if app.state.llm_client is None:
        # Start anyway so /health works; /api/improve answers with a 500 until configured.
        logger.warning(
            "LLM provider API key not configured",
            extra={"provider": settings.llm_provider, "error": settings.llm_api_key_env_var},
        )

    app.add_middleware(PrometheusMetricsMiddleware)
    app.add_middleware(HttpLoggingMiddleware)

    register_exception_handlers(app)

    @app.get("/docs", include_in_schema=False)
    async def redoc_docs():
        return get_redoc_html(
            openapi_url=app.openapi_url or "/openapi.json",
            title=f"{app.title} - ReDoc",
            redoc_js_url="https://cdn.jsdelivr.net/npm/redoc@2.1.4/bundles/redoc.standalone.js",
        )

    @app.get(
        "/health",
        response_model=HealthOut,
        tags=["health"],
        summary="Health check",
        description=(
            "Lightweight endpoint to verify the API process is running.\n\n"
            "Does not call the LLM provider; `llm_configured` only reports whether an API key "
            "was present at startup."
        ),
    )
    async def health() -> HealthOut:
        return HealthOut(
            status="ok",
            provider=settings.llm_provider,
            llm_configured=app.state.llm_client is not None,
        )

    app.include_router(metrics_router)
    app.include_router(corrections_router)
    return app


app = create_app()
