from __future__ import annotations

import pytest

from app.core.settings import Settings

_PROVIDER_ENV_VARS = (
    "LLM_PROVIDER",
    "LLM_TIMEOUT_SECONDS",
    "GEMINI_API_KEY",
    "OPENAI_API_KEY",
    "ANTHROPIC_API_KEY",
    "MAX_SENTENCE_CHARS",
    "MAX_ALTERNATIVES",
    "LANGUAGE_GUARD_MIN_CHARS",
    "LOG_RAW_RESPONSE_CHARS",
)


@pytest.fixture(autouse=True)
def _isolate_settings_env(monkeypatch: pytest.MonkeyPatch) -> None:
    # Developer shells often export real provider keys; tests must never see them.
    for name in _PROVIDER_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # Settings are cached via @lru_cache; clear so each test reads the cleaned env.
    from app.core.settings import get_settings

    get_settings.cache_clear()


@pytest.fixture
def make_settings():
    def _make(**overrides) -> Settings:
        return Settings(_env_file=None, **overrides)

    return _make


@pytest.fixture
def client(make_settings):
    from fastapi.testclient import TestClient

    from app.main import create_app

    app = create_app(make_settings())
    with TestClient(app) as c:
        yield c
