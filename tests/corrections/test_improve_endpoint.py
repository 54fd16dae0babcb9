from __future__ import annotations

import logging

import pytest
from fastapi.testclient import TestClient

from app.core.llm.base import LLMTimeoutError, LLMUpstreamError
from app.core.llm.deps import get_llm_client
from app.main import create_app
from tests.corrections._helpers import FakeLLMClient, provider_json

IMPROVE_URL = "/api/improve"


@pytest.fixture
def fake_llm() -> FakeLLMClient:
    return FakeLLMClient()


@pytest.fixture
def improve_client(make_settings, fake_llm: FakeLLMClient) -> TestClient:
    app = create_app(make_settings())
    app.dependency_overrides[get_llm_client] = lambda: fake_llm
    with TestClient(app) as c:
        yield c


def _body(**overrides) -> dict:
    body = {"sentence": "I has a apple.", "language": "English", "tone": "neutral"}
    body.update(overrides)
    return body


def test_improve_success(improve_client: TestClient, fake_llm: FakeLLMClient) -> None:
    res = improve_client.post(IMPROVE_URL, json=_body(tone="formal"))

    assert res.status_code == 200, res.text
    assert "X-Request-ID" in res.headers
    assert res.json() == {
        "corrected": "I have an apple.",
        "explanation": "'has' becomes 'have' after 'I'.",
        "alternatives": ["I've got an apple."],
    }
    assert len(fake_llm.prompts) == 1
    assert "formal tone" in fake_llm.prompts[0]


def test_language_and_tone_default_when_omitted(
    improve_client: TestClient, fake_llm: FakeLLMClient
) -> None:
    res = improve_client.post(IMPROVE_URL, json={"sentence": "I has a apple."})

    assert res.status_code == 200, res.text
    assert "naturally in English with a neutral tone" in fake_llm.prompts[0]


@pytest.mark.parametrize(
    "body",
    [
        {"language": "English", "tone": "neutral"},
        {"sentence": "", "language": "English", "tone": "neutral"},
        {"sentence": "   ", "language": "English", "tone": "neutral"},
        {"sentence": 42, "language": "English", "tone": "neutral"},
        {"sentence": None},
        {},
    ],
)
def test_missing_or_empty_sentence_returns_400_without_provider_call(
    improve_client: TestClient, fake_llm: FakeLLMClient, body: dict
) -> None:
    res = improve_client.post(IMPROVE_URL, json=body)

    assert res.status_code == 400
    assert res.json() == {"error": "Sentence is required"}
    assert fake_llm.prompts == []


def test_no_body_returns_400(improve_client: TestClient, fake_llm: FakeLLMClient) -> None:
    res = improve_client.post(IMPROVE_URL)

    assert res.status_code == 400
    assert res.json() == {"error": "Sentence is required"}
    assert fake_llm.prompts == []


def test_malformed_json_returns_400(improve_client: TestClient, fake_llm: FakeLLMClient) -> None:
    res = improve_client.post(
        IMPROVE_URL,
        content=b'{"sentence": "oops",',
        headers={"Content-Type": "application/json"},
    )

    assert res.status_code == 400
    assert res.json() == {"error": "Invalid request body"}
    assert fake_llm.prompts == []


def test_unsupported_language_returns_400(improve_client: TestClient) -> None:
    res = improve_client.post(IMPROVE_URL, json=_body(language="French"))

    assert res.status_code == 400
    assert res.json() == {"error": "Invalid language. Supported values: English, Spanish."}


def test_unsupported_tone_returns_400(improve_client: TestClient) -> None:
    res = improve_client.post(IMPROVE_URL, json=_body(tone="angry"))

    assert res.status_code == 400
    assert res.json() == {"error": "Invalid tone. Supported values: neutral, formal, casual."}


def test_too_long_sentence_returns_400(make_settings, fake_llm: FakeLLMClient) -> None:
    app = create_app(make_settings(max_sentence_chars=20))
    app.dependency_overrides[get_llm_client] = lambda: fake_llm
    with TestClient(app) as client:
        res = client.post(IMPROVE_URL, json=_body(sentence="This sentence is far too long."))

    assert res.status_code == 400
    assert res.json() == {"error": "Sentence is too long"}
    assert fake_llm.prompts == []


@pytest.mark.parametrize("method", ["get", "put", "delete", "patch"])
def test_non_post_methods_return_405(
    improve_client: TestClient, fake_llm: FakeLLMClient, method: str
) -> None:
    res = getattr(improve_client, method)(IMPROVE_URL)

    assert res.status_code == 405
    assert "error" in res.json()
    assert "POST" in res.headers.get("allow", "")
    assert fake_llm.prompts == []


def test_missing_api_key_returns_500(client: TestClient) -> None:
    res = client.post(IMPROVE_URL, json=_body())

    assert res.status_code == 500
    assert res.json() == {
        "error": "API key not configured. Please set GEMINI_API_KEY environment variable."
    }


def test_missing_api_key_names_selected_provider(make_settings) -> None:
    app = create_app(make_settings(llm_provider="anthropic"))
    with TestClient(app) as client:
        res = client.post(IMPROVE_URL, json=_body())

    assert res.status_code == 500
    assert "ANTHROPIC_API_KEY" in res.json()["error"]


def test_empty_sentence_checked_before_api_key(client: TestClient) -> None:
    res = client.post(IMPROVE_URL, json=_body(sentence=""))
    assert res.status_code == 400


def test_unparsable_provider_output_returns_generic_500(
    make_settings, caplog: pytest.LogCaptureFixture
) -> None:
    caplog.set_level(logging.INFO, logger="app.corrections")
    fake = FakeLLMClient("Sorry, I can't do that. SECRET-INTERNAL-NOTE")
    app = create_app(make_settings())
    app.dependency_overrides[get_llm_client] = lambda: fake
    with TestClient(app) as client:
        res = client.post(IMPROVE_URL, json=_body())

    assert res.status_code == 500
    assert res.json() == {"error": "Invalid AI response"}
    assert "SECRET-INTERNAL-NOTE" not in res.text

    # The raw text is retained server-side only.
    records = [r for r in caplog.records if r.name == "app.corrections"]
    failed = [r for r in records if getattr(r, "outcome", None) == "failed"]
    assert len(failed) == 1
    assert "SECRET-INTERNAL-NOTE" in failed[0].__dict__["raw_response"]


def test_invalid_shape_returns_generic_500(make_settings) -> None:
    fake = FakeLLMClient('{"corrected": 1, "explanation": "x", "alternatives": []}')
    app = create_app(make_settings())
    app.dependency_overrides[get_llm_client] = lambda: fake
    with TestClient(app) as client:
        res = client.post(IMPROVE_URL, json=_body())

    assert res.status_code == 500
    assert res.json() == {"error": "Invalid AI response"}


def test_provider_failure_returns_generic_500(make_settings) -> None:
    fake = FakeLLMClient(error=LLMUpstreamError("gemini returned HTTP 429"))
    app = create_app(make_settings())
    app.dependency_overrides[get_llm_client] = lambda: fake
    with TestClient(app) as client:
        res = client.post(IMPROVE_URL, json=_body())

    assert res.status_code == 500
    assert res.json() == {"error": "Invalid AI response"}


def test_provider_timeout_returns_504(make_settings) -> None:
    fake = FakeLLMClient(error=LLMTimeoutError("gemini request timed out"))
    app = create_app(make_settings())
    app.dependency_overrides[get_llm_client] = lambda: fake
    with TestClient(app) as client:
        res = client.post(IMPROVE_URL, json=_body())

    assert res.status_code == 504
    assert res.json() == {"error": "AI provider timed out"}


def test_fenced_provider_output_is_normalized(make_settings) -> None:
    fake = FakeLLMClient(f"```json\n{provider_json()}\n```")
    app = create_app(make_settings())
    app.dependency_overrides[get_llm_client] = lambda: fake
    with TestClient(app) as client:
        res = client.post(IMPROVE_URL, json=_body())

    assert res.status_code == 200
    assert res.json()["corrected"] == "I have an apple."


def test_seven_alternatives_truncated_to_five(make_settings) -> None:
    fake = FakeLLMClient(provider_json(alternatives=[f"alt {i}" for i in range(7)]))
    app = create_app(make_settings())
    app.dependency_overrides[get_llm_client] = lambda: fake
    with TestClient(app) as client:
        res = client.post(IMPROVE_URL, json=_body())

    assert res.status_code == 200
    assert len(res.json()["alternatives"]) == 5


def test_wrong_language_returns_rejection_sentinel(
    improve_client: TestClient, fake_llm: FakeLLMClient
) -> None:
    res = improve_client.post(
        IMPROVE_URL, json=_body(sentence="Hola, ¿cómo estás hoy?", language="English")
    )

    assert res.status_code == 200
    assert res.json() == {
        "corrected": "",
        "explanation": "Your sentence doesn't look like English. Please try again.",
        "alternatives": [],
    }
    # The provider is still called exactly once per request.
    assert len(fake_llm.prompts) == 1


def test_successful_request_logs_outcome_without_sentence(
    improve_client: TestClient, caplog: pytest.LogCaptureFixture
) -> None:
    caplog.set_level(logging.INFO, logger="app.corrections")
    res = improve_client.post(
        IMPROVE_URL, json=_body(), headers={"X-Request-ID": "req_fix_001"}
    )
    assert res.status_code == 200

    records = [r for r in caplog.records if r.name == "app.corrections"]
    assert len(records) == 1
    assert records[0].__dict__["outcome"] == "corrected"
    assert records[0].__dict__["request_id"] == "req_fix_001"
    assert records[0].__dict__["provider"] == "fake"
    assert "I has a apple." not in records[0].getMessage()


@pytest.mark.parametrize("body", [[], "just a string", 42])
def test_non_object_body_returns_sentence_required(
    improve_client: TestClient, fake_llm: FakeLLMClient, body
) -> None:
    res = improve_client.post(IMPROVE_URL, json=body)

    assert res.status_code == 400
    assert res.json() == {"error": "Sentence is required"}
    assert fake_llm.prompts == []


def test_deeply_nested_provider_output_returns_json_500(
    make_settings, caplog: pytest.LogCaptureFixture
) -> None:
    caplog.set_level(logging.INFO, logger="app.corrections")
    fake = FakeLLMClient("[" * 100_000)
    app = create_app(make_settings())
    app.dependency_overrides[get_llm_client] = lambda: fake
    with TestClient(app) as client:
        res = client.post(IMPROVE_URL, json=_body())

    assert res.status_code == 500
    assert res.headers["content-type"].startswith("application/json")
    assert res.json() == {"error": "Invalid AI response"}

    failed = [
        r
        for r in caplog.records
        if r.name == "app.corrections" and getattr(r, "outcome", None) == "failed"
    ]
    assert len(failed) == 1
    assert failed[0].__dict__["raw_response"].startswith("[[[")


def test_unexpected_error_returns_json_500(make_settings) -> None:
    fake = FakeLLMClient(error=RuntimeError("bug in adapter"))
    app = create_app(make_settings())
    app.dependency_overrides[get_llm_client] = lambda: fake
    with TestClient(app, raise_server_exceptions=False) as client:
        res = client.post(IMPROVE_URL, json=_body())

    assert res.status_code == 500
    assert res.headers["content-type"].startswith("application/json")
    assert res.json() == {"error": "Internal server error"}
    assert "bug in adapter" not in res.text
