"""Tests for the web interface."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from articlebot.core.exceptions import InvalidInput
from articlebot.models.content import GenerationReport, RoundResult
from articlebot.web.app import create_app


def make_generator(report):
    generator = MagicMock()
    generator.generate = AsyncMock(return_value=report)
    return generator


@pytest.fixture
def success_report():
    return GenerationReport(
        requested=1,
        rounds=[
            RoundResult(
                index=1,
                success=True,
                title="📝 Tea",
                article_path="src/content/blog/a.md",
                image_path="public/covers/a.png",
                commit_sha="abc123",
            )
        ],
    )


def test_index_and_health(mock_settings):
    client = TestClient(create_app(mock_settings))

    index = client.get("/")
    assert index.status_code == 200
    assert "<form" in index.text

    health = client.get("/api/health").json()
    assert health["status"] == "healthy"
    assert health["api_keys"] == {"openai": True, "github": True}


def test_generate_success(mock_settings, success_report):
    seen = {}

    def factory(settings, request):
        seen["request"] = request
        return make_generator(success_report)

    client = TestClient(create_app(mock_settings, generator_factory=factory))
    response = client.post(
        "/api/generate",
        json={
            "prompt": "Tea",
            "tags": "tea, health",
            "affiliateLinks": ["https://a.example"],
            "numArticles": 1,
            "openaiKey": "sk-req",
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Generated 1 article(s) successfully"
    assert body["rounds"][0]["commit_sha"] == "abc123"

    request = seen["request"]
    assert request.tags == ["tea", "health"]
    assert request.affiliate_links == ["https://a.example"]
    assert request.openai_key == "sk-req"


def test_generate_invalid_input_returns_400(mock_settings):
    def factory(settings, request):
        raise InvalidInput("OpenAI API key not configured")

    client = TestClient(create_app(mock_settings, generator_factory=factory))
    response = client.post("/api/generate", json={"prompt": "Tea"})

    assert response.status_code == 400
    assert response.json() == {"error": "OpenAI API key not configured"}


def test_generate_failed_round_returns_500(mock_settings):
    report = GenerationReport(
        requested=2,
        rounds=[RoundResult(index=1, success=False, error="GenerationFailed: boom")],
    )
    client = TestClient(
        create_app(mock_settings, generator_factory=lambda s, r: make_generator(report))
    )

    response = client.post("/api/generate", json={"prompt": "Tea", "numArticles": 2})

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "Generated 0 of 2 article(s): round 1 failed: GenerationFailed: boom"
    assert body["rounds"][0]["success"] is False


def test_generate_unexpected_error_returns_500(mock_settings):
    generator = MagicMock()
    generator.generate = AsyncMock(side_effect=RuntimeError("exploded"))
    client = TestClient(
        create_app(mock_settings, generator_factory=lambda s, r: generator)
    )

    response = client.post("/api/generate", json={"prompt": "Tea"})

    assert response.status_code == 500
    assert response.json() == {"error": "exploded"}
