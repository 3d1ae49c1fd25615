"""Shared pytest fixtures for the media review service tests."""

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from fastapi.testclient import TestClient

PROVIDER_URL = "https://api.perplexity.ai/chat/completions"


# ============================================================================
# Payload helpers
# ============================================================================

def make_review_payload(**overrides):
    """Return a provider JSON body satisfying every required field."""
    payload = {
        "summary": "A young ninja chases recognition in his village while hiding a sealed demon.",
        "rating": "8.0/10 MyAnimeList",
        "genres": ["Action", "Adventure", "Fantasy"],
        "themes": ["Perseverance", "Friendship", "Belonging"],
        "strengths": ["Memorable cast", "Kinetic fights", "Strong early arcs"],
        "weaknesses": ["Long filler stretches", "Uneven final arc"],
        "consensus": "A beloved shonen classic whose later volumes lose some focus.",
        "detailed_review": "The early chapters balance humor and stakes well, but pacing sags later.",
        "spoilers": "",
    }
    payload.update(overrides)
    return payload


def make_completion(content, message_citations=None, completion_citations=None):
    """Build an object shaped like an OpenAI-compatible chat completion."""
    if not isinstance(content, str) and content is not None:
        content = json.dumps(content)
    message = SimpleNamespace(role="assistant", content=content, citations=message_citations)
    return SimpleNamespace(
        id="cmpl-test",
        choices=[SimpleNamespace(index=0, message=message, finish_reason="stop")],
        citations=completion_citations,
    )


def make_llm_client(*results):
    """Mock AsyncOpenAI client; each result is a completion or an exception to raise."""
    client = MagicMock()
    if len(results) == 1:
        outcome = results[0]
        if isinstance(outcome, BaseException):
            client.chat.completions.create = AsyncMock(side_effect=outcome)
        else:
            client.chat.completions.create = AsyncMock(return_value=outcome)
    else:
        client.chat.completions.create = AsyncMock(side_effect=list(results))
    return client


def provider_request():
    return httpx.Request("POST", PROVIDER_URL)


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def review_payload():
    return make_review_payload()


@pytest.fixture
def llm_client(review_payload):
    """Mock LLM client returning a well-formed review."""
    return make_llm_client(make_completion(review_payload))


@pytest.fixture
def api_client(monkeypatch, llm_client):
    """TestClient whose review service talks to the mocked LLM client."""
    from app.domains.media_review import router as router_module
    from app.domains.media_review.service import MediaReviewService
    from app.main import create_app

    monkeypatch.setattr(router_module, "_service", MediaReviewService(client=llm_client))
    with TestClient(create_app()) as client:
        yield client
