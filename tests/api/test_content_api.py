"""Tests for the content, plan and query HTTP endpoints.

Tests cover:
- Auth gate (401 without token)
- Per-type generation endpoints and their response shapes
- Error rendering: quota 403 with current/limit, missing source 400, generation 500
- Allowance and plan info
- Read and delete by id, ownership enforced
"""

import pytest
from httpx import ASGITransport, AsyncClient

from studykit.api.deps import get_registry
from studykit.core.auth import AuthUser, require_auth
from studykit.domain.plans import PlanTier
from studykit.main import app
from studykit.providers.fake import TextGeneratorFake

pytestmark = pytest.mark.integration


def override_auth(user: AuthUser):
    """Create auth override for a specific user."""

    async def _override():
        return user

    return _override


@pytest.fixture
def user_a():
    return AuthUser(user_id="user_api_a", claims={"sub": "user_api_a"})


@pytest.fixture
def user_b():
    return AuthUser(user_id="user_api_b", claims={"sub": "user_api_b"})


@pytest.fixture
def wired_app(session_factory, registry):
    """The app with a test database on app.state and the fake-backed registry."""
    app.state.session_factory = session_factory
    app.dependency_overrides[get_registry] = lambda: registry
    yield app
    app.dependency_overrides.clear()
    app.state.session_factory = None


@pytest.fixture
async def client(wired_app, user_a):
    wired_app.dependency_overrides[require_auth] = override_auth(user_a)
    async with AsyncClient(transport=ASGITransport(app=wired_app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def query_id(client):
    response = await client.post("/api/queries", json={"queryText": "How does photosynthesis work?", "topic": "Photosynthesis"})
    assert response.status_code == 201
    return response.json()["id"]


async def _article(client, query_id) -> str:
    response = await client.post("/api/content/article", json={"queryId": query_id})
    assert response.status_code == 200
    return response.json()["articleId"]


async def test_requires_auth(wired_app):
    async with AsyncClient(transport=ASGITransport(app=wired_app), base_url="http://test") as ac:
        response = await ac.post("/api/content/article", json={"queryId": "q"})

    assert response.status_code == 401
    assert "debug_id" in response.json()


async def test_article_then_cached(client, query_id):
    first = await client.post("/api/content/article", json={"queryId": query_id})
    second = await client.post("/api/content/article", json={"queryId": query_id})

    assert first.json()["success"] is True
    assert first.json()["cached"] is False
    assert second.json() == {"success": True, "articleId": first.json()["articleId"], "cached": True}

    query = await client.get(f"/api/queries/{query_id}")
    assert query.json()["status"] == "completed"


async def test_presentation_response_shape(client, query_id):
    await _article(client, query_id)

    body = (await client.post("/api/content/presentation", json={"queryId": query_id})).json()

    assert body["success"] is True
    assert body["slideCount"] == 3
    assert body["degraded"] is False
    assert body["cached"] is False


async def test_presentation_degraded_when_llm_fails(client, query_id, make_registry):
    await _article(client, query_id)
    app.dependency_overrides[get_registry] = lambda: make_registry(TextGeneratorFake(scenario="llm_failure"))

    body = (await client.post("/api/content/presentation", json={"queryId": query_id})).json()

    assert body["degraded"] is True
    assert body["slideCount"] == 3


async def test_quiz_and_flashcards(client, query_id):
    await _article(client, query_id)

    quiz = (await client.post("/api/content/quiz/generate", json={"queryId": query_id, "numQuestions": 5})).json()
    deck = (await client.post("/api/content/flashcards", json={"queryId": query_id, "cardCount": 10})).json()

    assert quiz["setNumber"] == 1
    assert quiz["questionCount"] == 3
    assert deck["cardCount"] == 2


async def test_diagrams_and_concept_map(client, query_id):
    await _article(client, query_id)

    diagrams = (await client.post("/api/content/diagrams", json={"queryId": query_id, "count": 1})).json()
    concept_map = (await client.post("/api/content/concept-map", json={"queryId": query_id})).json()

    assert diagrams["diagramCount"] == 1
    assert concept_map["conceptMap"]["mainTopic"] == "Photosynthesis"


async def test_missing_source_is_400(client, query_id):
    response = await client.post("/api/content/flashcards", json={"queryId": query_id})

    assert response.status_code == 400
    assert "Article not found" in response.json()["error"]


async def test_quota_refusal_is_403_with_counts(client, query_id):
    article_id = await _article(client, query_id)

    first = await client.post("/api/content/audio/generate", json={"queryId": query_id, "contentId": article_id})
    second = await client.post("/api/content/audio/generate", json={"queryId": query_id, "contentId": article_id})

    assert first.status_code == 200
    assert first.json()["audioUrl"].startswith("https://audio.test/")
    assert first.json()["truncated"] is False
    assert second.status_code == 403
    body = second.json()
    assert (body["current"], body["limit"]) == (1, 1)
    assert "Upgrade to Pro" in body["error"]
    assert "debug_id" in body


async def test_generation_failure_is_500_retryable(client, query_id, make_registry):
    await _article(client, query_id)
    app.dependency_overrides[get_registry] = lambda: make_registry(TextGeneratorFake(scenario="llm_failure"))

    response = await client.post("/api/content/quiz/generate", json={"queryId": query_id})

    assert response.status_code == 500
    assert response.json()["retryable"] is True
    assert response.json()["error"] == "Failed to generate quiz. Please try again."


async def test_foreign_query_is_403(client, query_id, user_b):
    app.dependency_overrides[require_auth] = override_auth(user_b)

    response = await client.post("/api/content/article", json={"queryId": query_id})

    assert response.status_code == 403


async def test_allowance(client, query_id):
    await _article(client, query_id)
    await client.post("/api/content/quiz/generate", json={"queryId": query_id})

    body = (await client.get(f"/api/content/allowance/{query_id}")).json()

    assert body["plan"] == "free"
    assert body["quizzes"] == {"used": 1, "limit": 1, "remaining": 0}
    assert body["audioOnDemand"] is False


async def test_user_plan(client, plans, user_a):
    await plans.set_tier(user_a.user_id, PlanTier.PRO)

    body = (await client.get("/api/user/plan")).json()

    assert body["plan"] == "pro"
    assert body["features"]["audioOnDemand"] is True


async def test_get_and_delete_content(client, query_id, user_b):
    article_id = await _article(client, query_id)

    body = (await client.get(f"/api/content/{article_id}")).json()
    assert body["id"] == article_id
    assert body["queryId"] == query_id
    assert body["contentType"] == "article"
    assert body["payload"]["text"]

    app.dependency_overrides[require_auth] = override_auth(user_b)
    assert (await client.delete(f"/api/content/{article_id}")).status_code == 403

    app.dependency_overrides[require_auth] = override_auth(AuthUser(user_id="user_api_a", claims={}))
    assert (await client.delete(f"/api/content/{article_id}")).json() == {"success": True}
    assert (await client.get(f"/api/content/{article_id}")).status_code == 404


async def test_delete_query_removes_content(client, query_id):
    article_id = await _article(client, query_id)

    assert (await client.delete(f"/api/queries/{query_id}")).status_code == 200
    assert (await client.get(f"/api/content/{article_id}")).status_code == 404


async def test_health(client):
    assert (await client.get("/api/health")).json()["status"] == "healthy"
    ready = await client.get("/api/ready")
    assert ready.status_code == 200
    assert ready.json()["checks"] == {"database": True}


async def test_request_id_is_echoed(client):
    response = await client.get("/api/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"


async def test_ready_without_database_is_503(client, wired_app):
    wired_app.state.session_factory = None

    response = await client.get("/api/ready")

    assert response.status_code == 503
    assert response.json()["checks"] == {"database": False}
