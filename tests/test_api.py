"""HTTP API tests against the ASGI app."""

import pytest
import pytest_asyncio
from asgi_lifespan import LifespanManager
from httpx import ASGITransport, AsyncClient

from odpsearch import __version__
from odpsearch.server import create_app

from .conftest import AGENTROLE_IRI, PARTICIPATION_IRI


@pytest_asyncio.fixture
async def client(make_settings, pattern_repo):
    app = create_app(make_settings(pattern_repo))
    async with LifespanManager(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac


@pytest_asyncio.fixture
async def indexed_client(client):
    response = await client.post("/index/rebuild")
    assert response.status_code == 200
    yield client


# ============ HEALTH ============


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["version"] == __version__


@pytest.mark.asyncio
async def test_root(client):
    response = await client.get("/")
    assert response.status_code == 200
    assert response.json()["search"] == "/search"


@pytest.mark.asyncio
async def test_not_ready_before_rebuild(client):
    response = await client.get("/ready")
    assert response.status_code == 503
    body = response.json()
    assert body["status"] == "not_ready"
    assert body["indices"] == {"term": "unavailable", "embedding": "unavailable"}


@pytest.mark.asyncio
async def test_ready_after_rebuild(indexed_client):
    response = await indexed_client.get("/ready")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ready"
    assert body["documents"] == 3


@pytest.mark.asyncio
async def test_request_id_header(client):
    response = await client.get("/health", headers={"x-request-id": "abc-123"})
    assert response.headers["x-request-id"] == "abc-123"
    assert "x-response-time-ms" in response.headers

    generated = await client.get("/health")
    assert generated.headers["x-request-id"]


# ============ INDEX ============


@pytest.mark.asyncio
async def test_rebuild_returns_plain_text(client):
    response = await client.post("/index/rebuild")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert response.text.startswith("Term index rebuilt in")


@pytest.mark.asyncio
async def test_rebuild_failure_is_500(make_settings, tmp_path):
    app = create_app(make_settings(tmp_path / "not-there"))
    async with LifespanManager(app):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            response = await ac.post("/index/rebuild")
    assert response.status_code == 500
    assert response.text.startswith("Index rebuild failed")


@pytest.mark.asyncio
async def test_indices_reloaded_on_restart(make_settings, pattern_repo):
    config = make_settings(pattern_repo)

    app = create_app(config)
    async with LifespanManager(app):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            assert (await ac.post("/index/rebuild")).status_code == 200

    restarted = create_app(config)
    async with LifespanManager(restarted):
        async with AsyncClient(transport=ASGITransport(app=restarted), base_url="http://test") as ac:
            response = await ac.get("/ready")
    assert response.status_code == 200
    assert response.json()["documents"] == 3


# ============ SEARCH ============


@pytest.mark.asyncio
async def test_search_post(indexed_client):
    response = await indexed_client.post(
        "/search", json={"query": "Which objects take part in a certain event?"}
    )
    assert response.status_code == 200
    body = response.json()
    assert body["total"] == len(body["results"])
    top = body["results"][0]
    assert top["pattern"]["id"] == PARTICIPATION_IRI
    assert top["confidence"] == pytest.approx(1.0)


@pytest.mark.asyncio
async def test_search_post_with_filters(indexed_client):
    response = await indexed_client.post(
        "/search",
        json={"query": "role event", "filters": {"category": "Organization"}, "limit": 5},
    )
    assert response.status_code == 200
    ids = [r["pattern"]["id"] for r in response.json()["results"]]
    assert ids == [AGENTROLE_IRI]


@pytest.mark.asyncio
async def test_search_get(indexed_client):
    response = await indexed_client.get("/search", params={"query": "agent role", "category": "Any"})
    assert response.status_code == 200
    assert response.json()["results"][0]["pattern"]["id"] == AGENTROLE_IRI


@pytest.mark.asyncio
async def test_empty_query_returns_no_results(indexed_client):
    response = await indexed_client.post("/search", json={"query": "  ?  "})
    assert response.status_code == 200
    assert response.json() == {"query": "  ?  ", "results": [], "total": 0}


@pytest.mark.asyncio
async def test_search_validation_error(indexed_client):
    response = await indexed_client.post("/search", json={"limit": 5})
    assert response.status_code == 422


# ============ PATTERNS ============


@pytest.mark.asyncio
async def test_pattern_detail(indexed_client):
    response = await indexed_client.get("/patterns/detail", params={"iri": AGENTROLE_IRI})
    assert response.status_code == 200
    assert response.json()["name"] == "Agent Role"


@pytest.mark.asyncio
async def test_pattern_detail_not_found(indexed_client):
    response = await indexed_client.get("/patterns/detail", params={"iri": "http://example.org/x.owl"})
    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Pattern not found: http://example.org/x.owl"}


@pytest.mark.asyncio
async def test_list_patterns(indexed_client):
    response = await indexed_client.get("/patterns", params={"category": "Event"})
    body = response.json()
    assert body["total"] == 1
    assert body["patterns"][0]["id"] == PARTICIPATION_IRI


@pytest.mark.asyncio
async def test_categories(indexed_client):
    response = await indexed_client.get("/categories")
    assert response.json()["categories"] == ["Any", "Event", "General", "Organization", "Time"]


@pytest.mark.asyncio
async def test_pattern_document(indexed_client):
    response = await indexed_client.get(
        "/patterns/document", params={"iri": PARTICIPATION_IRI, "format": "nt"}
    )
    assert response.status_code == 200
    assert PARTICIPATION_IRI in response.text


@pytest.mark.asyncio
async def test_pattern_document_unknown_format(indexed_client):
    response = await indexed_client.get(
        "/patterns/document", params={"iri": PARTICIPATION_IRI, "format": "yaml"}
    )
    assert response.status_code == 422
