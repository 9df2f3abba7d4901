"""
Tests for the HTTP API (store and LLM injected through dependency overrides).
"""

import pytest
from httpx import AsyncClient, ASGITransport
from app.database import get_store
from app.main import app
from app.services.ai_service import get_ai_service


@pytest.fixture
def api(seeded_store, make_ai):
    """Yields (client_factory, stub_completion_client, store)."""
    ai, completion = make_ai(
        "```sql\nSELECT SUM(total_revenue) FROM total_sales_metrics\n```",
        "Total revenue is 300.",
    )
    app.dependency_overrides[get_store] = lambda: seeded_store
    app.dependency_overrides[get_ai_service] = lambda: ai

    def client():
        return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")

    yield client, completion, seeded_store
    app.dependency_overrides.clear()


@pytest.mark.anyio
async def test_post_query_success(api):
    client, completion, store = api
    async with client() as c:
        response = await c.post("/api/query", json={"question": "What is my total sales?"})

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["sql"] == "SELECT SUM(total_revenue) FROM total_sales_metrics"
    assert data["answer"] == "Total revenue is 300."
    assert data["tablesQueried"] == 1
    assert isinstance(data["executionTime"], int)
    assert set(data) == {
        "question", "sql", "result", "answer", "executionTime", "tablesQueried", "success", "timestamp",
    }
    assert len(store.get_query_history(10)) == 1


@pytest.mark.anyio
@pytest.mark.parametrize("body", [{"question": ""}, {"question": "   "}, {}, {"question": 42}, {"question": None}])
async def test_post_query_rejects_bad_question(api, body):
    client, completion, store = api
    async with client() as c:
        response = await c.post("/api/query", json=body)

    assert response.status_code == 400
    assert response.json() == {"error": "Question is required"}
    assert completion.prompts == []
    assert store.get_query_history(10) == []


@pytest.mark.anyio
async def test_post_query_rejects_non_object_body(api):
    client, completion, _ = api
    async with client() as c:
        response = await c.post("/api/query", content=b"not json", headers={"content-type": "application/json"})
    assert response.status_code == 400
    assert completion.prompts == []


@pytest.mark.anyio
async def test_post_query_pipeline_failure_is_200(seeded_store, make_ai):
    ai, _ = make_ai(error=RuntimeError("model down"))
    app.dependency_overrides[get_store] = lambda: seeded_store
    app.dependency_overrides[get_ai_service] = lambda: ai
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
            response = await c.post("/api/query", json={"question": "What is my total sales?"})
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is False
    assert data["answer"] == "Error: Failed to convert question to SQL"
    assert seeded_store.get_query_history(10) == []


@pytest.mark.anyio
async def test_history_endpoints(api):
    client, _, _ = api
    async with client() as c:
        for n in range(3):
            await c.post("/api/query", json={"question": f"question {n}"})

        response = await c.get("/api/history", params={"limit": 2})
        assert response.status_code == 200
        entries = response.json()
        assert [e["question"] for e in entries] == ["question 2", "question 1"]
        assert set(entries[0]) == {"id", "question", "sql", "result", "timestamp"}

        response = await c.get("/api/history", params={"limit": "abc"})
        assert len(response.json()) == 3

        response = await c.get("/api/history", params={"limit": "1abc"})
        assert [e["question"] for e in response.json()] == ["question 2"]

        response = await c.get("/api/history", params={"limit": "2.5"})
        assert len(response.json()) == 2

        response = await c.get("/api/history", params={"limit": "-1"})
        assert len(response.json()) == 3

        response = await c.delete("/api/history")
        assert response.status_code == 200
        assert response.json() == {"success": True}

        response = await c.get("/api/history")
        assert response.json() == []


@pytest.mark.anyio
async def test_status_endpoint(api):
    client, _, _ = api
    async with client() as c:
        response = await c.get("/api/status")
    assert response.status_code == 200
    assert response.json() == {"adSales": 2, "totalSales": 2, "eligibility": 1}


@pytest.mark.anyio
async def test_analytics_endpoint(api):
    client, _, _ = api
    async with client() as c:
        response = await c.get("/api/analytics")
    assert response.status_code == 200
    data = response.json()
    assert data["barChart"]["labels"] == ["Watch", "Headphones"]
    assert data["scatterChart"]["data"] == [{"x": 150.0, "y": 100.0}, {"x": 220.0, "y": 200.0}]


@pytest.mark.anyio
async def test_summary_endpoint(api):
    client, _, _ = api
    async with client() as c:
        response = await c.get("/api/summary")
    assert response.status_code == 200
    data = response.json()
    assert data["totalRevenue"] == 300
    assert data["topProduct"] == "Watch"
    assert set(data) == {"totalRevenue", "topProduct", "averageRoas", "growthRate", "keyInsights"}
