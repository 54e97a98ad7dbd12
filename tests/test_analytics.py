import asyncio

import httpx

from rag_showcase.analytics.dashboard import AnalyticsDashboard

RAG_ANALYTICS = {
    "total_queries": 3,
    "avg_pgvector_score": 81.5,
    "avg_elasticsearch_score": 74,
    "winner_distribution": [{"key": "pgvector", "count": 2}, {"key": "tie", "count": 1}],
    "recent_queries": [
        {"query": "q", "timestamp": "2025-01-15T10:30:00Z", "winner": "pgvector", "llm_provider": "grok"}
    ],
}


def test_refresh_loads_rag_analytics(make_client):
    def handler(request):
        assert request.url.path == "/elasticsearch/rag-analytics"
        return httpx.Response(200, json=RAG_ANALYTICS)

    client, _ = make_client(handler)
    dashboard = AnalyticsDashboard(client)
    assert asyncio.run(dashboard.refresh())
    assert dashboard.rag.total_queries == 3
    assert dashboard.rag.winner_distribution[0].key == "pgvector"
    assert dashboard.rag.recent_queries[0].llm_provider == "grok"


def test_refresh_failure_keeps_last_good_data(make_client):
    responses = [httpx.Response(200, json=RAG_ANALYTICS), httpx.Response(500, json={"detail": "es down"})]
    client, _ = make_client(lambda request: responses.pop(0))
    dashboard = AnalyticsDashboard(client)
    asyncio.run(dashboard.refresh())
    assert not asyncio.run(dashboard.refresh())
    assert dashboard.rag.total_queries == 3
    assert dashboard.error_message == "es down"


def test_clear_needs_confirmation(make_client):
    def handler(request):
        if request.method == "DELETE":
            assert request.url.path == "/elasticsearch/clear-analytics"
            return httpx.Response(200, json={"status": "cleared"})
        return httpx.Response(200, json={"total_queries": 0})

    client, recorder = make_client(handler)
    dashboard = AnalyticsDashboard(client)
    assert not asyncio.run(dashboard.clear(confirmed=False))
    assert recorder.requests == []

    assert asyncio.run(dashboard.clear(confirmed=True))
    assert [r.method for r in recorder.requests] == ["DELETE", "GET"]
    assert dashboard.rag.total_queries == 0


def test_generate_demo_data(make_client):
    def handler(request):
        if request.url.path == "/elasticsearch/demo/generate":
            assert request.url.params["count"] == "50"
            return httpx.Response(200, json={"profiles_created": 50})
        return httpx.Response(200, json={"total_documents": 50})

    client, _ = make_client(handler)
    dashboard = AnalyticsDashboard(client)
    assert asyncio.run(dashboard.generate_demo_data())
    assert dashboard.status_message == "✅ Generated 50 profiles!"
    assert dashboard.index.total_documents == 50


def test_generate_demo_data_error(make_client):
    client, _ = make_client(lambda request: httpx.Response(500, json={"detail": "quota"}))
    dashboard = AnalyticsDashboard(client)
    assert not asyncio.run(dashboard.generate_demo_data(5))
    assert dashboard.status_message == "❌ Error: quota"
