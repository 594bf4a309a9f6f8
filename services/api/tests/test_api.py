from __future__ import annotations

import json
from typing import Any, Dict, List

import httpx
import pytest
from fastapi.testclient import TestClient

from newswire import main as main_module
from newswire.cache import NewsCache
from newswire.errors import SearchBridgeError
from newswire.llm_client import CompletionClient
from newswire.main import app, get_completion, get_news_cache, get_search_bridge

from conftest import FakeClock, FakeCompletion, FakeSource, make_item


class FakeBridge:
    def __init__(self, *, fail: bool = False):
        self.fail = fail

    async def answer(self, query: str) -> Dict[str, Any]:
        if self.fail:
            raise SearchBridgeError("search down")
        return {"text": f"answer to {query}", "results": [{"title": "r", "url": "https://r", "content": "c"}]}


@pytest.fixture
def env():
    source = FakeSource("BBC", [make_item("A B", "2024-01-01T00:00:00Z", source="BBC", image_url="https://img/a.jpg")])
    cache = NewsCache([source], clock=FakeClock())
    completion = FakeCompletion()
    bridge = FakeBridge()
    app.dependency_overrides[get_news_cache] = lambda: cache
    app.dependency_overrides[get_completion] = lambda: completion
    app.dependency_overrides[get_search_bridge] = lambda: bridge
    with TestClient(app) as client:
        yield {"client": client, "source": source, "completion": completion, "bridge": bridge}
    app.dependency_overrides.clear()


def test_get_feed(env):
    r = env["client"].get("/feed")
    assert r.status_code == 200
    [item] = r.json()
    assert item["id"] == "A%20B"
    assert item["title"] == "A B"
    assert item["source"] == "BBC"
    assert item["category"] == "world"
    assert item["pubDate"] == "2024-01-01T00:00:00Z"
    assert item["imageUrl"] == "https://img/a.jpg"
    assert "fullContent" in item


def test_get_feed_all_sources_failing(env):
    env["source"].fail = True
    r = env["client"].get("/feed")
    assert r.status_code == 500
    body = r.json()
    assert body["error"] == "Failed to process news"
    assert "No news items" in body["details"]


def test_post_requires_id(env):
    r = env["client"].post("/feed", json={"id": "", "action": "fact-check"})
    assert r.status_code == 400
    assert r.json() == {"error": "News item ID is required and cannot be empty"}

    r = env["client"].post("/feed", json={"action": "fact-check"})
    assert r.status_code == 400


def test_post_unknown_id(env):
    assert env["client"].get("/feed").status_code == 200
    r = env["client"].post("/feed", json={"id": "unknown-id"})
    assert r.status_code == 404
    assert r.json() == {"error": "News item not found"}


def test_post_default_summary(env):
    r = env["client"].post("/feed", json={"id": "A%20B"})
    assert r.status_code == 200
    body = r.json()
    assert body["summary"] == "summary:200"
    assert body["content"] == "<p>A B body</p>"
    assert body["imageUrl"] == "https://img/a.jpg"
    assert set(body) == {"id", "title", "content", "summary", "imageUrl", "source", "category", "pubDate"}


def test_post_accepts_unencoded_title(env):
    r = env["client"].post("/feed", json={"id": "A B", "action": "fact-check"})
    assert r.status_code == 200
    body = r.json()
    assert body["factCheck"] == "report:A B"
    assert set(body) == {"id", "title", "factCheck", "source", "category", "pubDate"}


def test_post_custom_summary_length(env):
    r = env["client"].post("/feed", json={"id": "A%20B", "action": "custom-summary", "length": 80})
    assert r.status_code == 200
    assert r.json()["summary"] == "summary:80"

    r = env["client"].post("/feed", json={"id": "A%20B", "action": "custom-summary"})
    assert r.json()["summary"] == "summary:200"


@pytest.mark.parametrize(
    "action,error",
    [
        (None, "Failed to generate default summary"),
        ("custom-summary", "Failed to generate summary"),
        ("fact-check", "Failed to generate fact-check report"),
    ],
)
def test_post_enrichment_failure(env, action, error):
    env["completion"].fail = True
    r = env["client"].post("/feed", json={"id": "A%20B", "action": action})
    assert r.status_code == 500
    assert r.json() == {"error": error}


def test_post_when_feeds_unavailable(env):
    env["source"].fail = True
    r = env["client"].post("/feed", json={"id": "A%20B"})
    assert r.status_code == 500
    assert r.json()["error"] == "Failed to process news item"


def test_search(env):
    r = env["client"].post("/search", json={"query": "rates"})
    assert r.status_code == 200
    body = r.json()
    assert body["response"] == "answer to rates"
    assert body["searchResults"][0]["url"] == "https://r"


def test_search_failure(env):
    env["bridge"].fail = True
    r = env["client"].post("/search", json={"query": "rates"})
    assert r.status_code == 500
    assert r.json() == {"error": "Failed to process your request"}


def test_malformed_body_is_400(env):
    r = env["client"].post("/search", json={})
    assert r.status_code == 400
    assert r.json()["error"] == "Invalid request body"


def test_legacy_routes(env):
    client = env["client"]
    assert client.get("/api/rss").status_code == 200
    assert client.post("/api/rss", json={"id": "A B", "action": "fact-check"}).status_code == 200
    assert client.post("/api/llm-search", json={"query": "q"}).status_code == 200
    assert client.get("/api/health").json() == {"ok": True}
    assert client.get("/sources").json()["sources"][0]["name"] == "BBC"


def test_post_large_length_clamps_token_budget(env, test_settings):
    sent: List[Dict[str, Any]] = []

    def backend(request: httpx.Request) -> httpx.Response:
        sent.append(json.loads(request.content))
        return httpx.Response(200, json={"choices": [{"message": {"role": "assistant", "content": "long summary"}}]})

    completion = CompletionClient(test_settings, transport=httpx.MockTransport(backend))
    app.dependency_overrides[get_completion] = lambda: completion
    r = env["client"].post("/feed", json={"id": "A%20B", "action": "custom-summary", "length": 6000})
    assert r.status_code == 200
    assert r.json()["summary"] == "long summary"
    assert sent[0]["max_completion_tokens"] == 1000


def test_post_unexpected_failure_keeps_json_envelope(env, monkeypatch):
    async def broken_resolve(cache, item_id):
        raise RuntimeError("index corrupted")

    monkeypatch.setattr(main_module, "resolve_item", broken_resolve)
    r = env["client"].post("/feed", json={"id": "A%20B"})
    assert r.status_code == 500
    assert r.json() == {"error": "Failed to process news item", "details": "index corrupted"}


def test_post_unencodable_id_keeps_json_envelope(env):
    r = env["client"].post(
        "/feed", content=b'{"id": "\\ud800"}', headers={"content-type": "application/json"}
    )
    assert r.status_code == 500
    body = r.json()
    assert body["error"] == "Failed to process news item"
    assert "details" in body
