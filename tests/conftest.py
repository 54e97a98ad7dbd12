"""Shared fixtures: a temp-file store, a session on it, and a backend client over httpx.MockTransport."""

import json
from typing import Callable, List

import httpx
import pytest

from rag_showcase.services.api_client import BackendClient
from rag_showcase.services.local_store import LocalStore
from rag_showcase.services.session import SessionContext

BASE_URL = "https://backend.test"


def comparison_payload(question: str = "What are the main skills?", winner: str = "pgvector", **overrides) -> dict:
    payload = {
        "question": question,
        "timestamp": "2025-01-15T10:30:00Z",
        "pgvector": {"answer": "Python and SQL", "chunks": [{"id": 1}], "retrieval_time_ms": 12.5, "score": 85},
        "elasticsearch": {"answer": "Python", "chunks": [], "retrieval_time_ms": 30.25, "score": 70},
        "evaluation": {
            "winner": winner,
            "reasoning": "More complete answer",
            "pgvector_score": 85,
            "elasticsearch_score": 70,
        },
        "llm_used": "grok",
    }
    payload.update(overrides)
    return payload


def json_body(request: httpx.Request) -> dict:
    return json.loads(request.content.decode("utf-8"))


class Recorder:
    """MockTransport handler that remembers every request it saw."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.handler = handler
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    def paths(self) -> List[str]:
        return [r.url.path for r in self.requests]


@pytest.fixture
def store(tmp_path) -> LocalStore:
    return LocalStore(tmp_path / "state.json")


@pytest.fixture
def session(store) -> SessionContext:
    return SessionContext(store)


@pytest.fixture
def make_client(session):
    def _make(handler: Callable[[httpx.Request], httpx.Response]):
        recorder = Recorder(handler)
        client = BackendClient(session, base_url=BASE_URL, transport=httpx.MockTransport(recorder))
        return client, recorder

    return _make


@pytest.fixture
def offline_client(make_client):
    """Client whose transport fails the test if any request is made."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError(f"unexpected request to {request.url}")

    client, recorder = make_client(handler)
    return client


@pytest.fixture
def unwritable_store(tmp_path) -> LocalStore:
    """Store whose parent 'directory' is a regular file, so every write fails."""
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    return LocalStore(blocker / "state.json")


@pytest.fixture
def make_client_on(store):
    """Like make_client, but over a session backed by the given store."""

    def _make(handler: Callable[[httpx.Request], httpx.Response], on_store: LocalStore = None):
        recorder = Recorder(handler)
        session = SessionContext(on_store or store)
        client = BackendClient(session, base_url=BASE_URL, transport=httpx.MockTransport(recorder))
        return client, recorder

    return _make
