import asyncio

import httpx
import pytest

from rag_showcase.comparison.history import ComparisonHistory
from rag_showcase.comparison.orchestrator import (
    NO_QUESTIONS_MESSAGE,
    ComparisonOrchestrator,
    parse_questions,
    questions_from_upload,
)
from rag_showcase.comparison.rendering import (
    HIGH,
    LOSS,
    LOW,
    MEDIUM,
    WIN,
    score_band,
    summarize_history,
    winner_highlight,
    winner_label,
)
from rag_showcase.errors import EmptyDocument, TooManyQuestions
from rag_showcase.schemas.comparison import ELASTICSEARCH, PGVECTOR, TIE, ComparisonResult
from rag_showcase.schemas.document import UploadedDocument
from tests.conftest import comparison_payload


class FakeSleep:
    def __init__(self):
        self.calls = []

    async def __call__(self, seconds):
        self.calls.append(seconds)


def echo_handler(request):
    question = request.url.params["question"]
    return httpx.Response(200, json=comparison_payload(question))


def make_orchestrator(make_client, store, handler=echo_handler, **kwargs):
    client, recorder = make_client(handler)
    orchestrator = ComparisonOrchestrator(client, ComparisonHistory(store), **kwargs)
    return orchestrator, recorder


def test_empty_question_sends_nothing(make_client, store):
    orch, recorder = make_orchestrator(make_client, store)
    orch.question = "   "
    assert asyncio.run(orch.compare()) is None
    assert orch.error_message == "Please enter a question."
    assert recorder.requests == []
    assert orch.results == []


def test_unknown_provider_is_rejected(make_client, store):
    orch, recorder = make_orchestrator(make_client, store)
    assert asyncio.run(orch.compare("Who?", provider="bard")) is None
    assert "bard" in orch.error_message
    assert recorder.requests == []


def test_compare_sends_question_and_provider(make_client, store):
    orch, recorder = make_orchestrator(make_client, store, provider="local")
    orch.question = "What are the main skills?"
    result = asyncio.run(orch.compare())

    request = recorder.requests[0]
    assert request.method == "POST"
    assert request.url.path == "/elasticsearch/compare-query"
    assert request.url.params["question"] == "What are the main skills?"
    assert request.url.params["provider"] == "local"
    assert result.evaluation.winner == PGVECTOR
    assert orch.question == ""
    assert not orch.loading


def test_results_are_newest_first_and_survive_restart(make_client, store):
    orch, _ = make_orchestrator(make_client, store)
    for q in ("first", "second", "third"):
        asyncio.run(orch.compare(q))

    assert [r.question for r in orch.results] == ["third", "second", "first"]
    reloaded = ComparisonHistory(store)
    assert [r.question for r in reloaded.results] == ["third", "second", "first"]
    assert reloaded.results[0].pgvector.retrieval_time_ms == 12.5
    assert reloaded.results == orch.results


def test_failed_compare_leaves_history_and_input(make_client, store):
    calls = {"n": 0}

    def handler(request):
        calls["n"] += 1
        if calls["n"] == 1:
            return httpx.Response(200, json=comparison_payload("kept"))
        return httpx.Response(503, json={"detail": "LLM unavailable"})

    orch, _ = make_orchestrator(make_client, store, handler=handler)
    asyncio.run(orch.compare("kept"))
    orch.question = "lost?"
    assert asyncio.run(orch.compare()) is None
    assert orch.error_message == "LLM unavailable"
    assert orch.question == "lost?"
    assert [r.question for r in orch.results] == ["kept"]
    assert len(ComparisonHistory(store)) == 1


def test_failed_compare_without_detail(make_client, store):
    orch, _ = make_orchestrator(make_client, store, handler=lambda r: httpx.Response(500))
    asyncio.run(orch.compare("q"))
    assert orch.error_message == "Failed to compare query"


def test_clear_history_requires_confirmation(make_client, store):
    orch, _ = make_orchestrator(make_client, store)
    asyncio.run(orch.compare("q"))

    assert not orch.clear_history(confirmed=False)
    assert len(orch.results) == 1

    assert orch.clear_history(confirmed=True)
    assert orch.results == []
    assert len(ComparisonHistory(store)) == 0
    assert orch.clear_history(confirmed=True)
    assert orch.results == []


def test_unreadable_stored_items_are_dropped(store):
    store.set("comparison_results", [comparison_payload("ok"), {"question": "broken"}, "junk"])
    history = ComparisonHistory(store)
    assert [r.question for r in history.results] == ["ok"]


@pytest.mark.parametrize(
    "side, winner, expected",
    [
        (PGVECTOR, PGVECTOR, WIN),
        (ELASTICSEARCH, PGVECTOR, LOSS),
        (PGVECTOR, TIE, TIE),
        (ELASTICSEARCH, TIE, TIE),
    ],
)
def test_winner_highlight(side, winner, expected):
    assert winner_highlight(side, winner) == expected


@pytest.mark.parametrize(
    "score, band",
    [(100, HIGH), (80, HIGH), (79.9, MEDIUM), (60, MEDIUM), (59, LOW), (0, LOW)],
)
def test_score_band_boundaries(score, band):
    assert score_band(score) == band


def test_winner_label():
    assert winner_label(PGVECTOR) == "pgvector wins"
    assert winner_label(ELASTICSEARCH) == "Elasticsearch wins"
    assert winner_label(TIE) == "Tie"


def test_parse_questions_skips_blank_lines():
    assert parse_questions("  a \n\n\t\nb\n") == ["a", "b"]


def test_parse_questions_limit():
    fifty = "\n".join(f"q{i}" for i in range(50))
    assert len(parse_questions(fifty)) == 50
    with pytest.raises(TooManyQuestions) as exc:
        parse_questions(fifty + "\nq50")
    assert exc.value.user_message == "Maximum 50 questions allowed (file contains 51)."


def test_parse_questions_blank_file():
    with pytest.raises(EmptyDocument) as exc:
        parse_questions("\n   \n")
    assert exc.value.user_message == NO_QUESTIONS_MESSAGE


def test_questions_from_upload():
    doc = UploadedDocument(name="q.txt", mime_type="text/plain", data="Wer?\nWas?".encode("utf-8"))
    assert questions_from_upload(doc) == ["Wer?", "Was?"]


def test_bulk_skips_failures_and_paces_calls(make_client, store):
    def handler(request):
        if request.url.params["question"] == "b":
            return httpx.Response(500, json={"detail": "boom"})
        return echo_handler(request)

    sleep = FakeSleep()
    orch, recorder = make_orchestrator(make_client, store, handler=handler, delay_seconds=0.5, sleep=sleep)
    report = asyncio.run(orch.bulk_compare("a\nb\nc\n"))

    assert recorder.paths() == ["/elasticsearch/compare-query"] * 3
    assert [r.url.params["question"] for r in recorder.requests] == ["a", "b", "c"]
    assert report.total == 3
    assert report.succeeded == 2
    assert report.failed_questions == ["b"]
    assert [r.question for r in orch.results] == ["c", "a"]
    assert sleep.calls == [0.5, 0.5]
    assert not orch.bulk_running


def test_bulk_rejects_oversized_file_before_any_request(make_client, store):
    orch, recorder = make_orchestrator(make_client, store, sleep=FakeSleep())
    text = "\n".join(f"q{i}" for i in range(51))
    assert asyncio.run(orch.bulk_compare(text)) is None
    assert "Maximum 50 questions" in orch.error_message
    assert recorder.requests == []


def test_bulk_upload_with_no_questions(make_client, store):
    orch, recorder = make_orchestrator(make_client, store, sleep=FakeSleep())
    doc = UploadedDocument(name="q.txt", data=b"\n\n")
    assert asyncio.run(orch.bulk_compare_upload(doc)) is None
    assert orch.error_message == NO_QUESTIONS_MESSAGE
    assert recorder.requests == []


def test_load_current_model(make_client, store):
    def handler(request):
        assert request.url.path == "/elasticsearch/current-model"
        return httpx.Response(200, json={"model": "qwen2.5:7b"})

    orch, _ = make_orchestrator(make_client, store, handler=handler)
    assert asyncio.run(orch.load_current_model()) == "qwen2.5:7b"


def test_load_current_model_keeps_default_on_error(make_client, store):
    orch, _ = make_orchestrator(make_client, store, handler=lambda r: httpx.Response(500))
    assert asyncio.run(orch.load_current_model()) == "llama3.2:3b"


def test_summarize_history():
    results = [
        ComparisonResult.model_validate(comparison_payload("a", PGVECTOR)),
        ComparisonResult.model_validate(comparison_payload("b", ELASTICSEARCH)),
        ComparisonResult.model_validate(comparison_payload("c", TIE)),
        ComparisonResult.model_validate(comparison_payload("d", PGVECTOR)),
    ]
    summary = summarize_history(results)
    assert summary.total == 4
    assert summary.wins == {PGVECTOR: 2, ELASTICSEARCH: 1, TIE: 1}
    assert summary.avg_pgvector_score == 85
    assert summary.avg_elasticsearch_latency_ms == 30.25


def test_summarize_empty_history():
    summary = summarize_history([])
    assert summary.total == 0
    assert summary.avg_pgvector_score == 0


def test_compare_with_unwritable_store_reports_error(make_client_on, unwritable_store):
    client, recorder = make_client_on(echo_handler, unwritable_store)
    orch = ComparisonOrchestrator(client, ComparisonHistory(unwritable_store))
    orch.question = "q"
    assert asyncio.run(orch.compare()) is None
    assert len(recorder.requests) == 1
    assert "Could not save local state" in orch.error_message
    assert orch.question == "q"
    assert orch.results == []


def test_bulk_with_unwritable_store_counts_failures(make_client_on, unwritable_store):
    client, _ = make_client_on(echo_handler, unwritable_store)
    orch = ComparisonOrchestrator(client, ComparisonHistory(unwritable_store), sleep=FakeSleep())
    report = asyncio.run(orch.bulk_compare("a\nb"))
    assert report.succeeded == 0
    assert report.failed_questions == ["a", "b"]
    assert orch.results == []


def test_sessions_sharing_a_store_keep_each_others_results(make_client, store):
    first, _ = make_orchestrator(make_client, store)
    second, _ = make_orchestrator(make_client, store)
    asyncio.run(first.compare("from first"))
    asyncio.run(second.compare("from second"))

    assert [r.question for r in ComparisonHistory(store).results] == ["from second", "from first"]
    assert [r.question for r in first.results] == ["from second", "from first"]


def test_questions_from_upload_strips_byte_order_mark():
    doc = UploadedDocument(name="q.txt", data="What?\nWho?".encode("utf-8-sig"))
    assert questions_from_upload(doc) == ["What?", "Who?"]
