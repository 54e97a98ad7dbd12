"""Pure display rules for a ComparisonResult: winner highlight, score band, history summary."""

from typing import Dict, List

from pydantic import BaseModel, Field

from rag_showcase.schemas.comparison import ELASTICSEARCH, PGVECTOR, TIE, ComparisonResult

WIN = "win"
LOSS = "loss"
HIGH = "high"
MEDIUM = "medium"
LOW = "low"

# Streamlit markdown colour per highlight / band
HIGHLIGHT_COLORS = {WIN: "green", TIE: "orange", LOSS: "red"}
BAND_COLORS = {HIGH: "green", MEDIUM: "orange", LOW: "red"}

SIDE_LABELS = {PGVECTOR: "pgvector", ELASTICSEARCH: "Elasticsearch"}


def winner_highlight(side: str, winner: str) -> str:
    """'win' if this side won, 'tie' on a tie, otherwise 'loss'."""
    if winner == side:
        return WIN
    if winner == TIE:
        return TIE
    return LOSS


def score_band(score: float) -> str:
    """>= 80 high, 60..79 medium, below 60 low."""
    if score >= 80:
        return HIGH
    if score >= 60:
        return MEDIUM
    return LOW


def winner_label(winner: str) -> str:
    if winner == TIE:
        return "Tie"
    if winner in SIDE_LABELS:
        return f"{SIDE_LABELS[winner]} wins"
    return winner or "No verdict"


class HistorySummary(BaseModel):
    """Aggregates over the local comparison history."""

    total: int = 0
    wins: Dict[str, int] = Field(default_factory=lambda: {PGVECTOR: 0, ELASTICSEARCH: 0, TIE: 0})
    avg_pgvector_score: float = 0
    avg_elasticsearch_score: float = 0
    avg_pgvector_latency_ms: float = 0
    avg_elasticsearch_latency_ms: float = 0


def summarize_history(results: List[ComparisonResult]) -> HistorySummary:
    summary = HistorySummary(total=len(results))
    if not results:
        return summary
    for r in results:
        key = r.evaluation.winner if r.evaluation.winner in summary.wins else TIE
        summary.wins[key] += 1
    n = len(results)
    summary.avg_pgvector_score = sum(r.evaluation.pgvector_score for r in results) / n
    summary.avg_elasticsearch_score = sum(r.evaluation.elasticsearch_score for r in results) / n
    summary.avg_pgvector_latency_ms = sum(r.pgvector.retrieval_time_ms for r in results) / n
    summary.avg_elasticsearch_latency_ms = sum(r.elasticsearch.retrieval_time_ms for r in results) / n
    return summary
