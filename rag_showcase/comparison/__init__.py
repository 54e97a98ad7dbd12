"""Q&A comparison between the vector store and the hybrid search engine."""

from rag_showcase.comparison.history import ComparisonHistory
from rag_showcase.comparison.orchestrator import BulkReport, ComparisonOrchestrator, parse_questions
from rag_showcase.comparison.rendering import score_band, summarize_history, winner_highlight

__all__ = [
    "ComparisonHistory",
    "BulkReport",
    "ComparisonOrchestrator",
    "parse_questions",
    "score_band",
    "summarize_history",
    "winner_highlight",
]
