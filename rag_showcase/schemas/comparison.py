"""Paired answers from the vector store and the hybrid engine for one question."""

from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field

PGVECTOR = "pgvector"
ELASTICSEARCH = "elasticsearch"
TIE = "tie"


class RetrievalAnswer(BaseModel):
    """One backend's answer to a question."""

    model_config = ConfigDict(extra="allow")

    answer: str = Field(default="", description="Generated answer text")
    chunks: List[Any] = Field(default_factory=list, description="Retrieved chunks (opaque)")
    retrieval_time_ms: float = Field(default=0, description="Retrieval latency in milliseconds")
    score: float = Field(default=0, description="Retrieval score 0..100")


class Evaluation(BaseModel):
    """LLM verdict on which answer was better."""

    model_config = ConfigDict(extra="allow")

    winner: str = Field(..., description="pgvector, elasticsearch or tie")
    reasoning: str = Field(default="", description="Why the winner was chosen")
    pgvector_score: float = Field(default=0, description="Score 0..100 for the pgvector answer")
    elasticsearch_score: float = Field(default=0, description="Score 0..100 for the Elasticsearch answer")


class ComparisonResult(BaseModel):
    """Result of one compare-query call; stored verbatim in the local history."""

    model_config = ConfigDict(extra="allow")

    question: str = Field(..., description="Question as asked")
    timestamp: str = Field(..., description="ISO-8601 time the backend answered")
    pgvector: RetrievalAnswer = Field(..., description="Vector-similarity answer")
    elasticsearch: RetrievalAnswer = Field(..., description="Hybrid search answer")
    evaluation: Evaluation = Field(..., description="Winner and per-side scores")
    llm_used: str = Field(default="", description="LLM that produced and judged the answers")
