"""Aggregate statistics payloads shown on the analytics and faceted search views."""

from typing import Dict, List

from pydantic import BaseModel, Field


class CountBucket(BaseModel):
    name: str
    count: int = 0


class WinnerBucket(BaseModel):
    key: str
    count: int = 0


class ScoreTrendPoint(BaseModel):
    timestamp: str
    pgvector_score: float = 0
    elasticsearch_score: float = 0


class RecentQuery(BaseModel):
    query: str
    timestamp: str
    winner: str
    pgvector_score: float = 0
    elasticsearch_score: float = 0
    pgvector_latency: float = 0
    elasticsearch_latency: float = 0
    llm_provider: str = ""


class RagAnalytics(BaseModel):
    """Server-side statistics over every comparison ever run."""

    total_queries: int = 0
    avg_pgvector_score: float = 0
    avg_elasticsearch_score: float = 0
    avg_pgvector_latency: float = 0
    avg_elasticsearch_latency: float = 0
    winner_distribution: List[WinnerBucket] = Field(default_factory=list)
    score_trends: List[ScoreTrendPoint] = Field(default_factory=list)
    recent_queries: List[RecentQuery] = Field(default_factory=list)


class SkillCount(BaseModel):
    skill: str
    count: int = 0


class CompanyMentions(BaseModel):
    company: str
    mentions: int = 0


class NamedValue(BaseModel):
    name: str
    value: float = 0


class IndexAnalytics(BaseModel):
    """Statistics about the indexed profile documents."""

    total_documents: int = 0
    index_size_bytes: int = 0
    index_size_mb: float = 0
    avg_chunk_size: float = 0
    field_coverage: Dict[str, float] = Field(default_factory=dict)
    top_skills: List[SkillCount] = Field(default_factory=list)
    timeline: List[CompanyMentions] = Field(default_factory=list)
    database_distribution: List[NamedValue] = Field(default_factory=list)
    language_distribution: List[NamedValue] = Field(default_factory=list)


class Aggregations(BaseModel):
    databases: List[CountBucket] = Field(default_factory=list)
    programming_languages: List[CountBucket] = Field(default_factory=list)
    companies: List[CountBucket] = Field(default_factory=list)
    certifications: List[CountBucket] = Field(default_factory=list)


class FacetedSearchRequest(BaseModel):
    query: str = ""
    databases: List[str] = Field(default_factory=list)
    programming_languages: List[str] = Field(default_factory=list)
    companies: List[str] = Field(default_factory=list)
    certifications: List[str] = Field(default_factory=list)


class FacetedSearchHit(BaseModel):
    content: str = ""
    databases: List[str] = Field(default_factory=list)
    programming_languages: List[str] = Field(default_factory=list)
    companies: List[str] = Field(default_factory=list)
    certifications: List[str] = Field(default_factory=list)
    skills: List[str] = Field(default_factory=list)
    score: float = 0
