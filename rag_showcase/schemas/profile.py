"""Profile sent for import and the backend's import report."""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class Profile(BaseModel):
    """CV bundle the backend indexes; each import replaces the previous one wholesale."""

    cv_text: str = Field(..., description="Plain CV/resume text (non-empty after trim)")
    cover_letter_text: Optional[str] = Field(default=None, description="Existing cover letter text")
    homepage_url: Optional[str] = Field(default=None, description="Personal homepage URL")
    linkedin_url: Optional[str] = Field(default=None, description="LinkedIn profile URL")


class ImportOutcome(BaseModel):
    """What the backend extracted and indexed from a Profile. Absent fields read as 0 / empty."""

    skills_extracted: List[str] = Field(default_factory=list, description="Skills found by the LLM")
    experience_years: float = Field(default=0, description="Total years of experience")
    education_level: Optional[str] = Field(default=None, description="Highest education level")
    job_titles: List[str] = Field(default_factory=list, description="Job titles found in the CV")
    elasticsearch_indexed: bool = Field(default=False, description="True if the hybrid index accepted the profile")
    pgvector_chunks: int = Field(default=0, description="Number of chunks stored in pgvector")

    @field_validator("skills_extracted", "job_titles", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return [] if value is None else value

    @field_validator("experience_years", "pgvector_chunks", mode="before")
    @classmethod
    def _none_to_zero(cls, value):
        return 0 if value is None else value

    @field_validator("elasticsearch_indexed", mode="before")
    @classmethod
    def _none_to_false(cls, value):
        return False if value is None else value
