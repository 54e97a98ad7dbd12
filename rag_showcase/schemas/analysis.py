"""Job analysis request and the backend's job/fit/probability breakdown."""

from typing import List, Optional

from pydantic import BaseModel, Field


class AnalysisRequest(BaseModel):
    job_description: Optional[str] = Field(default=None, description="Pasted job description text")
    job_url: Optional[str] = Field(default=None, description="URL of the job posting")
    provider: str = Field(default="grok", description="LLM provider for the analysis")


class SalaryRange(BaseModel):
    min: Optional[float] = None
    max: Optional[float] = None
    currency: str = ""


class YearsExperience(BaseModel):
    min: float = 0
    max: Optional[float] = None


class Requirements(BaseModel):
    must_have: List[str] = Field(default_factory=list)
    nice_to_have: List[str] = Field(default_factory=list)
    years_experience: YearsExperience = Field(default_factory=YearsExperience)
    education: str = ""
    languages: List[str] = Field(default_factory=list)
    certifications: List[str] = Field(default_factory=list)


class JobAnalysis(BaseModel):
    company: str = ""
    role: str = ""
    location: str = ""
    remote_policy: str = ""
    seniority: str = ""
    salary_range: SalaryRange = Field(default_factory=SalaryRange)
    requirements: Requirements = Field(default_factory=Requirements)
    responsibilities: List[str] = Field(default_factory=list)
    keywords: List[str] = Field(default_factory=list)
    red_flags: List[str] = Field(default_factory=list)
    green_flags: List[str] = Field(default_factory=list)


class FitScoreBreakdown(BaseModel):
    experience_match: float = 0
    skills_match: float = 0
    education_match: float = 0
    location_match: float = 0
    salary_match: float = 0
    culture_match: float = 0
    role_type_match: float = 0


class FitScore(BaseModel):
    total: float = 0
    breakdown: FitScoreBreakdown = Field(default_factory=FitScoreBreakdown)
    matched_skills: List[str] = Field(default_factory=list)
    missing_skills: List[str] = Field(default_factory=list)


class ProbabilityFactor(BaseModel):
    factor: str
    impact: float = 0


class SuccessProbability(BaseModel):
    probability: float = 0
    factors: List[ProbabilityFactor] = Field(default_factory=list)
    recommendation: str = ""


class AnalysisResult(BaseModel):
    """Backend verdict for one job against the imported profile."""

    job_analysis: JobAnalysis = Field(default_factory=JobAnalysis)
    fit_score: FitScore = Field(default_factory=FitScore)
    success_probability: SuccessProbability = Field(default_factory=SuccessProbability)
