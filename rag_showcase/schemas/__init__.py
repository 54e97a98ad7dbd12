"""Schema exports."""

from .analysis import AnalysisRequest, AnalysisResult
from .analytics import Aggregations, FacetedSearchHit, FacetedSearchRequest, IndexAnalytics, RagAnalytics
from .comparison import ComparisonResult, Evaluation, RetrievalAnswer
from .document import UploadedDocument
from .profile import ImportOutcome, Profile

__all__ = [
    "AnalysisRequest",
    "AnalysisResult",
    "Aggregations",
    "FacetedSearchHit",
    "FacetedSearchRequest",
    "IndexAnalytics",
    "RagAnalytics",
    "ComparisonResult",
    "Evaluation",
    "RetrievalAnswer",
    "UploadedDocument",
    "ImportOutcome",
    "Profile",
]
