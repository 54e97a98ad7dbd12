"""Async HTTP client for the comparison backend (profile import, compare-query, analytics)."""

from typing import Any, List, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from rag_showcase.config import API_BASE_URL, HTTP_TIMEOUT_SECONDS
from rag_showcase.errors import AuthBootstrapFailure, BackendRejected, NetworkFailure
from rag_showcase.schemas.analysis import AnalysisRequest, AnalysisResult
from rag_showcase.schemas.analytics import (
    Aggregations,
    FacetedSearchHit,
    FacetedSearchRequest,
    IndexAnalytics,
    RagAnalytics,
)
from rag_showcase.schemas.comparison import ComparisonResult
from rag_showcase.schemas.profile import ImportOutcome, Profile
from rag_showcase.services.session import SessionContext
from rag_showcase.utils.logger import get_logger

logger = get_logger(__name__)

M = TypeVar("M", bound=BaseModel)


def _detail_from(response: httpx.Response) -> Optional[str]:
    """Pull FastAPI-style ``detail`` out of an error body, if there is one."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        detail = body.get("detail")
        if isinstance(detail, str) and detail.strip():
            return detail
        if detail:
            return str(detail)
    return None


class BackendClient:
    """
    One method per backend endpoint. Every call is a single round-trip: no retries,
    transport default timeout. Failures surface as BackendRejected / NetworkFailure.
    """

    def __init__(
        self,
        session: SessionContext,
        base_url: str = API_BASE_URL,
        timeout: float = HTTP_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.session = session
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    def _client(self, authorized: bool = True) -> httpx.AsyncClient:
        headers = self.session.auth_headers() if authorized else {}
        return httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            headers=headers,
            transport=self._transport,
            follow_redirects=True,
        )

    async def _request(
        self,
        method: str,
        path: str,
        operation: str,
        fallback: str,
        authorized: bool = True,
        **kwargs: Any,
    ) -> httpx.Response:
        try:
            async with self._client(authorized) as client:
                response = await client.request(method, path, **kwargs)
                response.raise_for_status()
                return response
        except httpx.HTTPStatusError as e:
            detail = _detail_from(e.response)
            logger.warning("%s: HTTP %s %s", operation, e.response.status_code, detail or "")
            raise BackendRejected(e.response.status_code, detail, fallback) from e
        except httpx.RequestError as e:
            logger.warning("%s: request failed: %s", operation, e)
            raise NetworkFailure(operation, str(e) or type(e).__name__) from e

    @staticmethod
    def _json(response: httpx.Response, fallback: str) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise BackendRejected(response.status_code, None, fallback) from e

    @classmethod
    def _model(cls, model: Type[M], response: httpx.Response, fallback: str) -> M:
        try:
            return model.model_validate(cls._json(response, fallback))
        except ValidationError as e:
            logger.warning("Unexpected %s payload: %s", model.__name__, e)
            raise BackendRejected(response.status_code, None, fallback) from e

    # ----- session -----

    async def fetch_demo_token(self) -> str:
        response = await self._request(
            "GET", "/demo/token", "Session bootstrap", "Failed to get demo token", authorized=False
        )
        data = self._json(response, "Failed to get demo token")
        token = data.get("access_token") if isinstance(data, dict) else None
        if not token:
            raise AuthBootstrapFailure("response had no access_token")
        return token

    async def get_me(self) -> dict:
        response = await self._request("GET", "/auth/me", "Token check", "Failed to fetch user info")
        return self._json(response, "Failed to fetch user info")

    # ----- profile import -----

    async def create_profile(
        self, profile: Profile, provider: str, skip_processing: bool = False
    ) -> ImportOutcome:
        response = await self._request(
            "POST",
            "/elasticsearch/profile",
            "Profile import",
            "Import failed",
            params={"provider": provider, "skip_processing": str(skip_processing).lower()},
            json=profile.model_dump(exclude_none=True),
        )
        return self._model(ImportOutcome, response, "Import failed")

    async def get_profile(self) -> Optional[Profile]:
        """Last imported profile, or None when the backend has none (404)."""
        try:
            response = await self._request(
                "GET", "/elasticsearch/profile", "Profile load", "Failed to load profile"
            )
        except BackendRejected as e:
            if e.status_code == 404:
                return None
            raise
        return self._model(Profile, response, "Failed to load profile")

    # ----- job analysis -----

    async def analyze_job(self, request: AnalysisRequest) -> AnalysisResult:
        response = await self._request(
            "POST",
            "/elasticsearch/analyze",
            "Job analysis",
            "Analysis failed",
            json=request.model_dump(),
        )
        return self._model(AnalysisResult, response, "Analysis failed")

    async def latest_analyses(self, limit: int = 1) -> List[AnalysisResult]:
        response = await self._request(
            "GET",
            "/elasticsearch/comparisons",
            "Load analyses",
            "Failed to load previous analysis",
            params={"limit": limit},
        )
        data = self._json(response, "Failed to load previous analysis")
        items = data if isinstance(data, list) else []
        try:
            return [AnalysisResult.model_validate(item) for item in items]
        except ValidationError as e:
            raise BackendRejected(response.status_code, None, "Failed to load previous analysis") from e

    # ----- comparison -----

    async def compare_query(self, question: str, provider: str) -> ComparisonResult:
        response = await self._request(
            "POST",
            "/elasticsearch/compare-query",
            "Compare query",
            "Failed to compare query",
            params={"question": question, "provider": provider},
        )
        return self._model(ComparisonResult, response, "Failed to compare query")

    async def get_current_model(self) -> Optional[str]:
        response = await self._request(
            "GET", "/elasticsearch/current-model", "Current model", "Failed to load current model"
        )
        data = self._json(response, "Failed to load current model")
        return data.get("model") if isinstance(data, dict) else None

    # ----- document conversion -----

    async def parse_doc(self, filename: str, data: bytes, mime_type: str = "application/msword") -> str:
        response = await self._request(
            "POST",
            "/elasticsearch/parse-doc",
            "Document conversion",
            "Failed to convert document",
            files={"file": (filename, data, mime_type or "application/msword")},
        )
        body = self._json(response, "Failed to convert document")
        return (body.get("text") if isinstance(body, dict) else None) or ""

    async def parse_url(self, url: str) -> str:
        response = await self._request(
            "POST", "/parse-url", "URL load", "Failed to load URL", json={"url": url}
        )
        body = self._json(response, "Failed to load URL")
        return (body.get("text") if isinstance(body, dict) else None) or ""

    async def fetch_document(self, url: str) -> bytes:
        """Download a public document (e.g. a PDF CV) without credentials."""
        response = await self._request("GET", url, "Document download", "Failed to download document", authorized=False)
        return response.content

    # ----- analytics -----

    async def get_analytics(self) -> IndexAnalytics:
        response = await self._request(
            "GET", "/elasticsearch/analytics", "Analytics", "Failed to load analytics"
        )
        return self._model(IndexAnalytics, response, "Failed to load analytics")

    async def get_rag_analytics(self) -> RagAnalytics:
        response = await self._request(
            "GET", "/elasticsearch/rag-analytics", "RAG analytics", "Failed to load analytics"
        )
        return self._model(RagAnalytics, response, "Failed to load analytics")

    async def get_aggregations(self) -> Aggregations:
        response = await self._request(
            "GET", "/elasticsearch/aggregations", "Aggregations", "Failed to load aggregations"
        )
        return self._model(Aggregations, response, "Failed to load aggregations")

    async def generate_demo_data(self, count: int) -> int:
        response = await self._request(
            "POST",
            "/elasticsearch/demo/generate",
            "Demo data",
            "Failed to generate data",
            params={"count": count},
        )
        data = self._json(response, "Failed to generate data")
        return int(data.get("profiles_created") or 0) if isinstance(data, dict) else 0

    async def clear_analytics(self) -> None:
        await self._request(
            "DELETE", "/elasticsearch/clear-analytics", "Clear analytics", "Failed to clear analytics"
        )

    async def faceted_search(self, request: FacetedSearchRequest) -> List[FacetedSearchHit]:
        response = await self._request(
            "POST",
            "/elasticsearch/faceted-search",
            "Faceted search",
            "Search failed",
            json=request.model_dump(),
        )
        data = self._json(response, "Search failed")
        items = (data.get("results") if isinstance(data, dict) else None) or []
        try:
            return [FacetedSearchHit.model_validate(item) for item in items]
        except ValidationError as e:
            raise BackendRejected(response.status_code, None, "Search failed") from e
