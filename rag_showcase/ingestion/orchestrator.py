"""
Import and analyze flows behind the ingestion form.

Both flows share the same shape: Idle -> Validating -> Submitting -> Succeeded | Failed,
back to Idle only through clear(). A failure never touches the text the user entered.
"""

from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field

from rag_showcase.config import DEFAULT_ANALYZE_PROVIDER, INGESTION_CAPABILITIES
from rag_showcase.errors import MissingInput, ShowcaseError
from rag_showcase.ingestion.text_extractor import extract_text, load_text_from_url
from rag_showcase.schemas.analysis import AnalysisRequest, AnalysisResult
from rag_showcase.schemas.document import UploadedDocument
from rag_showcase.schemas.profile import ImportOutcome, Profile
from rag_showcase.services.api_client import BackendClient
from rag_showcase.utils.helpers import format_number, pluralize
from rag_showcase.utils.logger import get_logger

logger = get_logger(__name__)

PROGRESS_MESSAGE = "🔄 Clearing old data and importing..."
PASS_GLYPH = "✅"
FAIL_GLYPH = "❌"
PARTIAL_GLYPH = "⚠️"


class FlowState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class IngestionCapabilities(BaseModel):
    """Which optional inputs the import form offers."""

    supports_url_load: bool = Field(default=True, description="Load CV text from a URL")
    supports_cover_letter: bool = Field(default=True, description="Send a cover letter with the CV")
    supports_links: bool = Field(default=True, description="Send homepage and LinkedIn URLs")
    supports_skip_processing: bool = Field(default=True, description="Offer the skip-AI-processing switch")


def import_checklist(outcome: ImportOutcome, skip_processing: bool) -> List[Tuple[bool, str]]:
    """(passed, label) per import step: five steps, or three when AI processing was skipped."""
    es_step = (outcome.elasticsearch_indexed, "Indexed in Elasticsearch (BM25 + kNN hybrid)")
    pg_step = (
        outcome.pgvector_chunks > 0,
        f"{pluralize(outcome.pgvector_chunks, 'chunk')} stored in pgvector",
    )
    cleared_step = (True, "Old profile data cleared")
    if skip_processing:
        return [cleared_step, es_step, pg_step]

    skills = len(outcome.skills_extracted)
    titles = len(outcome.job_titles)
    education = outcome.education_level or "not specified"
    return [
        cleared_step,
        (
            skills > 0 or titles > 0,
            f"AI extraction: {pluralize(skills, 'skill')}, {pluralize(titles, 'job title')}",
        ),
        (
            outcome.experience_years > 0 or bool(outcome.education_level),
            f"Experience: {format_number(outcome.experience_years)} years · Education: {education}",
        ),
        es_step,
        pg_step,
    ]


def format_import_summary(outcome: ImportOutcome, skip_processing: bool) -> str:
    """Multi-line checklist shown after a successful import."""
    steps = import_checklist(outcome, skip_processing)
    passed = sum(1 for ok, _ in steps if ok)
    header_glyph = PASS_GLYPH if passed == len(steps) else PARTIAL_GLYPH
    title = "Quick import complete" if skip_processing else "Import complete"
    lines = [f"{header_glyph} {title}: {passed}/{len(steps)} steps succeeded"]
    if skip_processing:
        lines[0] += " (AI processing skipped)"
    for number, (ok, label) in enumerate(steps, start=1):
        lines.append(f"{PASS_GLYPH if ok else FAIL_GLYPH} Step {number}: {label}")
    return "\n".join(lines)


class _Flow:
    """State + messages shared by the import and analyze flows."""

    def __init__(self, client: BackendClient, provider: str = DEFAULT_ANALYZE_PROVIDER) -> None:
        self._client = client
        self.provider = provider
        self.state = FlowState.IDLE
        self.error_message: Optional[str] = None
        self.progress_message: Optional[str] = None

    @property
    def busy(self) -> bool:
        """Submit controls stay disabled while this is True."""
        return self.state in (FlowState.VALIDATING, FlowState.SUBMITTING)

    def _begin(self) -> None:
        self.state = FlowState.VALIDATING
        self.error_message = None
        self.progress_message = None

    def _fail(self, error: ShowcaseError) -> FlowState:
        self.state = FlowState.FAILED
        self.error_message = error.user_message
        self.progress_message = None
        return self.state

    async def _read_file(self, document: UploadedDocument) -> Optional[str]:
        try:
            return await extract_text(document, self._client)
        except ShowcaseError as e:
            logger.warning("Could not load %s: %s", document.name, e.user_message)
            self.error_message = e.user_message
            return None

    async def _read_url(self, url: str) -> Optional[str]:
        try:
            return await load_text_from_url(url, self._client)
        except ShowcaseError as e:
            logger.warning("Could not load %s: %s", url, e.user_message)
            self.error_message = e.user_message
            return None


class IngestionOrchestrator(_Flow):
    """Profile import: CV text (+ optional cover letter and links) -> POST /elasticsearch/profile."""

    def __init__(
        self,
        client: BackendClient,
        capabilities: Optional[IngestionCapabilities] = None,
        provider: str = DEFAULT_ANALYZE_PROVIDER,
    ) -> None:
        super().__init__(client, provider)
        self.capabilities = capabilities or IngestionCapabilities(**INGESTION_CAPABILITIES)
        self.cv_text = ""
        self.cover_letter_text = ""
        self.homepage_url = ""
        self.linkedin_url = ""
        self.skip_processing = False
        self.status_message: Optional[str] = None
        self.outcome: Optional[ImportOutcome] = None

    def build_profile(self) -> Profile:
        caps = self.capabilities
        return Profile(
            cv_text=self.cv_text.strip(),
            cover_letter_text=(self.cover_letter_text.strip() or None) if caps.supports_cover_letter else None,
            homepage_url=(self.homepage_url.strip() or None) if caps.supports_links else None,
            linkedin_url=(self.linkedin_url.strip() or None) if caps.supports_links else None,
        )

    async def submit(self) -> FlowState:
        self._begin()
        self.status_message = None
        if not self.cv_text.strip():
            return self._fail(MissingInput("cv_text", "Please enter your CV text before importing."))

        skip = self.skip_processing and self.capabilities.supports_skip_processing
        self.state = FlowState.SUBMITTING
        self.progress_message = PROGRESS_MESSAGE
        try:
            outcome = await self._client.create_profile(self.build_profile(), self.provider, skip)
        except ShowcaseError as e:
            logger.error("Profile import failed: %s", e.user_message)
            return self._fail(e)

        self.outcome = outcome
        self.status_message = format_import_summary(outcome, skip)
        self.progress_message = None
        self.state = FlowState.SUCCEEDED
        logger.info(
            "Profile imported: es_indexed=%s pgvector_chunks=%s skip_processing=%s",
            outcome.elasticsearch_indexed,
            outcome.pgvector_chunks,
            skip,
        )
        return self.state

    async def load_file(self, document: UploadedDocument) -> bool:
        text = await self._read_file(document)
        if text is None:
            return False
        self.cv_text = text
        return True

    async def load_url(self, url: str) -> bool:
        if not self.capabilities.supports_url_load:
            self.error_message = "Loading from a URL is not available here."
            return False
        text = await self._read_url(url)
        if text is None:
            return False
        self.cv_text = text
        return True

    async def load_existing_profile(self) -> bool:
        """Pre-fill the form with the profile the backend already holds."""
        try:
            profile = await self._client.get_profile()
        except ShowcaseError as e:
            logger.warning("Could not load existing profile: %s", e.user_message)
            return False
        if profile is None:
            return False
        self.cv_text = profile.cv_text
        self.cover_letter_text = profile.cover_letter_text or ""
        self.homepage_url = profile.homepage_url or ""
        self.linkedin_url = profile.linkedin_url or ""
        return True

    def clear(self) -> None:
        self.cv_text = ""
        self.cover_letter_text = ""
        self.homepage_url = ""
        self.linkedin_url = ""
        self.status_message = None
        self.error_message = None
        self.progress_message = None
        self.outcome = None
        self.state = FlowState.IDLE


class JobAnalysisFlow(_Flow):
    """Job analysis against the imported profile: POST /elasticsearch/analyze."""

    def __init__(self, client: BackendClient, provider: str = DEFAULT_ANALYZE_PROVIDER) -> None:
        super().__init__(client, provider)
        self.job_description = ""
        self.job_url = ""
        self.result: Optional[AnalysisResult] = None

    async def submit(self) -> FlowState:
        self._begin()
        if not self.job_description.strip() and not self.job_url.strip():
            return self._fail(
                MissingInput("job_description", "Please paste a job description or enter a job URL.")
            )

        self.state = FlowState.SUBMITTING
        self.progress_message = "🔄 Analyzing job..."
        request = AnalysisRequest(
            job_description=self.job_description.strip() or None,
            job_url=self.job_url.strip() or None,
            provider=self.provider,
        )
        try:
            result = await self._client.analyze_job(request)
        except ShowcaseError as e:
            logger.error("Job analysis failed: %s", e.user_message)
            return self._fail(e)

        self.result = result
        self.progress_message = None
        self.state = FlowState.SUCCEEDED
        return self.state

    async def load_latest(self) -> bool:
        """Show the most recent analysis the backend stored, if any."""
        try:
            results = await self._client.latest_analyses(limit=1)
        except ShowcaseError as e:
            logger.warning("Could not load previous analysis: %s", e.user_message)
            return False
        if not results:
            return False
        self.result = results[0]
        return True

    async def load_file(self, document: UploadedDocument) -> bool:
        text = await self._read_file(document)
        if text is None:
            return False
        self.job_description = text
        return True

    def clear(self) -> None:
        self.job_description = ""
        self.job_url = ""
        self.result = None
        self.error_message = None
        self.progress_message = None
        self.state = FlowState.IDLE
