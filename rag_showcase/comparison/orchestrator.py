"""Q&A comparison: ask one question (or a file of questions) against both retrieval backends."""

import asyncio
from typing import Awaitable, Callable, List, Optional

from pydantic import BaseModel, Field

from rag_showcase.config import (
    BULK_QUESTION_DELAY_SECONDS,
    COMPARE_PROVIDERS,
    DEFAULT_COMPARE_PROVIDER,
    DEFAULT_LOCAL_MODEL,
    MAX_BULK_QUESTIONS,
    MAX_UPLOAD_BYTES,
)
from rag_showcase.comparison.history import ComparisonHistory
from rag_showcase.errors import (
    EmptyDocument,
    FileTooLarge,
    MissingInput,
    ParseFailure,
    ShowcaseError,
    TooManyQuestions,
    UnsupportedProvider,
)
from rag_showcase.schemas.comparison import ComparisonResult
from rag_showcase.schemas.document import UploadedDocument
from rag_showcase.services.api_client import BackendClient
from rag_showcase.utils.logger import get_logger

logger = get_logger(__name__)

NO_QUESTIONS_MESSAGE = "No questions found in file"


class BulkReport(BaseModel):
    """Outcome of one bulk upload."""

    total: int = Field(..., description="Questions read from the file")
    succeeded: int = Field(default=0, description="Questions answered and added to history")
    failed_questions: List[str] = Field(default_factory=list, description="Questions skipped after an error")


def parse_questions(text: str, limit: int = MAX_BULK_QUESTIONS) -> List[str]:
    """
    One question per non-empty trimmed line.
    Raises EmptyDocument for no questions and TooManyQuestions above the limit.
    """
    questions = [line.strip() for line in (text or "").splitlines() if line.strip()]
    if not questions:
        raise EmptyDocument("question file", NO_QUESTIONS_MESSAGE)
    if len(questions) > limit:
        raise TooManyQuestions(len(questions), limit)
    return questions


def questions_from_upload(document: UploadedDocument, limit: int = MAX_BULK_QUESTIONS) -> List[str]:
    if document.size > MAX_UPLOAD_BYTES:
        raise FileTooLarge(document.size, MAX_UPLOAD_BYTES)
    try:
        text = document.data.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise ParseFailure("text", str(e)) from e
    return parse_questions(text, limit)


class ComparisonOrchestrator:
    """
    Holds the question input, provider choice and history for the comparison view.
    Never raises to the caller: failures land in error_message.
    """

    def __init__(
        self,
        client: BackendClient,
        history: ComparisonHistory,
        provider: str = DEFAULT_COMPARE_PROVIDER,
        delay_seconds: float = BULK_QUESTION_DELAY_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._client = client
        self.history = history
        self.provider = provider
        self.question = ""
        self.error_message: Optional[str] = None
        self.loading = False
        self.bulk_running = False
        self.current_model = DEFAULT_LOCAL_MODEL
        self._delay = delay_seconds
        self._sleep = sleep

    @property
    def results(self) -> List[ComparisonResult]:
        return self.history.results

    def _check_provider(self, provider: str) -> str:
        if provider not in COMPARE_PROVIDERS:
            raise UnsupportedProvider(provider, list(COMPARE_PROVIDERS))
        return provider

    async def compare(
        self, question: Optional[str] = None, provider: Optional[str] = None
    ) -> Optional[ComparisonResult]:
        """
        Ask one question. On success the result goes on top of the history and the
        input is cleared; on failure history and input stay as they were.
        """
        question = self.question if question is None else question
        self.error_message = None
        try:
            if not question.strip():
                raise MissingInput("question", "Please enter a question.")
            provider = self._check_provider(provider or self.provider)
        except ShowcaseError as e:
            self.error_message = e.user_message
            return None

        self.loading = True
        try:
            result = await self._client.compare_query(question, provider)
        except ShowcaseError as e:
            logger.error("Failed to compare query: %s", e.user_message)
            self.error_message = e.user_message
            return None
        finally:
            self.loading = False

        try:
            self.history.prepend(result)
        except ShowcaseError as e:
            self.error_message = e.user_message
            return None
        self.question = ""
        return result

    async def bulk_compare(self, text: str, provider: Optional[str] = None) -> Optional[BulkReport]:
        """
        Run every line of a question file through compare-query, one at a time, pausing
        between calls. Each success is prepended as it arrives, so the last line ends up
        on top. A failing line is logged and skipped.
        """
        self.error_message = None
        try:
            questions = parse_questions(text)
            provider = self._check_provider(provider or self.provider)
        except ShowcaseError as e:
            self.error_message = e.user_message
            return None
        return await self._run_bulk(questions, provider)

    async def bulk_compare_upload(
        self, document: UploadedDocument, provider: Optional[str] = None
    ) -> Optional[BulkReport]:
        self.error_message = None
        try:
            questions = questions_from_upload(document)
            provider = self._check_provider(provider or self.provider)
        except ShowcaseError as e:
            self.error_message = e.user_message
            return None
        return await self._run_bulk(questions, provider)

    async def _run_bulk(self, questions: List[str], provider: str) -> BulkReport:
        report = BulkReport(total=len(questions))
        self.bulk_running = True
        try:
            for i, q in enumerate(questions):
                logger.info("Processing question %s/%s: %s", i + 1, len(questions), q)
                try:
                    result = await self._client.compare_query(q, provider)
                    self.history.prepend(result)
                except ShowcaseError as e:
                    logger.error("Failed to process question %r: %s", q, e.user_message)
                    report.failed_questions.append(q)
                else:
                    report.succeeded += 1
                if i < len(questions) - 1:
                    await self._sleep(self._delay)
        finally:
            self.bulk_running = False
        logger.info("Successfully processed %s/%s questions", report.succeeded, report.total)
        return report

    def clear_history(self, confirmed: bool) -> bool:
        """Irreversible; the caller must have asked the user first."""
        if not confirmed:
            return False
        try:
            self.history.clear()
        except ShowcaseError as e:
            self.error_message = e.user_message
            return False
        return True

    async def load_current_model(self) -> str:
        try:
            model = await self._client.get_current_model()
        except ShowcaseError as e:
            logger.warning("Failed to load current model: %s", e.user_message)
            return self.current_model
        if model:
            self.current_model = model
        return self.current_model
