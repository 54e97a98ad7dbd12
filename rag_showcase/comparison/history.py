"""Newest-first comparison history mirrored into the local store after every mutation."""

from typing import Any, List

from pydantic import ValidationError

from rag_showcase.config import COMPARISON_HISTORY_KEY
from rag_showcase.schemas.comparison import ComparisonResult
from rag_showcase.services.local_store import LocalStore
from rag_showcase.utils.logger import get_logger

logger = get_logger(__name__)


def _parse(raw: Any) -> List[ComparisonResult]:
    results: List[ComparisonResult] = []
    for item in raw if isinstance(raw, list) else []:
        try:
            results.append(ComparisonResult.model_validate(item))
        except ValidationError as e:
            logger.warning("Dropping unreadable stored comparison result: %s", e)
    return results


class ComparisonHistory:
    """
    The store is the source of truth: every read and mutation goes through it, so
    several sessions sharing one state file see and extend the same history.
    Memory only changes after the store accepted the write.
    """

    def __init__(self, store: LocalStore, key: str = COMPARISON_HISTORY_KEY) -> None:
        self._store = store
        self._key = key
        self._results: List[ComparisonResult] = _parse(self._store.get(self._key))
        logger.info("Loaded %s comparison results from local store", len(self._results))

    @property
    def results(self) -> List[ComparisonResult]:
        self._results = _parse(self._store.get(self._key))
        return list(self._results)

    def __len__(self) -> int:
        return len(self.results)

    def prepend(self, result: ComparisonResult) -> None:
        """Raises StateWriteFailure; the history is unchanged in that case."""
        entry = result.model_dump(mode="json")

        def _add(raw: Any) -> list:
            return [entry] + [r.model_dump(mode="json") for r in _parse(raw)]

        stored = self._store.update(self._key, _add, default=[])
        self._results = _parse(stored)
        logger.info("Saved %s comparison results to local store", len(self._results))

    def clear(self) -> None:
        self._store.remove(self._key)
        self._results = []
