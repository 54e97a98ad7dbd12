"""Local persisted key/value state (bearer token, comparison history) in one JSON file."""

import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from rag_showcase.config import STATE_PATH
from rag_showcase.errors import StateWriteFailure
from rag_showcase.utils.logger import get_logger

logger = get_logger(__name__)

# One lock per state file, shared by every LocalStore (Streamlit sessions run on separate threads)
_LOCKS: Dict[str, threading.Lock] = {}
_LOCKS_GUARD = threading.Lock()


def _lock_for(path: Path) -> threading.Lock:
    key = str(path.resolve())
    with _LOCKS_GUARD:
        if key not in _LOCKS:
            _LOCKS[key] = threading.Lock()
        return _LOCKS[key]


class LocalStore:
    """
    JSON file holding a flat dict of stable keys.
    Every mutation is a locked read-modify-write that rewrites the whole file via
    temp file + os.replace, so a reader never sees a half-written record.
    Write errors surface as StateWriteFailure.
    """

    def __init__(self, path: Optional[Path] = None) -> None:
        self._path = Path(path or STATE_PATH)
        self._lock = _lock_for(self._path)

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> dict:
        if not self._path.is_file():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable state file %s: %s", self._path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict) -> None:
        tmp = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self._path.parent, prefix=".state-", suffix=".json")
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, ensure_ascii=False)
            os.replace(tmp, self._path)
        except OSError as e:
            logger.error("Could not write state file %s: %s", self._path, e)
            raise StateWriteFailure(str(self._path), str(e)) from e
        finally:
            if tmp is not None and os.path.exists(tmp):
                os.unlink(tmp)

    def get(self, key: str, default: Any = None) -> Any:
        return self._read().get(key, default)

    def set(self, key: str, value: Any) -> None:
        self.update(key, lambda _: value)

    def update(self, key: str, change: Callable[[Any], Any], default: Any = None) -> Any:
        """Apply ``change`` to the current value of ``key`` and store the result, under the file lock."""
        with self._lock:
            data = self._read()
            data[key] = change(data.get(key, default))
            self._write(data)
            return data[key]

    def remove(self, key: str) -> None:
        with self._lock:
            data = self._read()
            if key in data:
                del data[key]
                self._write(data)
