"""Error taxonomy for extraction, validation and backend calls.

Every error carries a ``user_message`` that can be shown as-is in the UI.
Orchestrators catch ``ShowcaseError`` and turn it into a status message, so
nothing from this module should ever reach Streamlit unhandled.
"""

from typing import Optional

COPY_PASTE_HINT = "Please copy and paste the text instead."


class ShowcaseError(Exception):
    """Base class for all client-side failures."""

    def __init__(self, user_message: str) -> None:
        super().__init__(user_message)
        self.user_message = user_message


class FileTooLarge(ShowcaseError):
    def __init__(self, size_bytes: int, limit_bytes: int) -> None:
        self.size_bytes = size_bytes
        self.limit_bytes = limit_bytes
        super().__init__(
            f"File is too large ({size_bytes / (1024 * 1024):.1f} MB). "
            f"Maximum size is {limit_bytes // (1024 * 1024)} MB. {COPY_PASTE_HINT}"
        )


class UnsupportedFileType(ShowcaseError):
    def __init__(self, filename: str) -> None:
        self.filename = filename
        super().__init__(
            f"Unsupported file type: {filename}. Please upload a .txt, .pdf, .doc or .docx file, "
            f"or copy and paste the text instead."
        )


class EmptyDocument(ShowcaseError):
    def __init__(self, source: str, message: Optional[str] = None) -> None:
        self.source = source
        super().__init__(message or f"No text could be extracted from {source}. {COPY_PASTE_HINT}")


class ParseFailure(ShowcaseError):
    def __init__(self, source_format: str, reason: str = "") -> None:
        self.source_format = source_format
        self.reason = reason
        super().__init__(f"Could not read the {source_format} file. {COPY_PASTE_HINT}")


class MissingInput(ShowcaseError):
    def __init__(self, field: str, message: Optional[str] = None) -> None:
        self.field = field
        super().__init__(message or f"Please provide {field}.")


class UnsupportedProvider(ShowcaseError):
    def __init__(self, provider: str, allowed: list) -> None:
        self.provider = provider
        super().__init__(f"Unknown provider '{provider}'. Choose one of: {', '.join(allowed)}.")


class TooManyQuestions(ShowcaseError):
    def __init__(self, count: int, limit: int) -> None:
        self.count = count
        self.limit = limit
        super().__init__(f"Maximum {limit} questions allowed (file contains {count}).")


class NetworkFailure(ShowcaseError):
    def __init__(self, operation: str, reason: str = "") -> None:
        self.operation = operation
        self.reason = reason
        suffix = f" ({reason})" if reason else ""
        super().__init__(f"{operation} failed: could not reach the backend{suffix}")


class BackendRejected(ShowcaseError):
    """Non-2xx answer from the backend; ``detail`` is the server's own text when it sent one."""

    def __init__(self, status_code: int, detail: Optional[str], fallback: str) -> None:
        self.status_code = status_code
        self.detail = detail
        super().__init__(detail or fallback)


class AuthBootstrapFailure(ShowcaseError):
    def __init__(self, reason: str) -> None:
        super().__init__(f"Could not obtain a demo session token: {reason}")


class StateWriteFailure(ShowcaseError):
    """The local state file could not be written or updated."""

    def __init__(self, path: str, reason: str = "") -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Could not save local state to {path}: {reason or 'write failed'}")
