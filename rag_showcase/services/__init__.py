"""Service exports."""

from .api_client import BackendClient
from .local_store import LocalStore
from .session import SessionContext, init_session, whoami

__all__ = [
    "BackendClient",
    "LocalStore",
    "SessionContext",
    "init_session",
    "whoami",
]
