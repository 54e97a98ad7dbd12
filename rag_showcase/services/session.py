"""Session bootstrap: demo bearer token held in an explicit SessionContext."""

from typing import TYPE_CHECKING, Optional

from rag_showcase.config import AUTH_TOKEN_KEY
from rag_showcase.errors import AuthBootstrapFailure, ShowcaseError, StateWriteFailure
from rag_showcase.services.local_store import LocalStore
from rag_showcase.utils.logger import get_logger

if TYPE_CHECKING:
    from rag_showcase.services.api_client import BackendClient

logger = get_logger(__name__)


class SessionContext:
    """
    Process-wide bearer credential, mirrored into the local store.
    refresh() is the only way a new token enters; it replaces the old one wholesale.
    An unwritable store only costs persistence: the token still lives for this process.
    """

    def __init__(self, store: LocalStore, token_key: str = AUTH_TOKEN_KEY) -> None:
        self._store = store
        self._token_key = token_key
        self._token: Optional[str] = store.get(token_key)

    @property
    def token(self) -> Optional[str]:
        return self._token

    def set_token(self, token: str) -> None:
        self._token = token
        try:
            self._store.set(self._token_key, token)
        except StateWriteFailure as e:
            logger.warning("Session token not persisted: %s", e.user_message)

    def clear(self) -> None:
        self._token = None
        try:
            self._store.remove(self._token_key)
        except StateWriteFailure as e:
            logger.warning("Stored session token not removed: %s", e.user_message)

    def auth_headers(self) -> dict:
        token = self.token
        return {"Authorization": f"Bearer {token}"} if token else {}

    async def refresh(self, client: "BackendClient") -> str:
        """Fetch a fresh demo token and store it. Raises AuthBootstrapFailure."""
        try:
            token = await client.fetch_demo_token()
        except AuthBootstrapFailure:
            raise
        except ShowcaseError as e:
            raise AuthBootstrapFailure(e.user_message) from e
        self.set_token(token)
        logger.info("Demo session token acquired")
        return token


async def init_session(client: "BackendClient") -> bool:
    """
    Run once at startup. Always returns: a failed bootstrap is logged and the app
    carries on, since the backend's demo mode does not hard-require the token.
    """
    try:
        await client.session.refresh(client)
        return True
    except ShowcaseError as e:
        logger.warning("Session bootstrap failed, continuing without token: %s", e.user_message)
        return False


async def whoami(client: "BackendClient") -> Optional[dict]:
    """Identity behind the current token via /auth/me; None if the token is missing or rejected."""
    if not client.session.token:
        return None
    try:
        return await client.get_me()
    except ShowcaseError as e:
        logger.warning("Token check failed: %s", e.user_message)
        return None
