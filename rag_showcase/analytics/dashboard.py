"""State behind the analytics view: RAG comparison stats, index stats, demo data and reset."""

from typing import Optional

from rag_showcase.config import DEMO_PROFILE_COUNT
from rag_showcase.errors import ShowcaseError
from rag_showcase.schemas.analytics import IndexAnalytics, RagAnalytics
from rag_showcase.services.api_client import BackendClient
from rag_showcase.utils.logger import get_logger

logger = get_logger(__name__)


class AnalyticsDashboard:
    def __init__(self, client: BackendClient) -> None:
        self._client = client
        self.rag: Optional[RagAnalytics] = None
        self.index: Optional[IndexAnalytics] = None
        self.error_message: Optional[str] = None
        self.status_message: Optional[str] = None

    async def refresh(self) -> bool:
        """Reload comparison statistics. Keeps the last good data on failure."""
        try:
            self.rag = await self._client.get_rag_analytics()
        except ShowcaseError as e:
            logger.error("Failed to load analytics: %s", e.user_message)
            self.error_message = e.user_message
            return False
        self.error_message = None
        return True

    async def refresh_index_stats(self) -> bool:
        try:
            self.index = await self._client.get_analytics()
        except ShowcaseError as e:
            logger.error("Failed to load index analytics: %s", e.user_message)
            return False
        return True

    async def clear(self, confirmed: bool) -> bool:
        """Delete all server-side analytics. Only runs once the user confirmed."""
        if not confirmed:
            return False
        try:
            await self._client.clear_analytics()
        except ShowcaseError as e:
            self.error_message = e.user_message
            return False
        await self.refresh()
        return True

    async def generate_demo_data(self, count: int = DEMO_PROFILE_COUNT) -> bool:
        self.status_message = "Generating demo profiles..."
        try:
            created = await self._client.generate_demo_data(count)
        except ShowcaseError as e:
            self.status_message = f"❌ Error: {e.user_message}"
            return False
        self.status_message = f"✅ Generated {created} profiles!"
        await self.refresh_index_stats()
        return True
