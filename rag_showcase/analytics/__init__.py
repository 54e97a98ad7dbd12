"""Analytics view state."""

from rag_showcase.analytics.dashboard import AnalyticsDashboard

__all__ = ["AnalyticsDashboard"]
