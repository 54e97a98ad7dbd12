"""Ingestion: file/URL text extraction and the profile import / job analysis flows."""

from rag_showcase.ingestion.orchestrator import (
    FlowState,
    IngestionCapabilities,
    IngestionOrchestrator,
    JobAnalysisFlow,
    format_import_summary,
)
from rag_showcase.ingestion.text_extractor import detect_format, extract_text, load_text_from_url

__all__ = [
    "FlowState",
    "IngestionCapabilities",
    "IngestionOrchestrator",
    "JobAnalysisFlow",
    "format_import_summary",
    "detect_format",
    "extract_text",
    "load_text_from_url",
]
