"""Extract plain text from uploaded CV / job files (TXT, PDF, DOCX, DOC) or URLs. In-memory only."""

import unicodedata
from io import BytesIO
from typing import Optional
from urllib.parse import urlparse

import pdfplumber
from docx import Document

from rag_showcase.config import MAX_UPLOAD_BYTES
from rag_showcase.errors import (
    BackendRejected,
    EmptyDocument,
    FileTooLarge,
    MissingInput,
    NetworkFailure,
    ParseFailure,
    UnsupportedFileType,
)
from rag_showcase.schemas.document import UploadedDocument
from rag_showcase.services.api_client import BackendClient
from rag_showcase.utils.logger import get_logger

logger = get_logger(__name__)

DOCX = "DOCX"
DOC = "DOC"
TXT = "TXT"
PDF = "PDF"

# Fixed precedence: first match wins. Extensions are checked before MIME types.
FORMAT_RULES = (
    (DOCX, ".docx", "wordprocessingml"),
    (DOC, ".doc", "msword"),
    (TXT, ".txt", "text/plain"),
    (PDF, ".pdf", "application/pdf"),
)


def _normalize_unicode(text: str) -> str:
    """Normalize unicode (NFC)."""
    if not text:
        return ""
    return unicodedata.normalize("NFC", text)


def detect_format(filename: str, mime_type: str = "") -> str:
    """Pick the extractor for a file. Raises UnsupportedFileType."""
    name_lower = (filename or "").lower().strip()
    for fmt, extension, _ in FORMAT_RULES:
        if name_lower.endswith(extension):
            return fmt
    mime_lower = (mime_type or "").lower()
    for fmt, _, mime_marker in FORMAT_RULES:
        if mime_marker in mime_lower:
            return fmt
    raise UnsupportedFileType(filename)


def extract_pdf_text(data: bytes) -> str:
    """Text of every page in page order, joined by newlines."""
    try:
        with pdfplumber.open(BytesIO(data)) as pdf:
            return "\n".join(page.extract_text() or "" for page in pdf.pages)
    except Exception as e:
        logger.exception("PDF extraction failed: %s", e)
        raise ParseFailure("PDF", str(e)) from e


def extract_docx_text(data: bytes) -> str:
    """Paragraph text from a .docx file via python-docx."""
    try:
        doc = Document(BytesIO(data))
        return "\n".join(p.text for p in doc.paragraphs)
    except Exception as e:
        logger.exception("DOCX extraction failed: %s", e)
        raise ParseFailure("Word (.docx)", str(e)) from e


def _extract_txt(data: bytes) -> str:
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        logger.warning("Text file is not valid UTF-8: %s", e)
        raise ParseFailure("text", str(e)) from e


async def _extract_doc(document: UploadedDocument, client: Optional[BackendClient]) -> str:
    """Legacy .doc has no reliable local parser; the backend converts it."""
    if client is None:
        raise ParseFailure("Word (.doc)", "no backend client for conversion")
    try:
        return await client.parse_doc(document.name, document.data, document.mime_type)
    except (BackendRejected, NetworkFailure) as e:
        raise ParseFailure("Word (.doc)", e.user_message) from e


async def extract_text(document: UploadedDocument, client: Optional[BackendClient] = None) -> str:
    """
    Turn an uploaded file into plain text.
    Size is checked before anything is parsed; whitespace-only output is rejected.
    Raises FileTooLarge, UnsupportedFileType, ParseFailure or EmptyDocument; no retries.
    """
    if document.size > MAX_UPLOAD_BYTES:
        raise FileTooLarge(document.size, MAX_UPLOAD_BYTES)

    fmt = detect_format(document.name, document.mime_type)
    logger.info("Extracting %s text from %s (%s bytes)", fmt, document.name, document.size)

    if fmt == DOCX:
        raw = extract_docx_text(document.data)
    elif fmt == DOC:
        raw = await _extract_doc(document, client)
    elif fmt == TXT:
        raw = _extract_txt(document.data)
    else:
        raw = extract_pdf_text(document.data)

    if not raw or not raw.strip():
        raise EmptyDocument(document.name)
    return _normalize_unicode(raw)


async def load_text_from_url(url: str, client: BackendClient) -> str:
    """
    Load text behind a URL. PDF links are downloaded and parsed locally;
    anything else is fetched and converted by the backend's /parse-url.
    """
    url = (url or "").strip()
    if not url:
        raise MissingInput("url", "Please enter a URL.")

    if urlparse(url).path.lower().endswith(".pdf"):
        data = await client.fetch_document(url)
        if len(data) > MAX_UPLOAD_BYTES:
            raise FileTooLarge(len(data), MAX_UPLOAD_BYTES)
        raw = extract_pdf_text(data)
    else:
        raw = await client.parse_url(url)

    if not raw or not raw.strip():
        raise EmptyDocument(url)
    return _normalize_unicode(raw)
