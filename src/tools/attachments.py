"""Attachment preparation for uploaded source documents.

Converts uploaded files into provider content parts:
- PDF documents become inline binary parts
- Plain text, markdown and LaTeX are decoded and wrapped in a header
  naming the source so the model can attribute claims
- Anything else is filtered out
"""

import logging
from pathlib import Path

from src.errors.exceptions import DocumentValidationError, UnsupportedDocumentError
from src.state.enums import DocumentKind, SUPPORTED_FORMATS_DESCRIPTION
from src.state.models import ContentPart, SourceDocument

logger = logging.getLogger(__name__)


PDF_MIME_TYPE = "application/pdf"

TEXT_MIME_TYPES = {
    "text/plain",
    "text/markdown",
    "text/x-markdown",
    "text/x-tex",
    "text/x-latex",
    "application/x-tex",
    "application/x-latex",
}

TEXT_SUFFIXES = {".txt", ".md", ".markdown", ".tex", ".latex"}

# Declared types by suffix, for files loaded from disk
SUFFIX_MIME_TYPES = {
    ".pdf": PDF_MIME_TYPE,
    ".txt": "text/plain",
    ".md": "text/markdown",
    ".markdown": "text/markdown",
    ".tex": "application/x-tex",
    ".latex": "application/x-latex",
}


# =============================================================================
# Format Detection
# =============================================================================


def detect_document_kind(name: str, mime_type: str | None) -> DocumentKind:
    """
    Classify a file by declared type or file-name suffix.

    Args:
        name: File name as uploaded.
        mime_type: Declared media type, possibly empty.

    Returns:
        DocumentKind for the file.
    """
    declared = (mime_type or "").lower().split(";")[0].strip()
    suffix = Path(name).suffix.lower()

    if "pdf" in declared or suffix == ".pdf":
        return DocumentKind.PDF
    if declared in TEXT_MIME_TYPES or declared.startswith("text/") or suffix in TEXT_SUFFIXES:
        return DocumentKind.TEXT
    return DocumentKind.OTHER


def guess_mime_type(name: str) -> str:
    """Guess a declared type from the file suffix."""
    return SUFFIX_MIME_TYPES.get(Path(name).suffix.lower(), "application/octet-stream")


# =============================================================================
# Ingestion
# =============================================================================


def load_document(name: str, mime_type: str | None, raw_bytes: bytes) -> SourceDocument:
    """
    Validate an upload and turn it into a SourceDocument.

    Args:
        name: File name as uploaded.
        mime_type: Declared media type.
        raw_bytes: File payload.

    Returns:
        Immutable SourceDocument.

    Raises:
        UnsupportedDocumentError: The format is not one of the supported set.
        DocumentValidationError: The payload is empty.
    """
    kind = detect_document_kind(name, mime_type)
    if kind == DocumentKind.OTHER:
        raise UnsupportedDocumentError(
            f"File {name} is skipped. Supported formats: {SUPPORTED_FORMATS_DESCRIPTION}.",
            document=name,
            mime_type=mime_type,
        )
    if not raw_bytes:
        raise DocumentValidationError(
            f"File {name} is empty. Please re-upload it.",
            document=name,
        )
    return SourceDocument(
        name=name,
        kind=kind,
        mime_type=mime_type or guess_mime_type(name),
        raw_bytes=raw_bytes,
    )


def load_document_from_path(path: str | Path) -> SourceDocument:
    """Read a file from disk and validate it as an upload."""
    path = Path(path)
    if not path.exists():
        raise DocumentValidationError(f"File not found: {path}", document=path.name)
    return load_document(path.name, guess_mime_type(path.name), path.read_bytes())


def ensure_documents_have_data(documents: list[SourceDocument] | tuple[SourceDocument, ...]) -> None:
    """Reject document sets whose payloads went missing."""
    if not documents:
        raise DocumentValidationError(
            "Please upload research materials (PDF/TXT/MD/TEX) first."
        )
    missing = [d.name for d in documents if not d.has_data]
    if missing:
        raise DocumentValidationError(
            f"File data is missing for {', '.join(missing)}. Please re-upload source files.",
            document=missing[0],
        )


# =============================================================================
# Content Parts
# =============================================================================


def decode_text(raw_bytes: bytes, name: str = "") -> str:
    """
    Decode a text payload as UTF-8.

    Malformed payloads are logged and yield an empty string so one bad
    file never aborts a batch.
    """
    try:
        return raw_bytes.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        logger.warning(f"Failed to decode text file {name}: {e}")
        return ""


def format_text_part(name: str, text: str) -> str:
    """Wrap document text in a header naming its source and a separator."""
    return f"[Source Document: {name}]\n{text}\n---"


def prepare_content_part(document: SourceDocument) -> ContentPart | None:
    """
    Convert one document into a provider content part.

    Returns:
        Binary part for PDFs, text part for text-like documents, or None
        for unsupported formats.
    """
    if document.kind == DocumentKind.PDF:
        if not document.has_data:
            logger.warning(f"Skipping PDF {document.name} with no data")
            return None
        return ContentPart.from_bytes(document.raw_bytes, PDF_MIME_TYPE)
    if document.kind == DocumentKind.TEXT:
        text = decode_text(document.raw_bytes, document.name)
        return ContentPart.from_text(format_text_part(document.name, text))
    logger.debug(f"Skipping unsupported document {document.name}")
    return None


def prepare_content_parts(
    documents: list[SourceDocument] | tuple[SourceDocument, ...],
) -> list[ContentPart]:
    """Convert documents into content parts, dropping unsupported ones."""
    parts = []
    for document in documents:
        part = prepare_content_part(document)
        if part is not None:
            parts.append(part)
    return parts
