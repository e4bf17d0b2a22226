"""Tests for document ingestion and content part preparation."""

import logging

import pytest

from src.errors import DocumentValidationError, UnsupportedDocumentError
from src.state.enums import DocumentKind, PartKind
from src.state.models import SourceDocument
from src.tools.attachments import (
    PDF_MIME_TYPE,
    detect_document_kind,
    ensure_documents_have_data,
    format_text_part,
    guess_mime_type,
    load_document,
    load_document_from_path,
    prepare_content_part,
    prepare_content_parts,
)


class TestDetectDocumentKind:
    """Tests for format detection."""

    @pytest.mark.parametrize("name,mime_type,expected", [
        ("paper.pdf", "application/pdf", DocumentKind.PDF),
        ("paper.PDF", "", DocumentKind.PDF),
        ("notes.txt", "text/plain", DocumentKind.TEXT),
        ("notes.md", None, DocumentKind.TEXT),
        ("draft.tex", "application/x-tex", DocumentKind.TEXT),
        ("draft.latex", "application/octet-stream", DocumentKind.TEXT),
        ("readme", "text/markdown; charset=utf-8", DocumentKind.TEXT),
        ("report.docx", "application/vnd.openxmlformats-officedocument", DocumentKind.OTHER),
        ("figure.png", "image/png", DocumentKind.OTHER),
    ])
    def test_detection(self, name, mime_type, expected):
        assert detect_document_kind(name, mime_type) == expected

    def test_guess_mime_type(self):
        assert guess_mime_type("a.pdf") == PDF_MIME_TYPE
        assert guess_mime_type("a.md") == "text/markdown"
        assert guess_mime_type("a.xyz") == "application/octet-stream"


class TestLoadDocument:
    """Tests for upload validation."""

    def test_accepts_pdf(self):
        document = load_document("paper.pdf", "application/pdf", b"%PDF-1.4")
        assert document.kind == DocumentKind.PDF
        assert document.has_data

    def test_missing_mime_type_is_guessed(self):
        document = load_document("notes.md", None, b"# Notes")
        assert document.mime_type == "text/markdown"

    def test_rejects_unsupported_format(self):
        with pytest.raises(UnsupportedDocumentError) as exc_info:
            load_document("report.docx", "application/msword", b"data")

        message = exc_info.value.message
        assert message.startswith("File report.docx is skipped.")
        assert "PDF" in message and "LaTeX" in message

    def test_rejects_empty_payload(self):
        with pytest.raises(DocumentValidationError, match="empty"):
            load_document("notes.txt", "text/plain", b"")

    def test_load_from_path(self, tmp_path):
        path = tmp_path / "notes.tex"
        path.write_text(r"\section{Intro}", encoding="utf-8")

        document = load_document_from_path(path)

        assert document.name == "notes.tex"
        assert document.kind == DocumentKind.TEXT

    def test_load_missing_path(self, tmp_path):
        with pytest.raises(DocumentValidationError, match="File not found"):
            load_document_from_path(tmp_path / "missing.pdf")


class TestEnsureDocumentsHaveData:
    """Tests for the pre-call data check."""

    def test_empty_set(self):
        with pytest.raises(DocumentValidationError):
            ensure_documents_have_data([])

    def test_missing_payload(self, text_document):
        hollow = SourceDocument(name="lost.pdf", kind=DocumentKind.PDF)
        with pytest.raises(DocumentValidationError, match="lost.pdf"):
            ensure_documents_have_data([text_document, hollow])

    def test_complete_set(self, pdf_document, text_document):
        ensure_documents_have_data([pdf_document, text_document])


class TestPrepareContentParts:
    """Tests for content part conversion."""

    def test_pdf_becomes_binary_part(self, pdf_document):
        part = prepare_content_part(pdf_document)
        assert part.kind == PartKind.BINARY
        assert part.mime_type == PDF_MIME_TYPE
        assert part.data == pdf_document.raw_bytes

    def test_text_is_wrapped_with_source_header(self, text_document):
        part = prepare_content_part(text_document)
        assert part.kind == PartKind.TEXT
        assert part.text == "[Source Document: notes.md]\n# Notes\nSensors cover 10% of the grid.\n---"

    def test_format_text_part(self):
        assert format_text_part("a.txt", "body") == "[Source Document: a.txt]\nbody\n---"

    def test_undecodable_text_yields_empty_body(self, caplog):
        document = SourceDocument(name="bad.txt", kind=DocumentKind.TEXT, raw_bytes=b"\xff\xfe\xfa")

        with caplog.at_level(logging.WARNING, logger="src.tools.attachments"):
            part = prepare_content_part(document)

        assert part.text == "[Source Document: bad.txt]\n\n---"
        assert "Failed to decode" in caplog.text

    def test_other_documents_are_dropped(self, pdf_document, text_document):
        other = SourceDocument(name="image.png", kind=DocumentKind.OTHER, raw_bytes=b"png")

        parts = prepare_content_parts([pdf_document, other, text_document])

        assert [p.kind for p in parts] == [PartKind.BINARY, PartKind.TEXT]

    def test_one_part_per_document(self, make_text_documents):
        assert len(prepare_content_parts(make_text_documents(2))) == 2
