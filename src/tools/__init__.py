"""Document tools for Novus Academica.

- attachments: upload validation and provider content parts
- condensation: direct inclusion vs map-reduce summarization
"""

from src.tools.attachments import (
    decode_text,
    detect_document_kind,
    ensure_documents_have_data,
    load_document,
    load_document_from_path,
    prepare_content_part,
    prepare_content_parts,
)
from src.tools.condensation import (
    CondensedDocuments,
    condense_documents,
    select_condensation_mode,
    select_drafting_documents,
    summarize_document,
)

__all__ = [
    # Attachments
    "decode_text",
    "detect_document_kind",
    "ensure_documents_have_data",
    "load_document",
    "load_document_from_path",
    "prepare_content_part",
    "prepare_content_parts",
    # Condensation
    "CondensedDocuments",
    "condense_documents",
    "select_condensation_mode",
    "select_drafting_documents",
    "summarize_document",
]
