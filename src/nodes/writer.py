"""WRITER node for drafting manuscript sections.

This node:
1. Rejects drafting before an analysis blueprint exists
2. Marks the section as generating and tags the request with a sequence number
3. Drafts the section from the blueprint, other sections and source documents
4. Commits the draft, or an inline error with the prior content kept,
   only if the request is still the latest one for that section

A failure never affects other sections, and drafting never raises for
provider failures.
"""

import asyncio
import logging

from src.errors.exceptions import DocumentValidationError, MissingAnalysisError, WritingError
from src.errors.handlers import log_error_with_context, user_facing_message
from src.state.enums import SectionKind
from src.state.models import ManuscriptSection, SessionState
from src.state.store import (
    SessionStore,
    begin_section_draft,
    complete_section_draft,
    fail_section_draft,
)
from src.writers.base import SectionWriter, build_drafting_context

logger = logging.getLogger(__name__)


def check_can_draft(state: SessionState, section_id: str) -> ManuscriptSection:
    """
    Validate drafting preconditions.

    Raises:
        MissingAnalysisError: No blueprint yet.
        WritingError: Unknown section id.
        DocumentValidationError: A document's payload is missing.
    """
    if not state.has_analysis:
        raise MissingAnalysisError(
            "Run the manuscript analysis first.",
            operation="drafting",
        )
    section = state.get_section(section_id)
    if section is None:
        raise WritingError(f"Unknown section: {section_id}", section=section_id, recoverable=False)
    missing = [d.name for d in state.documents if not d.has_data]
    if missing:
        raise DocumentValidationError(
            f"File data is missing for {', '.join(missing)}. Re-upload files.",
            document=missing[0],
        )
    return section


async def draft_section(
    store: SessionStore,
    writer: SectionWriter,
    section_id: str,
    **kwargs,
) -> ManuscriptSection:
    """
    Draft one section and commit the result to the store.

    Args:
        store: Session state owner.
        writer: Section writer bound to a provider.
        section_id: Section to draft.
        **kwargs: Passed to ``SectionWriter.draft`` (e.g. ``sleep``).

    Returns:
        The section as committed after this request finished.

    Raises:
        MissingAnalysisError, WritingError, DocumentValidationError:
            Preconditions failed; no provider call was made.
    """
    section = check_can_draft(store.state, section_id)

    store.commit(lambda s: begin_section_draft(s, section_id)[0])
    sequence = store.state.section_sequence[section_id]

    # Read the latest state at request time, not a snapshot from the caller
    state = store.state
    context = build_drafting_context(
        section.kind,
        state.analysis,
        state.sections,
        state.documents,
        writer.config,
    )

    try:
        content = await writer.draft(context, **kwargs)
    except Exception as e:
        log_error_with_context(e, operation="drafting", context={"section": section_id})
        message = user_facing_message(e, f"Generating {section.kind.value}")
        store.commit(lambda s: fail_section_draft(s, section_id, sequence, message))
    else:
        store.commit(lambda s: complete_section_draft(s, section_id, sequence, content))

    return store.state.get_section(section_id)


async def draft_sections(
    store: SessionStore,
    writer: SectionWriter,
    section_ids: list[str] | None = None,
    **kwargs,
) -> list[ManuscriptSection]:
    """
    Draft several sections concurrently.

    Each section is tracked by its own generating flag; a failure in one
    leaves the others unaffected. Defaults to every section except the title.
    """
    if section_ids is None:
        section_ids = [
            s.id for s in store.state.sections if s.kind != SectionKind.TITLE
        ]
    for section_id in section_ids:
        check_can_draft(store.state, section_id)
    return list(await asyncio.gather(
        *(draft_section(store, writer, section_id, **kwargs) for section_id in section_ids)
    ))
