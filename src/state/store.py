"""Derived-state consistency for a drafting session.

Every change to the session is a pure function ``SessionState -> SessionState``
applied by ``SessionStore.commit`` to the latest state. Commits run without
suspension points, so on a single event loop a commit can never interleave
with another and never works on a stale snapshot.

Drafting requests are tagged with a per-section sequence number. A new
request for a section supersedes any request in flight; completions whose
sequence number is not the latest issued are discarded.
"""

import logging
from datetime import datetime, timezone
from typing import Callable

from src.state.enums import ChatRole, SectionKind, SectionStatus
from src.state.models import (
    AnalysisResult,
    ChatTurn,
    ManuscriptSection,
    SessionState,
    SourceDocument,
)

logger = logging.getLogger(__name__)

StateUpdate = Callable[[SessionState], SessionState]
Listener = Callable[[SessionState], None]


# =============================================================================
# Section Updates
# =============================================================================


def replace_section(state: SessionState, section: ManuscriptSection) -> SessionState:
    """Return *state* with the section of the same id replaced."""
    if state.get_section(section.id) is None:
        raise KeyError(f"Unknown section: {section.id}")
    sections = tuple(section if s.id == section.id else s for s in state.sections)
    return state.model_copy(update={"sections": sections})


def _update_section(state: SessionState, section_id: str, **changes) -> SessionState:
    section = state.get_section(section_id)
    if section is None:
        raise KeyError(f"Unknown section: {section_id}")
    changes.setdefault("updated_at", datetime.now(timezone.utc))
    return replace_section(state, section.model_copy(update=changes))


def _bump_sequence(state: SessionState, section_id: str) -> tuple[SessionState, int]:
    sequence = state.section_sequence.get(section_id, 0) + 1
    sequences = {**state.section_sequence, section_id: sequence}
    return state.model_copy(update={"section_sequence": sequences}), sequence


def is_latest_request(state: SessionState, section_id: str, sequence: int) -> bool:
    """Whether *sequence* is the latest drafting request issued for the section."""
    return state.section_sequence.get(section_id, 0) == sequence


def _settled_status(section: ManuscriptSection) -> SectionStatus:
    """Status a section returns to when a draft does not land."""
    if section.previous_status is not None:
        return section.previous_status
    return SectionStatus.DRAFTED if section.content else SectionStatus.EMPTY


def begin_section_draft(state: SessionState, section_id: str) -> tuple[SessionState, int]:
    """Mark a section as generating and issue a new request sequence number."""
    section = state.get_section(section_id)
    if section is None:
        raise KeyError(f"Unknown section: {section_id}")
    state, sequence = _bump_sequence(state, section_id)
    previous = section.previous_status if section.is_generating else section.status
    state = _update_section(
        state,
        section_id,
        status=SectionStatus.GENERATING,
        previous_status=previous,
        last_error=None,
    )
    return state, sequence


def complete_section_draft(
    state: SessionState,
    section_id: str,
    sequence: int,
    content: str,
) -> SessionState:
    """Store drafted content if *sequence* is still the latest request."""
    if not is_latest_request(state, section_id, sequence):
        logger.info(f"Discarding stale draft for {section_id} (request {sequence})")
        return state
    return _update_section(
        state,
        section_id,
        content=content,
        status=SectionStatus.DRAFTED,
        previous_status=None,
        last_error=None,
    )


def fail_section_draft(
    state: SessionState,
    section_id: str,
    sequence: int,
    message: str,
) -> SessionState:
    """Record a drafting failure, leaving the prior content unchanged."""
    if not is_latest_request(state, section_id, sequence):
        logger.info(f"Discarding stale failure for {section_id} (request {sequence})")
        return state
    section = state.get_section(section_id)
    return _update_section(
        state,
        section_id,
        status=_settled_status(section),
        previous_status=None,
        last_error=message,
    )


def edit_section(state: SessionState, section_id: str, content: str) -> SessionState:
    """Apply a manual edit. Supersedes any drafting request in flight."""
    section = state.get_section(section_id)
    if section is None:
        raise KeyError(f"Unknown section: {section_id}")
    if section.is_generating:
        state, _ = _bump_sequence(state, section_id)
    return _update_section(
        state,
        section_id,
        content=content,
        status=SectionStatus.EDITED if content else SectionStatus.EMPTY,
        previous_status=None,
        last_error=None,
    )


def set_section_notes(state: SessionState, section_id: str, notes: str) -> SessionState:
    """Replace the free-form notes of a section."""
    return _update_section(state, section_id, notes=notes)


# =============================================================================
# Documents and Chat
# =============================================================================


def add_documents(state: SessionState, documents: list[SourceDocument]) -> SessionState:
    """Append uploaded documents, keeping upload order."""
    return state.model_copy(update={"documents": state.documents + tuple(documents)})


def remove_document(state: SessionState, name: str) -> SessionState:
    """Drop every document with the given name."""
    remaining = tuple(d for d in state.documents if d.name != name)
    return state.model_copy(update={"documents": remaining})


def append_chat_turn(state: SessionState, role: ChatRole, text: str) -> SessionState:
    """Append one turn to the advisory transcript."""
    turn = ChatTurn(role=role, text=text)
    return state.model_copy(update={"chat_history": state.chat_history + (turn,)})


# =============================================================================
# Analysis
# =============================================================================


def begin_analysis(state: SessionState) -> tuple[SessionState, int]:
    """Issue a new analysis request sequence number."""
    sequence = state.analysis_sequence + 1
    state = state.model_copy(update={
        "analysis_sequence": sequence,
        "analysis_in_flight": True,
        "last_error": None,
    })
    return state, sequence


def complete_analysis(
    state: SessionState,
    sequence: int,
    analysis: AnalysisResult,
) -> SessionState:
    """Replace the analysis and title if *sequence* is still the latest."""
    if state.analysis_sequence != sequence:
        logger.info(f"Discarding stale analysis result (request {sequence})")
        return state
    state = state.model_copy(update={
        "analysis": analysis,
        "analysis_in_flight": False,
        "last_error": None,
    })
    title_id = SectionKind.TITLE.section_id
    title = state.get_section(title_id)
    if title is not None and title.is_generating:
        state, _ = _bump_sequence(state, title_id)
    return _update_section(
        state,
        title_id,
        content=f"# {analysis.title}",
        status=SectionStatus.DRAFTED,
        last_error=None,
    )


def fail_analysis(state: SessionState, sequence: int, message: str) -> SessionState:
    """Record a user-visible analysis failure if *sequence* is still the latest."""
    if state.analysis_sequence != sequence:
        return state
    return state.model_copy(update={"analysis_in_flight": False, "last_error": message})


# =============================================================================
# Store
# =============================================================================


class SessionStore:
    """Single owner of the session state.

    Readers get immutable snapshots through ``state``. Writers pass a pure
    update function to ``commit``, which is applied to the latest state.
    """

    def __init__(self, initial: SessionState | None = None):
        self._state = initial or SessionState()
        self._listeners: list[Listener] = []
        self.commit_count = 0

    @property
    def state(self) -> SessionState:
        """Current immutable snapshot."""
        return self._state

    def commit(self, update: StateUpdate) -> SessionState:
        """Apply *update* to the latest state and notify listeners."""
        new_state = update(self._state)
        if new_state is self._state:
            return new_state
        self._state = new_state
        self.commit_count += 1
        for listener in list(self._listeners):
            listener(new_state)
        return new_state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe
