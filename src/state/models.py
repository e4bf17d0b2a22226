"""Pydantic models for Novus Academica session state.

These models define the data structures used throughout the manuscript
pipeline, from uploaded source documents through analysis metadata,
section drafts and the advisory chat transcript.
"""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from src.state.enums import (
    ChatRole,
    DocumentKind,
    ModelTier,
    PartKind,
    ResponseFormat,
    SectionKind,
    SectionStatus,
    INITIAL_SECTIONS,
)


def _utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


# =============================================================================
# Source Documents
# =============================================================================


class SourceDocument(BaseModel):
    """An uploaded research document. Immutable once uploaded."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Original file name")
    kind: DocumentKind = Field(..., description="Recognized document kind")
    mime_type: str = Field(
        default="application/octet-stream",
        description="Declared media type at upload time"
    )
    raw_bytes: bytes = Field(
        default=b"",
        repr=False,
        description="File payload"
    )

    @property
    def has_data(self) -> bool:
        """Whether the payload is present."""
        return len(self.raw_bytes) > 0


class ContentPart(BaseModel):
    """A provider-consumable piece of request content. Never persisted."""

    model_config = ConfigDict(frozen=True)

    kind: PartKind
    mime_type: str = "text/plain"
    data: bytes = Field(default=b"", repr=False)
    text: str = ""

    @model_validator(mode="after")
    def check_payload(self) -> "ContentPart":
        """Binary parts carry bytes; text parts carry text."""
        if self.kind == PartKind.BINARY and not self.data:
            raise ValueError("binary content part requires data")
        return self

    @classmethod
    def from_text(cls, text: str) -> "ContentPart":
        """Build a text part."""
        return cls(kind=PartKind.TEXT, text=text)

    @classmethod
    def from_bytes(cls, data: bytes, mime_type: str) -> "ContentPart":
        """Build an inline binary part."""
        return cls(kind=PartKind.BINARY, mime_type=mime_type, data=data)


# =============================================================================
# Analysis Result
# =============================================================================


class QualityChecklist(BaseModel):
    """Reviewer-focus self assessment returned by the analysis task."""

    model_config = ConfigDict(frozen=True)

    novelty_check: str = Field(..., description="Is the combination of ideas unique?")
    significance_check: str = Field(..., description="Is the expected impact high enough?")
    clarity_check: str = Field(..., description="Is the problem statement clear?")
    journal_fit_check: str = Field(..., description="Why the work fits the venue's scope")


class AnalysisResult(BaseModel):
    """Manuscript blueprint produced by the novelty/gap analysis.

    Each analysis run fully replaces the previous result.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str = Field(..., min_length=1, description="Working manuscript title")
    target_venue: str = Field(
        ...,
        alias="target_journal",
        description="Specific target journal or conference"
    )
    gap: str = Field(..., description="Research gap (state-of-the-art limitations)")
    novelty: str = Field(..., description="Contribution statement")
    methodology_plan: str = Field(..., description="Architecture and rigor plan")
    expected_results: str = Field(..., description="Main claim the results should support")
    checklist: QualityChecklist
    references: list[str] = Field(
        default_factory=list,
        description="References extracted from the sources, in order"
    )


# =============================================================================
# Manuscript Sections
# =============================================================================


class ManuscriptSection(BaseModel):
    """One manuscript section. Exactly one exists per section kind."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Stable section identifier")
    kind: SectionKind
    content: str = ""
    status: SectionStatus = SectionStatus.EMPTY
    previous_status: SectionStatus | None = Field(
        default=None,
        description="Status before the latest drafting request began"
    )
    notes: str = ""
    last_error: str | None = Field(
        default=None,
        description="User-visible message from the last failed drafting attempt"
    )
    updated_at: datetime = Field(default_factory=_utc_now)

    @property
    def is_generating(self) -> bool:
        """True while the latest drafting request is in flight."""
        return self.status == SectionStatus.GENERATING

    @property
    def title(self) -> str:
        """Display title of the section."""
        return self.kind.value

    @classmethod
    def empty(cls, kind: SectionKind) -> "ManuscriptSection":
        """Create the initial, empty section for *kind*."""
        return cls(id=kind.section_id, kind=kind)


# =============================================================================
# Advisory Dialogue
# =============================================================================


class ChatTurn(BaseModel):
    """A single turn in the advisory dialogue."""

    model_config = ConfigDict(frozen=True)

    role: ChatRole
    text: str
    timestamp: datetime = Field(default_factory=_utc_now)


# =============================================================================
# Session State
# =============================================================================


def _initial_sections() -> tuple[ManuscriptSection, ...]:
    return tuple(ManuscriptSection.empty(kind) for kind in INITIAL_SECTIONS)


class SessionState(BaseModel):
    """Aggregate owning everything a drafting session works on.

    Instances are immutable. All changes go through
    ``src.state.store.SessionStore.commit`` as pure functional updates.
    """

    model_config = ConfigDict(frozen=True)

    documents: tuple[SourceDocument, ...] = ()
    analysis: AnalysisResult | None = None
    sections: tuple[ManuscriptSection, ...] = Field(default_factory=_initial_sections)
    chat_history: tuple[ChatTurn, ...] = ()

    # Request bookkeeping for stale-response rejection
    section_sequence: dict[str, int] = Field(default_factory=dict)
    analysis_sequence: int = 0
    analysis_in_flight: bool = False

    # User-visible error from the last failed analysis
    last_error: str | None = None

    @model_validator(mode="after")
    def check_unique_sections(self) -> "SessionState":
        """Section ids must be unique."""
        ids = [s.id for s in self.sections]
        if len(ids) != len(set(ids)):
            raise ValueError("section ids must be unique")
        return self

    def get_section(self, section_id: str) -> ManuscriptSection | None:
        """Look up a section by id."""
        for section in self.sections:
            if section.id == section_id:
                return section
        return None

    def get_section_by_kind(self, kind: SectionKind) -> ManuscriptSection:
        """Look up the section of a given kind."""
        section = self.get_section(kind.section_id)
        if section is None:
            raise KeyError(kind.value)
        return section

    @property
    def has_analysis(self) -> bool:
        """Whether an analysis result is available."""
        return self.analysis is not None

    @property
    def generating_sections(self) -> list[str]:
        """Ids of sections with a drafting request in flight."""
        return [s.id for s in self.sections if s.is_generating]


# =============================================================================
# Provider Contract
# =============================================================================


class ProviderRequest(BaseModel):
    """One call to the text generation capability."""

    model_config = ConfigDict(frozen=True)

    tier: ModelTier = ModelTier.PREFERRED
    parts: tuple[ContentPart, ...] = ()
    response_format: ResponseFormat = ResponseFormat.TEXT
    json_schema: dict[str, Any] | None = None

    @model_validator(mode="after")
    def check_schema(self) -> "ProviderRequest":
        """JSON requests carry the schema they must conform to."""
        if self.response_format == ResponseFormat.JSON and not self.json_schema:
            raise ValueError("json response format requires a json_schema")
        return self

    def with_tier(self, tier: ModelTier) -> "ProviderRequest":
        """Return the same request addressed to another tier."""
        return self.model_copy(update={"tier": tier})

    @property
    def prompt_text(self) -> str:
        """All text parts joined, for logging and tests."""
        return "\n".join(p.text for p in self.parts if p.kind == PartKind.TEXT)


class ProviderResponse(BaseModel):
    """Text returned by the generation capability."""

    model_config = ConfigDict(frozen=True)

    text: str = ""
    tier: ModelTier | None = None


# =============================================================================
# Drafting Context
# =============================================================================


class SectionExcerpt(BaseModel):
    """Truncated content of another section, used as drafting context."""

    model_config = ConfigDict(frozen=True)

    kind: SectionKind
    excerpt: str


class DraftingContext(BaseModel):
    """Context passed to the section writer."""

    model_config = ConfigDict(frozen=True)

    section_kind: SectionKind
    title: str = Field(default="", description="Working title")
    target_venue: str = Field(default="", description="Target journal")
    gap: str = Field(default="", description="Research gap")
    novelty: str = Field(default="", description="Contribution statement")
    methodology_plan: str = Field(default="", description="Methodology plan")
    expected_results: str = Field(default="", description="Expected claim")
    other_sections: tuple[SectionExcerpt, ...] = ()
    documents: tuple[SourceDocument, ...] = ()


class IngestionReport(BaseModel):
    """Outcome of adding uploaded files to a session."""

    accepted: list[str] = Field(default_factory=list)
    rejected: list[str] = Field(
        default_factory=list,
        description="One user-visible message per rejected file"
    )
