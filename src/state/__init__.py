"""State management for Novus Academica sessions."""

from src.state.enums import (
    ChatRole,
    CondensationMode,
    DocumentKind,
    ModelTier,
    PartKind,
    ResponseFormat,
    SectionKind,
    SectionStatus,
    TransformKind,
)
from src.state.models import (
    AnalysisResult,
    ChatTurn,
    ContentPart,
    DraftingContext,
    IngestionReport,
    ManuscriptSection,
    ProviderRequest,
    ProviderResponse,
    QualityChecklist,
    SectionExcerpt,
    SessionState,
    SourceDocument,
)
from src.state.schema import AnalysisWorkflowState, create_initial_state
from src.state.store import SessionStore

__all__ = [
    # Enums
    "ChatRole",
    "CondensationMode",
    "DocumentKind",
    "ModelTier",
    "PartKind",
    "ResponseFormat",
    "SectionKind",
    "SectionStatus",
    "TransformKind",
    # Models
    "AnalysisResult",
    "ChatTurn",
    "ContentPart",
    "DraftingContext",
    "IngestionReport",
    "ManuscriptSection",
    "ProviderRequest",
    "ProviderResponse",
    "QualityChecklist",
    "SectionExcerpt",
    "SessionState",
    "SourceDocument",
    # Workflow state
    "AnalysisWorkflowState",
    "create_initial_state",
    # Store
    "SessionStore",
]
