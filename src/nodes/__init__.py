"""Pipeline nodes for Novus Academica."""

from src.nodes.gap_identifier import (
    ANALYSIS_JSON_SCHEMA,
    ANALYSIS_PROMPT,
    analyze_documents,
    build_analysis_request,
    parse_analysis_response,
)
from src.nodes.writer import check_can_draft, draft_section, draft_sections
from src.nodes.editor import TRANSFORM_INSTRUCTIONS, build_transform_request, transform_text
from src.nodes.advisor import (
    ADVISOR_UNAVAILABLE_MESSAGE,
    advise,
    build_advisor_prompt,
    recent_history,
)

__all__ = [
    # Analysis
    "ANALYSIS_JSON_SCHEMA",
    "ANALYSIS_PROMPT",
    "analyze_documents",
    "build_analysis_request",
    "parse_analysis_response",
    # Drafting
    "check_can_draft",
    "draft_section",
    "draft_sections",
    # Transforms
    "TRANSFORM_INSTRUCTIONS",
    "build_transform_request",
    "transform_text",
    # Advisory dialogue
    "ADVISOR_UNAVAILABLE_MESSAGE",
    "advise",
    "build_advisor_prompt",
    "recent_history",
]
