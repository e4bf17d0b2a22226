"""AnalysisWorkflowState schema for the novelty/gap analysis graph.

This module defines the state object that flows through the nodes of the
LangGraph analysis workflow. It uses TypedDict with optional fields so each
node returns only the keys it updates.
"""

from typing import Any

from typing_extensions import TypedDict

from src.state.enums import CondensationMode
from src.state.models import AnalysisResult, ContentPart, SourceDocument


class AnalysisWorkflowState(TypedDict, total=False):
    """
    State schema for the analysis workflow.

    The graph runs:
    1. Routing - direct inclusion or map-reduce, by document count
    2. Document preparation - content parts or condensed summaries
    3. Analysis - one structured request producing the blueprint

    Usage with LangGraph:
        ```python
        from src.graphs import create_analysis_workflow

        workflow = create_analysis_workflow(provider)
        result = await workflow.ainvoke(create_initial_state(documents))
        result["analysis"]
        ```
    """

    # Inputs
    documents: list[SourceDocument]

    # Routing decision
    condensation_mode: CondensationMode

    # Content attached to the analysis request
    parts: list[ContentPart]

    # Number of summarization calls issued in map-reduce mode
    summaries_requested: int

    # Output
    analysis: AnalysisResult | None

    # Diagnostics
    warnings: list[str]


def create_initial_state(documents: list[SourceDocument]) -> AnalysisWorkflowState:
    """Create the initial workflow state for a document set."""
    return AnalysisWorkflowState(
        documents=list(documents),
        parts=[],
        summaries_requested=0,
        analysis=None,
        warnings=[],
    )


def summarize_state(state: AnalysisWorkflowState) -> dict[str, Any]:
    """Compact description of a workflow state for logging."""
    mode = state.get("condensation_mode")
    return {
        "documents": len(state.get("documents", [])),
        "mode": mode.value if mode else None,
        "parts": len(state.get("parts", [])),
        "summaries_requested": state.get("summaries_requested", 0),
        "has_analysis": state.get("analysis") is not None,
    }
