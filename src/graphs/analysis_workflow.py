"""Analysis workflow graph assembly.

This module provides the factory for the novelty/gap analysis graph:

    START -> select_mode -> prepare_documents  -> analyze -> END
                         -> condense_documents -^

Nodes are closures over the provider so the compiled graph carries no
global state and can be rebuilt per session or per test.
"""

import asyncio
import logging

from langgraph.graph import END, START, StateGraph

from src.config import settings
from src.errors.policies import RetryPolicy, Sleep
from src.graphs.routers import route_by_condensation_mode
from src.nodes.gap_identifier import analyze_documents
from src.providers.base import CompletionProvider
from src.state.schema import AnalysisWorkflowState, summarize_state
from src.tools.attachments import ensure_documents_have_data, prepare_content_parts
from src.tools.condensation import condense_documents, select_condensation_mode

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

WORKFLOW_NODES = [
    "select_mode",
    "prepare_documents",
    "condense_documents",
    "analyze",
]


# =============================================================================
# Factory
# =============================================================================


def create_analysis_workflow(
    provider: CompletionProvider,
    threshold: int | None = None,
    pause: float | None = None,
    policy: RetryPolicy | None = None,
    sleep: Sleep = asyncio.sleep,
):
    """
    Create the compiled analysis workflow.

    Args:
        provider: Text generation capability shared by every node
        threshold: Largest document count attached directly (default from settings)
        pause: Seconds between map-reduce summaries (default from settings)
        policy: Retry policy for the analysis request (default from settings)
        sleep: Awaitable sleep for pauses and backoff, injectable for tests

    Returns:
        Compiled LangGraph workflow. Invoke with
        ``await workflow.ainvoke(create_initial_state(documents))``.
    """
    if threshold is None:
        threshold = settings.condensation_threshold
    if pause is None:
        pause = settings.summary_pause

    def select_mode(state: AnalysisWorkflowState) -> dict:
        documents = state.get("documents", [])
        ensure_documents_have_data(documents)
        mode = select_condensation_mode(documents, threshold)
        logger.info(f"Analysis of {len(documents)} documents using {mode.value} mode")
        return {"condensation_mode": mode}

    async def prepare_documents(state: AnalysisWorkflowState) -> dict:
        parts = prepare_content_parts(state.get("documents", []))
        return {"parts": parts}

    async def condense(state: AnalysisWorkflowState) -> dict:
        condensed = await condense_documents(
            provider,
            state.get("documents", []),
            pause=pause,
            sleep=sleep,
        )
        warnings = list(state.get("warnings", []))
        warnings.extend(f"No summary for {name}" for name in condensed.skipped)
        return {
            "parts": [condensed.part] if condensed.part else [],
            "summaries_requested": condensed.summaries_requested,
            "warnings": warnings,
        }

    async def analyze(state: AnalysisWorkflowState) -> dict:
        logger.debug(f"Analyze node input: {summarize_state(state)}")
        analysis = await analyze_documents(
            provider,
            state.get("parts", []),
            policy=policy,
            sleep=sleep,
        )
        return {"analysis": analysis}

    workflow = StateGraph(AnalysisWorkflowState)

    workflow.add_node("select_mode", select_mode)
    workflow.add_node("prepare_documents", prepare_documents)
    workflow.add_node("condense_documents", condense)
    workflow.add_node("analyze", analyze)

    workflow.add_edge(START, "select_mode")
    workflow.add_conditional_edges(
        "select_mode",
        route_by_condensation_mode,
        {
            "prepare_documents": "prepare_documents",
            "condense_documents": "condense_documents",
        },
    )
    workflow.add_edge("prepare_documents", "analyze")
    workflow.add_edge("condense_documents", "analyze")
    workflow.add_edge("analyze", END)

    return workflow.compile()
