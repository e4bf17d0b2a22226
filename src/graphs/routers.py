"""Routing functions for the analysis workflow graph.

Kept separate from the graph definition so routing decisions can be
tested without building a graph.
"""

import logging
from typing import Literal

from src.state.enums import CondensationMode
from src.state.schema import AnalysisWorkflowState

logger = logging.getLogger(__name__)


def route_by_condensation_mode(
    state: AnalysisWorkflowState,
) -> Literal["prepare_documents", "condense_documents"]:
    """
    Route to direct inclusion or map-reduce condensation.

    Args:
        state: Current workflow state with ``condensation_mode`` set

    Returns:
        Name of the document preparation node
    """
    mode = state.get("condensation_mode", CondensationMode.DIRECT)
    if mode == CondensationMode.MAP_REDUCE:
        logger.debug(f"Routing {len(state.get('documents', []))} documents to map-reduce")
        return "condense_documents"
    return "prepare_documents"
