"""Graph definitions and workflow assembly for Novus Academica."""

from src.graphs.analysis_workflow import WORKFLOW_NODES, create_analysis_workflow
from src.graphs.routers import route_by_condensation_mode

__all__ = [
    "WORKFLOW_NODES",
    "create_analysis_workflow",
    "route_by_condensation_mode",
]
