"""Tests for the analysis workflow graph and its routing."""

import pytest

from src.errors import DocumentValidationError, TaskFailedError
from src.graphs import WORKFLOW_NODES, create_analysis_workflow, route_by_condensation_mode
from src.state.enums import CondensationMode, ModelTier, PartKind
from src.state.schema import create_initial_state


class TestRouting:
    """Tests for condensation mode routing."""

    def test_direct(self):
        assert route_by_condensation_mode({"condensation_mode": CondensationMode.DIRECT}) == "prepare_documents"

    def test_map_reduce(self):
        state = {"condensation_mode": CondensationMode.MAP_REDUCE, "documents": []}
        assert route_by_condensation_mode(state) == "condense_documents"

    def test_missing_mode_defaults_to_direct(self):
        assert route_by_condensation_mode({}) == "prepare_documents"


class TestAnalysisWorkflow:
    """Tests for the compiled graph."""

    def test_graph_nodes(self, fake_provider):
        workflow = create_analysis_workflow(fake_provider)
        nodes = set(workflow.get_graph().nodes)
        assert set(WORKFLOW_NODES) <= nodes

    async def test_direct_mode(self, fake_provider, pdf_document, text_document, recording_sleep):
        workflow = create_analysis_workflow(fake_provider, threshold=2, sleep=recording_sleep)

        result = await workflow.ainvoke(create_initial_state([pdf_document, text_document]))

        assert result["condensation_mode"] == CondensationMode.DIRECT
        assert len(result["parts"]) == 2
        assert result["summaries_requested"] == 0
        assert result["analysis"].title
        # Both documents attached to the single analysis call
        assert len(fake_provider.calls) == 1
        kinds = [p.kind for p in fake_provider.calls[0].parts]
        assert kinds == [PartKind.BINARY, PartKind.TEXT, PartKind.TEXT]

    async def test_map_reduce_summarizes_before_analysis(
        self, fake_provider, make_text_documents, recording_sleep
    ):
        workflow = create_analysis_workflow(fake_provider, threshold=2, pause=0.5, sleep=recording_sleep)

        result = await workflow.ainvoke(create_initial_state(make_text_documents(3)))

        assert result["condensation_mode"] == CondensationMode.MAP_REDUCE
        assert result["summaries_requested"] == 3
        assert len(result["parts"]) == 1
        tasks = [
            "analysis" if c.json_schema else "summarization"
            for c in fake_provider.calls
        ]
        assert tasks == ["summarization"] * 3 + ["analysis"]
        assert [c.tier for c in fake_provider.calls[:3]] == [ModelTier.FAST] * 3
        assert recording_sleep.delays == [0.5, 0.5]

    async def test_empty_document_set_rejected_before_calls(self, fake_provider):
        workflow = create_analysis_workflow(fake_provider)

        with pytest.raises(DocumentValidationError):
            await workflow.ainvoke(create_initial_state([]))

        assert fake_provider.calls == []

    async def test_analysis_failure_propagates(self, make_provider, text_document, recording_sleep):
        provider = make_provider(script={
            ModelTier.PREFERRED: ["{}"],
            ModelTier.FAST: ["{}"],
        })
        workflow = create_analysis_workflow(provider, sleep=recording_sleep)

        with pytest.raises(TaskFailedError, match="analysis failed after retries"):
            await workflow.ainvoke(create_initial_state([text_document]))

    async def test_map_reduce_without_summaries_rejected_before_analysis(
        self, make_provider, make_text_documents, recording_sleep
    ):
        def handler(request):
            if request.json_schema:
                return "{}"
            raise RuntimeError("400 Invalid request")

        provider = make_provider(handler=handler)
        workflow = create_analysis_workflow(provider, threshold=2, sleep=recording_sleep)

        with pytest.raises(DocumentValidationError):
            await workflow.ainvoke(create_initial_state(make_text_documents(3)))

        assert all(not c.json_schema for c in provider.calls)
        assert len(provider.calls) == 3
