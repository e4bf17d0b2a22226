"""Test configuration and fixtures.

Provides a deterministic CompletionProvider, a recording sleep and sample
documents and blueprints shared by unit and integration tests.
"""

import json
from collections import defaultdict
from typing import Any, Callable

import pytest

from src.state.enums import DocumentKind, ModelTier, ResponseFormat, SectionKind
from src.state.models import (
    AnalysisResult,
    ProviderRequest,
    ProviderResponse,
    SessionState,
    SourceDocument,
)
from src.state.store import SessionStore


# =============================================================================
# Canned Responses
# =============================================================================


SAMPLE_ANALYSIS: dict[str, Any] = {
    "title": "Physics-Informed Graph Networks for Sparse Sensor Forecasting",
    "target_journal": "IEEE Transactions on Neural Networks and Learning Systems",
    "gap": "Existing forecasters ignore conservation laws when sensors are sparse.",
    "novelty": "- A conservation-constrained message passing layer\n- A sparse-sensor benchmark",
    "methodology_plan": "Minimize $L_{total} = L_{data} + \\lambda L_{physics}$ over a sensor graph.",
    "expected_results": "Forecast error drops by 20% with 10% sensor coverage.",
    "checklist": {
        "novelty_check": "The combination of graph learning and conservation penalties is new.",
        "significance_check": "Sparse sensing is the norm in deployed infrastructure.",
        "clarity_check": "The problem is stated in one sentence.",
        "journal_fit_check": "The venue publishes learning-systems methodology.",
    },
    "references": ["Battaglia et al. (2018). Relational inductive biases."],
}

SUMMARY_TEXT = (
    "RESEARCH QUESTION: How to forecast with sparse sensors.\n"
    "METHODOLOGY: Graph neural networks.\n"
    "FINDINGS: 12% lower error.\n"
    "CITATIONS: Kipf and Welling (2017)."
)
DRAFT_TEXT = "Sparse sensor networks are the norm in deployed infrastructure [1]."
TRANSFORM_TEXT = "Refined paragraph with the technical details kept."
ADVICE_TEXT = "Strengthen the baseline comparison before submission."


def request_task(request: ProviderRequest) -> str:
    """Classify a request by the task that issued it."""
    if request.response_format == ResponseFormat.JSON:
        return "analysis"
    prompt = request.prompt_text
    if "Summarize the attached source document" in prompt:
        return "summarization"
    if "Refine the following text" in prompt:
        return "transform"
    if "AUTHOR'S QUESTION" in prompt:
        return "advisory"
    if "TASK: Write the" in prompt:
        return "drafting"
    return "unknown"


def default_response(request: ProviderRequest) -> str:
    """A well-formed reply for every task."""
    return {
        "analysis": json.dumps(SAMPLE_ANALYSIS),
        "summarization": SUMMARY_TEXT,
        "transform": TRANSFORM_TEXT,
        "advisory": ADVICE_TEXT,
        "drafting": DRAFT_TEXT,
    }.get(request_task(request), "OK")


# =============================================================================
# Fake Provider
# =============================================================================


Outcome = str | BaseException


class FakeProvider:
    """Deterministic CompletionProvider.

    Outcomes are taken, in order, from the script for the request's tier;
    the last scripted outcome repeats. Without a script the handler (or
    ``default_response``) decides. Exceptions are raised instead of returned.
    """

    def __init__(
        self,
        script: dict[ModelTier, list[Outcome]] | None = None,
        handler: Callable[[ProviderRequest], Outcome] | None = None,
    ):
        self.script = {tier: list(outcomes) for tier, outcomes in (script or {}).items()}
        self.handler = handler or default_response
        self.calls: list[ProviderRequest] = []
        self._served: dict[ModelTier, int] = defaultdict(int)

    async def complete(self, request: ProviderRequest) -> ProviderResponse:
        self.calls.append(request)
        outcomes = self.script.get(request.tier)
        if outcomes:
            index = min(self._served[request.tier], len(outcomes) - 1)
            self._served[request.tier] += 1
            outcome = outcomes[index]
        else:
            outcome = self.handler(request)

        if isinstance(outcome, BaseException):
            raise outcome
        return ProviderResponse(text=outcome, tier=request.tier)

    @property
    def tiers(self) -> list[ModelTier]:
        return [c.tier for c in self.calls]

    def calls_for(self, task: str) -> list[ProviderRequest]:
        return [c for c in self.calls if request_task(c) == task]


class RecordingSleep:
    """Awaitable sleep that records requested delays without waiting."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def fake_provider():
    return FakeProvider()


@pytest.fixture
def make_provider():
    """Factory for FakeProvider with a per-tier script or a handler."""
    return FakeProvider


@pytest.fixture
def analysis_payload():
    """Blueprint JSON as the provider returns it."""
    return json.loads(json.dumps(SAMPLE_ANALYSIS))


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
def pdf_document():
    return SourceDocument(
        name="graph_forecasting.pdf",
        kind=DocumentKind.PDF,
        mime_type="application/pdf",
        raw_bytes=b"%PDF-1.4\n1 0 obj\n<< /Type /Catalog >>\nendobj\n%%EOF",
    )


@pytest.fixture
def text_document():
    return SourceDocument(
        name="notes.md",
        kind=DocumentKind.TEXT,
        mime_type="text/markdown",
        raw_bytes=b"# Notes\nSensors cover 10% of the grid.",
    )


@pytest.fixture
def make_text_documents():
    """Factory for N small text documents."""
    def _create(count: int) -> list[SourceDocument]:
        return [
            SourceDocument(
                name=f"source_{i}.txt",
                kind=DocumentKind.TEXT,
                mime_type="text/plain",
                raw_bytes=f"Findings of study {i}.".encode(),
            )
            for i in range(count)
        ]
    return _create


@pytest.fixture
def sample_analysis():
    return AnalysisResult.model_validate(SAMPLE_ANALYSIS)


@pytest.fixture
def analyzed_store(sample_analysis, pdf_document, text_document):
    """Store holding two documents, a blueprint and the title section."""
    state = SessionState(documents=(pdf_document, text_document), analysis=sample_analysis)
    title_id = SectionKind.TITLE.section_id
    sections = tuple(
        s.model_copy(update={"content": f"# {sample_analysis.title}"}) if s.id == title_id else s
        for s in state.sections
    )
    return SessionStore(state.model_copy(update={"sections": sections}))
