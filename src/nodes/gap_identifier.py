"""Novelty and gap analysis producing the manuscript blueprint.

This node:
1. Attaches the (possibly condensed) source documents
2. Asks the model for a structured blueprint: title, target venue,
   research gap, contribution, methodology plan, expected results,
   reviewer-focus checklist and references
3. Validates the structured output; an empty body or output that does not
   parse is a hard failure, never a default value
"""

import json
import logging
from typing import Any

from pydantic import ValidationError

from src.errors.exceptions import DocumentValidationError, MalformedResponseError
from src.errors.policies import RetryPolicy
from src.providers.base import CompletionProvider
from src.providers.router import ANALYSIS, run_with_fallback
from src.state.enums import ResponseFormat
from src.state.models import (
    AnalysisResult,
    ContentPart,
    ProviderRequest,
    ProviderResponse,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Schema and Prompt
# =============================================================================


CHECKLIST_FIELDS = (
    "novelty_check",
    "significance_check",
    "clarity_check",
    "journal_fit_check",
)

ANALYSIS_JSON_SCHEMA: dict[str, Any] = {
    "title": "manuscript_blueprint",
    "description": "Journal-ready manuscript blueprint synthesized from the sources.",
    "type": "object",
    "properties": {
        "title": {"type": "string"},
        "target_journal": {"type": "string"},
        "gap": {"type": "string"},
        "novelty": {"type": "string"},
        "methodology_plan": {"type": "string"},
        "expected_results": {"type": "string"},
        "checklist": {
            "type": "object",
            "properties": {name: {"type": "string"} for name in CHECKLIST_FIELDS},
            "required": list(CHECKLIST_FIELDS),
        },
        "references": {"type": "array", "items": {"type": "string"}},
    },
    "required": [
        "title",
        "target_journal",
        "gap",
        "novelty",
        "methodology_plan",
        "expected_results",
        "checklist",
    ],
}

ANALYSIS_PROMPT = """You are the Chief Publication Officer of a research group. Analyze the
provided resources and synthesize a complete, journal-ready manuscript blueprint.

GUIDELINES:
1. Preliminary analysis: identify the weaknesses and gaps of the current state of
   the art. If the resources are sparse, select a promising cross-domain topic
   that they support.
2. Target: select one specific high-impact venue.
3. Narrative: the blueprint must flow Problem -> Solution -> Validation -> Implication.

Return a JSON object containing:
1. title: informative, specific manuscript title
2. target_journal: the specific journal name
3. gap: the critical research gap (limitations of the state of the art)
4. novelty: the contribution, as bullet points of specific contributions
5. methodology_plan: brief on architecture and mathematical rigor (name the loss
   functions or estimators involved, e.g. $L_{total}$)
6. expected_results: one clear, testable claim
7. checklist: a reviewer-focus check with
   - novelty_check: is the combination of ideas unique?
   - significance_check: is the expected impact high enough for the venue?
   - clarity_check: is the problem statement clear and concise?
   - journal_fit_check: why does this fit the chosen journal's scope?
8. references: the works cited in the sources that the manuscript should build on,
   one formatted reference per entry (empty list if none)"""


def build_analysis_request(parts: list[ContentPart]) -> ProviderRequest:
    """Build the structured analysis request for prepared document parts."""
    if not parts:
        raise DocumentValidationError("No valid PDF or text files found to analyze.")
    return ProviderRequest(
        parts=(*parts, ContentPart.from_text(ANALYSIS_PROMPT)),
        response_format=ResponseFormat.JSON,
        json_schema=ANALYSIS_JSON_SCHEMA,
    )


# =============================================================================
# Response Parsing
# =============================================================================


def _strip_code_fence(text: str) -> str:
    """Remove a surrounding markdown code fence, if present."""
    stripped = text.strip()
    if stripped.startswith("```"):
        lines = stripped.split("\n")
        lines = lines[1:]
        if lines and lines[-1].strip().startswith("```"):
            lines = lines[:-1]
        stripped = "\n".join(lines).strip()
    return stripped


def parse_analysis_response(response: ProviderResponse) -> AnalysisResult:
    """
    Parse and validate a structured analysis response.

    Args:
        response: Provider response expected to hold the blueprint JSON.

    Returns:
        Validated AnalysisResult.

    Raises:
        MalformedResponseError: Empty body, invalid JSON, or missing fields.
    """
    if not response.text or not response.text.strip():
        raise MalformedResponseError("Empty response from AI", operation="analysis")

    raw = _strip_code_fence(response.text)
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise MalformedResponseError(
            f"Analysis response is not valid JSON: {e}",
            operation="analysis",
            raw_response=response.text,
        ) from e

    if not isinstance(data, dict):
        raise MalformedResponseError(
            "Analysis response is not a JSON object",
            operation="analysis",
            raw_response=response.text,
        )

    try:
        return AnalysisResult.model_validate(data)
    except ValidationError as e:
        missing = sorted({".".join(str(p) for p in err["loc"]) for err in e.errors()})
        raise MalformedResponseError(
            f"Analysis response is missing or has invalid fields: {', '.join(missing)}",
            operation="analysis",
            raw_response=response.text,
        ) from e


# =============================================================================
# Analysis
# =============================================================================


async def analyze_documents(
    provider: CompletionProvider,
    parts: list[ContentPart],
    policy: RetryPolicy | None = None,
    **kwargs,
) -> AnalysisResult:
    """
    Run the novelty/gap analysis over prepared document parts.

    Args:
        provider: Text generation capability.
        parts: Document parts (direct) or the condensed summary part.
        policy: Retry policy (default from settings).
        **kwargs: Passed to ``run_with_fallback`` (e.g. ``sleep``).

    Returns:
        The manuscript blueprint.

    Raises:
        DocumentValidationError: No usable parts.
        TaskFailedError: Every tier failed or returned malformed output.
    """
    request = build_analysis_request(parts)
    logger.info(f"Running analysis over {len(parts)} content parts")
    analysis = await run_with_fallback(
        provider,
        ANALYSIS,
        request,
        parse_analysis_response,
        policy=policy,
        **kwargs,
    )
    logger.info(f"Analysis complete: {analysis.title!r} for {analysis.target_venue}")
    return analysis
