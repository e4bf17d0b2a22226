"""Advisory dialogue grounded in the analysis blueprint.

Answers free-text questions about the manuscript using a bounded window of
recent turns. Uses the preferred tier, then the fast tier, then a static
unavailability message: the user always gets a reply.
"""

import logging

from src.config import settings
from src.errors.exceptions import MalformedResponseError, MissingAnalysisError
from src.errors.policies import RetryPolicy
from src.providers.base import CompletionProvider
from src.providers.router import ADVISORY, run_with_fallback
from src.state.enums import ChatRole
from src.state.models import (
    AnalysisResult,
    ChatTurn,
    ContentPart,
    ProviderRequest,
    ProviderResponse,
)

logger = logging.getLogger(__name__)


ADVISOR_UNAVAILABLE_MESSAGE = (
    "The publication advisor is temporarily unavailable because the model service "
    "is over capacity. Please try again in a few minutes."
)


def recent_history(history: tuple[ChatTurn, ...] | list[ChatTurn], window: int | None = None) -> list[ChatTurn]:
    """Most recent *window* turns, oldest first."""
    if window is None:
        window = settings.chat_history_window
    if window <= 0:
        return []
    return list(history[-window:])


def build_advisor_prompt(
    query: str,
    history: list[ChatTurn],
    analysis: AnalysisResult,
) -> str:
    """Build the advisor instruction with blueprint grounding and transcript."""
    transcript = "\n".join(
        f"{'User' if turn.role == ChatRole.USER else 'Advisor'}: {turn.text}"
        for turn in history
    ) or "(no previous messages)"
    checklist = analysis.checklist

    return f"""You are the Chief Publication Officer advising an author on their manuscript.
Answer the author's question concisely and concretely. Ground your advice in the
blueprint below; say so when a question goes beyond it.

BLUEPRINT:
- Title: {analysis.title}
- Target journal: {analysis.target_venue}
- Research gap: {analysis.gap}
- Contribution: {analysis.novelty}
- Methodology plan: {analysis.methodology_plan}
- Expected results: {analysis.expected_results}
- Reviewer checks: novelty: {checklist.novelty_check}; significance: {checklist.significance_check}; clarity: {checklist.clarity_check}; journal fit: {checklist.journal_fit_check}

CONVERSATION SO FAR:
{transcript}

AUTHOR'S QUESTION:
{query}"""


def _reply_text(response: ProviderResponse) -> str:
    text = (response.text or "").strip()
    if not text:
        raise MalformedResponseError("Empty advisor reply", operation="advisory")
    return text


async def advise(
    provider: CompletionProvider,
    query: str,
    history: tuple[ChatTurn, ...] | list[ChatTurn],
    analysis: AnalysisResult | None,
    window: int | None = None,
    policy: RetryPolicy | None = None,
    **kwargs,
) -> str:
    """
    Produce one advisor reply.

    Args:
        provider: Text generation capability.
        query: The author's question.
        history: Prior turns, oldest first, not including *query*.
        analysis: Current blueprint.
        window: Number of prior turns to include (default from settings).
        policy: Retry policy (default from settings).
        **kwargs: Passed to ``run_with_fallback`` (e.g. ``sleep``).

    Returns:
        The reply, or ``ADVISOR_UNAVAILABLE_MESSAGE`` if both tiers fail.

    Raises:
        MissingAnalysisError: No blueprint yet; no provider call is made.
    """
    if analysis is None:
        raise MissingAnalysisError(
            "Run the manuscript analysis before asking the advisor.",
            operation="advisory",
        )

    prompt = build_advisor_prompt(query, recent_history(history, window), analysis)
    request = ProviderRequest(parts=(ContentPart.from_text(prompt),))
    try:
        return await run_with_fallback(
            provider,
            ADVISORY,
            request,
            _reply_text,
            policy=policy,
            **kwargs,
        )
    except Exception as e:
        logger.error(f"Advisor unavailable on every tier: {e}")
        return ADVISOR_UNAVAILABLE_MESSAGE
