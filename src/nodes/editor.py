"""Text transform tools for post-hoc editing of drafted sections.

Each transform kind maps to one fixed instruction. These tools favor
availability over correctness: any failure returns the original text.
"""

import logging

from src.errors.policies import RetryPolicy
from src.providers.base import CompletionProvider
from src.providers.router import TRANSFORM, run_with_fallback
from src.state.enums import TransformKind
from src.state.models import ContentPart, ProviderRequest, ProviderResponse

logger = logging.getLogger(__name__)


TRANSFORM_INSTRUCTIONS: dict[TransformKind, str] = {
    TransformKind.EXPAND: (
        "Expand the text with additional explanation, supporting detail and "
        "transitions. Roughly double its length without inventing results or citations."
    ),
    TransformKind.CONDENSE: (
        "Condense the text to about half its length. Keep every technical claim, "
        "number and citation."
    ),
    TransformKind.FIX_GRAMMAR: (
        "Correct grammar, spelling and punctuation. Improve clarity where a sentence "
        "is ambiguous. Do not change the meaning."
    ),
    TransformKind.MAKE_RIGOROUS: (
        "Increase formal and mathematical rigor: define symbols, state assumptions "
        "explicitly, typeset equations in LaTeX and replace vague claims with precise ones."
    ),
}

TRANSFORM_PROMPT = """Refine the following text for a journal submission.

GOAL: {kind}
INSTRUCTIONS: {instruction}
CONSTRAINT: Do not lose the technical details or citations. Return only the revised text.

ORIGINAL TEXT:
{text}"""


def build_transform_request(text: str, kind: TransformKind) -> ProviderRequest:
    """Build the request for one transform."""
    prompt = TRANSFORM_PROMPT.format(
        kind=kind.value,
        instruction=TRANSFORM_INSTRUCTIONS[kind],
        text=text,
    )
    return ProviderRequest(parts=(ContentPart.from_text(prompt),))


def _transformed_text(response: ProviderResponse) -> str:
    return (response.text or "").strip()


async def transform_text(
    provider: CompletionProvider,
    text: str,
    kind: TransformKind,
    policy: RetryPolicy | None = None,
    **kwargs,
) -> str:
    """
    Apply one transform to a block of text.

    Args:
        provider: Text generation capability.
        text: Text to transform.
        kind: Transform to apply.
        policy: Retry policy (default from settings).
        **kwargs: Passed to ``run_with_fallback`` (e.g. ``sleep``).

    Returns:
        The transformed text, or *text* unchanged on any failure.
    """
    if not text.strip():
        return text

    try:
        result = await run_with_fallback(
            provider,
            TRANSFORM,
            build_transform_request(text, kind),
            _transformed_text,
            policy=policy,
            **kwargs,
        )
    except Exception as e:
        logger.error(f"Transform {kind.value} failed; keeping original text: {e}")
        return text

    if not result:
        logger.warning(f"Transform {kind.value} returned no text; keeping original text")
        return text
    return result
