"""Document condensation strategy for analysis requests.

Small document sets are attached directly. Larger sets are condensed with
a map-reduce pass: every document is summarized on its own, strictly one
after another with a short pause in between, and the summaries replace the
raw documents in the analysis request. This bounds payload size and quota
use as the number of uploads grows.
"""

import asyncio
import logging
from dataclasses import dataclass, field

from src.config import settings
from src.errors.policies import Sleep
from src.providers.base import CompletionProvider
from src.providers.router import SUMMARIZATION, run_with_fallback
from src.state.enums import CondensationMode
from src.state.models import (
    ContentPart,
    ProviderRequest,
    ProviderResponse,
    SourceDocument,
)
from src.tools.attachments import prepare_content_part

logger = logging.getLogger(__name__)


SUMMARY_PROMPT = """Summarize the attached source document "{name}" for a research team
preparing a manuscript. Be compact and factual. Use exactly these headings:

RESEARCH QUESTION: <the question or problem the work addresses>
METHODOLOGY: <methods, models, datasets, experimental setup>
FINDINGS: <main results with key numbers>
CITATIONS: <the most important works it cites, one per line>

Do not add commentary beyond what the document supports."""


@dataclass
class CondensedDocuments:
    """Result of a map-reduce condensation pass."""

    part: ContentPart | None = None
    summaries_requested: int = 0
    summarized: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


# =============================================================================
# Mode Selection
# =============================================================================


def select_condensation_mode(
    documents: list[SourceDocument] | tuple[SourceDocument, ...],
    threshold: int | None = None,
) -> CondensationMode:
    """
    Decide how documents are attached to the analysis request.

    Args:
        documents: The session's source documents.
        threshold: Largest document count attached directly
            (default from settings).

    Returns:
        DIRECT for small sets, MAP_REDUCE above the threshold.
    """
    if threshold is None:
        threshold = settings.condensation_threshold
    if len(documents) > threshold:
        return CondensationMode.MAP_REDUCE
    return CondensationMode.DIRECT


def select_drafting_documents(
    documents: list[SourceDocument] | tuple[SourceDocument, ...],
    limit: int | None = None,
) -> list[SourceDocument]:
    """First *limit* documents in upload order, attached to drafting requests."""
    if limit is None:
        limit = settings.drafting_document_limit
    return list(documents[:limit])


# =============================================================================
# Map-Reduce Summarization
# =============================================================================


def _summary_text(response: ProviderResponse) -> str:
    return response.text.strip()


async def summarize_document(
    provider: CompletionProvider,
    document: SourceDocument,
) -> str:
    """
    Summarize one document into a compact block tagged with its name.

    One call on the fast tier, without retries. Failures are logged and
    yield an empty string so one bad document never blocks the pipeline.
    """
    part = prepare_content_part(document)
    if part is None:
        return ""

    request = ProviderRequest(
        parts=(part, ContentPart.from_text(SUMMARY_PROMPT.format(name=document.name))),
    )
    try:
        summary = await run_with_fallback(provider, SUMMARIZATION, request, _summary_text)
    except Exception as e:
        logger.warning(f"Summarization of {document.name} failed; skipping it: {e}")
        return ""

    if not summary:
        logger.warning(f"Summarization of {document.name} returned no text; skipping it")
        return ""
    return f"[Summary of Source Document: {document.name}]\n{summary}\n---"


async def condense_documents(
    provider: CompletionProvider,
    documents: list[SourceDocument] | tuple[SourceDocument, ...],
    pause: float | None = None,
    sleep: Sleep = asyncio.sleep,
) -> CondensedDocuments:
    """
    Summarize documents sequentially and combine the summaries.

    Each summary completes, including the pause that follows it, before
    the next document is sent.

    Args:
        provider: Text generation capability.
        documents: Documents to condense, in upload order.
        pause: Seconds to wait between documents (default from settings).
        sleep: Awaitable sleep, injectable for tests.

    Returns:
        CondensedDocuments with one combined text part, or no part when
        no document could be summarized.
    """
    if pause is None:
        pause = settings.summary_pause

    blocks: list[str] = []
    result = CondensedDocuments()
    for index, document in enumerate(documents):
        if index > 0 and pause > 0:
            await sleep(pause)
        if prepare_content_part(document) is None:
            result.skipped.append(document.name)
            continue

        logger.info(f"Summarizing document {index + 1}/{len(documents)}: {document.name}")
        result.summaries_requested += 1
        summary = await summarize_document(provider, document)
        if summary:
            blocks.append(summary)
            result.summarized.append(document.name)
        else:
            result.skipped.append(document.name)

    if not blocks:
        logger.warning(f"No summaries produced for {len(documents)} documents")
        return result

    header = f"[Condensed summaries of {len(blocks)} source documents]"
    result.part = ContentPart.from_text("\n\n".join([header, *blocks]))
    return result
