"""Section writer.

Builds the drafting request for one manuscript section from the analysis
blueprint, excerpts of the other sections and a bounded set of source
documents, and post-processes the drafted text.
"""

import logging
from dataclasses import dataclass, field

from src.config import settings
from src.errors.exceptions import MalformedResponseError
from src.errors.policies import RetryPolicy
from src.providers.base import CompletionProvider
from src.providers.router import DRAFTING, run_with_fallback
from src.state.enums import SectionKind
from src.state.models import (
    AnalysisResult,
    ContentPart,
    DraftingContext,
    ManuscriptSection,
    ProviderRequest,
    ProviderResponse,
    SectionExcerpt,
    SourceDocument,
)
from src.tools.attachments import prepare_content_parts
from src.tools.condensation import select_drafting_documents
from src.writers.guidelines import COMMON_INSTRUCTIONS, get_section_guidelines

logger = logging.getLogger(__name__)


@dataclass
class SectionWriterConfig:
    """Configuration for the section writer."""

    excerpt_chars: int = field(default_factory=lambda: settings.section_excerpt_chars)
    document_limit: int = field(default_factory=lambda: settings.drafting_document_limit)


def build_drafting_context(
    section_kind: SectionKind,
    analysis: AnalysisResult,
    sections: tuple[ManuscriptSection, ...] | list[ManuscriptSection],
    documents: tuple[SourceDocument, ...] | list[SourceDocument],
    config: SectionWriterConfig | None = None,
) -> DraftingContext:
    """
    Assemble the drafting context for one section.

    Args:
        section_kind: Section to draft.
        analysis: Current blueprint.
        sections: All sections of the manuscript.
        documents: Session documents in upload order.
        config: Excerpt length and document limit.

    Returns:
        DraftingContext with excerpts of the other non-empty sections.
    """
    config = config or SectionWriterConfig()
    excerpts = tuple(
        SectionExcerpt(kind=s.kind, excerpt=s.content[:config.excerpt_chars])
        for s in sections
        if s.kind != section_kind and s.content
    )
    return DraftingContext(
        section_kind=section_kind,
        title=analysis.title,
        target_venue=analysis.target_venue,
        gap=analysis.gap,
        novelty=analysis.novelty,
        methodology_plan=analysis.methodology_plan,
        expected_results=analysis.expected_results,
        other_sections=excerpts,
        documents=tuple(select_drafting_documents(documents, config.document_limit)),
    )


class SectionWriter:
    """
    Drafts one section at a time.

    Provides:
    - Prompt construction from the drafting context
    - Tiered, retried provider calls
    - Post-processing of the drafted text
    """

    def __init__(
        self,
        provider: CompletionProvider,
        config: SectionWriterConfig | None = None,
        policy: RetryPolicy | None = None,
    ):
        self.provider = provider
        self.config = config or SectionWriterConfig()
        self.policy = policy

    def get_prompt(self, context: DraftingContext) -> str:
        """Build the drafting instruction for the context's section."""
        kind = context.section_kind
        previous = "\n".join(
            f"[{e.kind.value} Summary]: {e.excerpt}..." for e in context.other_sections
        ) or "No other sections drafted yet."

        return f"""Act as the Chief Publication Officer writing a manuscript for {context.target_venue or 'a high-impact journal'}.

PAPER METADATA:
- Title: {context.title}
- Research gap: {context.gap}
- Contribution: {context.novelty}
- Methodology: {context.methodology_plan}
- Expected results: {context.expected_results}

TASK: Write the {kind.value} section.

SECTION GUIDELINES:
{get_section_guidelines(kind)}

{COMMON_INSTRUCTIONS}

CONTEXT FROM OTHER SECTIONS:
{previous}"""

    def build_request(self, context: DraftingContext) -> ProviderRequest:
        """Build the provider request: source documents, then the instruction."""
        parts = prepare_content_parts(context.documents)
        return ProviderRequest(parts=(*parts, ContentPart.from_text(self.get_prompt(context))))

    def _post_process(self, content: str, kind: SectionKind) -> str:
        """Remove a leading heading that just repeats the section name."""
        lines = content.strip().split("\n")
        title = kind.value.lower()
        while lines and lines[0].strip().lstrip("#").strip().lower() == title:
            lines = lines[1:]
        return "\n".join(lines).strip()

    def _validate(self, kind: SectionKind):
        def _parse(response: ProviderResponse) -> str:
            content = self._post_process(response.text or "", kind)
            if not content:
                raise MalformedResponseError(
                    f"Empty draft for {kind.value}",
                    operation="drafting",
                    raw_response=response.text,
                )
            return content

        return _parse

    async def draft(self, context: DraftingContext, **kwargs) -> str:
        """
        Draft the section described by *context*.

        Returns:
            Non-empty markdown content.

        Raises:
            TaskFailedError: Every tier failed or returned empty text.
        """
        kind = context.section_kind
        logger.info(
            f"Drafting {kind.value} with {len(context.documents)} documents and "
            f"{len(context.other_sections)} section excerpts"
        )
        return await run_with_fallback(
            self.provider,
            DRAFTING,
            self.build_request(context),
            self._validate(kind),
            policy=self.policy,
            **kwargs,
        )
