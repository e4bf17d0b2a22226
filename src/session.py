"""Manuscript session: the one object a UI or CLI talks to.

Owns the session store and wires the pipeline stages to it:
- Document ingestion with per-file rejection messages
- Novelty/gap analysis through the analysis workflow graph
- Section drafting, manual edits and notes
- Text transforms committed as edits
- Advisory dialogue
- Markdown export
"""

import asyncio
import logging
from pathlib import Path

from src.config import Settings, settings as default_settings
from src.errors.exceptions import (
    DocumentValidationError,
    MissingAnalysisError,
    WritingError,
)
from src.errors.handlers import log_error_with_context, user_facing_message
from src.errors.policies import RetryPolicy, Sleep
from src.graphs.analysis_workflow import create_analysis_workflow
from src.nodes.advisor import advise
from src.nodes.editor import transform_text
from src.nodes.writer import draft_section, draft_sections
from src.output.markdown import MarkdownExportResult, export_manuscript, render_manuscript
from src.providers.base import CompletionProvider
from src.state.enums import ChatRole, TransformKind
from src.state.models import (
    AnalysisResult,
    IngestionReport,
    ManuscriptSection,
    SessionState,
)
from src.state.schema import create_initial_state
from src.state.store import (
    SessionStore,
    add_documents,
    append_chat_turn,
    begin_analysis,
    complete_analysis,
    edit_section,
    fail_analysis,
    remove_document,
    set_section_notes,
)
from src.tools.attachments import load_document, load_document_from_path
from src.writers.base import SectionWriter, SectionWriterConfig

logger = logging.getLogger(__name__)


class ManuscriptSession:
    """
    Interactive manuscript drafting session.

    Example:
        ```python
        session = ManuscriptSession(ChatModelProvider())
        session.add_files(["paper.pdf", "notes.md"])
        await session.run_analysis()
        await session.generate_section("introduction")
        ```
    """

    def __init__(
        self,
        provider: CompletionProvider,
        store: SessionStore | None = None,
        settings: Settings | None = None,
        sleep: Sleep = asyncio.sleep,
    ):
        self.provider = provider
        self.store = store or SessionStore()
        self.settings = settings or default_settings
        self._sleep = sleep
        self.policy = RetryPolicy(
            max_retries=self.settings.max_retries,
            initial_delay=self.settings.retry_initial_delay,
        )
        self.writer = SectionWriter(
            provider,
            SectionWriterConfig(
                excerpt_chars=self.settings.section_excerpt_chars,
                document_limit=self.settings.drafting_document_limit,
            ),
            policy=self.policy,
        )
        self._workflow = None

    @property
    def state(self) -> SessionState:
        return self.store.state

    @property
    def workflow(self):
        """Compiled analysis workflow, built on first use."""
        if self._workflow is None:
            self._workflow = create_analysis_workflow(
                self.provider,
                threshold=self.settings.condensation_threshold,
                pause=self.settings.summary_pause,
                policy=self.policy,
                sleep=self._sleep,
            )
        return self._workflow

    # =========================================================================
    # Documents
    # =========================================================================

    def add_documents(self, uploads: list[tuple[str, str | None, bytes]]) -> IngestionReport:
        """
        Ingest uploaded files given as ``(name, mime_type, raw_bytes)``.

        Unsupported or empty files are skipped with a message; the rest are
        appended in upload order.
        """
        report = IngestionReport()
        accepted = []
        for name, mime_type, raw_bytes in uploads:
            try:
                document = load_document(name, mime_type, raw_bytes)
            except DocumentValidationError as e:
                logger.warning(e.message)
                report.rejected.append(e.message)
                continue
            accepted.append(document)
            report.accepted.append(document.name)

        if accepted:
            self.store.commit(lambda s: add_documents(s, accepted))
        return report

    def add_files(self, paths: list[str | Path]) -> IngestionReport:
        """Ingest files from disk."""
        report = IngestionReport()
        accepted = []
        for path in paths:
            try:
                document = load_document_from_path(path)
            except DocumentValidationError as e:
                logger.warning(e.message)
                report.rejected.append(e.message)
                continue
            except OSError as e:
                logger.warning(f"Could not read {path}: {e}")
                report.rejected.append(f"File {Path(path).name} could not be read: {e}")
                continue
            accepted.append(document)
            report.accepted.append(document.name)

        if accepted:
            self.store.commit(lambda s: add_documents(s, accepted))
        return report

    def remove_document(self, name: str) -> None:
        self.store.commit(lambda s: remove_document(s, name))

    # =========================================================================
    # Analysis
    # =========================================================================

    async def run_analysis(self) -> AnalysisResult:
        """
        Run the novelty/gap analysis over the session documents.

        On success the blueprint replaces any previous one and the title
        section is set from it. On failure ``last_error`` carries the
        user-visible message and the error is re-raised.

        Raises:
            DocumentValidationError: No documents, or missing payloads.
            TaskFailedError: Every tier failed.
        """
        documents = list(self.state.documents)
        self.store.commit(lambda s: begin_analysis(s)[0])
        sequence = self.state.analysis_sequence

        try:
            result = await self.workflow.ainvoke(create_initial_state(documents))
        except Exception as e:
            log_error_with_context(e, operation="analysis", context={"documents": len(documents)})
            message = user_facing_message(e, "Analysis")
            self.store.commit(lambda s: fail_analysis(s, sequence, message))
            raise

        analysis = result["analysis"]
        for warning in result.get("warnings", []):
            logger.warning(warning)
        self.store.commit(lambda s: complete_analysis(s, sequence, analysis))
        return analysis

    # =========================================================================
    # Sections
    # =========================================================================

    async def generate_section(self, section_id: str) -> ManuscriptSection:
        """Draft one section. Provider failures end up in ``last_error``."""
        return await draft_section(self.store, self.writer, section_id, sleep=self._sleep)

    async def generate_sections(self, section_ids: list[str] | None = None) -> list[ManuscriptSection]:
        """Draft several sections concurrently (default: all but the title)."""
        return await draft_sections(self.store, self.writer, section_ids, sleep=self._sleep)

    def update_section(self, section_id: str, content: str) -> ManuscriptSection:
        """Apply a manual edit."""
        self._require_section(section_id)
        self.store.commit(lambda s: edit_section(s, section_id, content))
        return self.state.get_section(section_id)

    def set_notes(self, section_id: str, notes: str) -> ManuscriptSection:
        self._require_section(section_id)
        self.store.commit(lambda s: set_section_notes(s, section_id, notes))
        return self.state.get_section(section_id)

    async def transform_section(
        self,
        section_id: str,
        kind: TransformKind | str,
    ) -> ManuscriptSection:
        """
        Apply a text transform to a section's content.

        The result is committed as a manual edit only if the section content
        did not change while the transform was running.
        """
        section = self._require_section(section_id)
        kind = TransformKind(kind)
        original = section.content

        transformed = await transform_text(
            self.provider,
            original,
            kind,
            policy=self.policy,
            sleep=self._sleep,
        )
        if transformed == original:
            return self.state.get_section(section_id)

        def _apply(state: SessionState) -> SessionState:
            current = state.get_section(section_id)
            if current.content != original:
                logger.info(f"Discarding {kind.value} result for {section_id}: content changed")
                return state
            return edit_section(state, section_id, transformed)

        self.store.commit(_apply)
        return self.state.get_section(section_id)

    def _require_section(self, section_id: str) -> ManuscriptSection:
        section = self.state.get_section(section_id)
        if section is None:
            raise WritingError(f"Unknown section: {section_id}", section=section_id, recoverable=False)
        return section

    # =========================================================================
    # Advisory Dialogue
    # =========================================================================

    async def ask_advisor(self, query: str) -> str:
        """
        Ask the advisor a question and record both turns.

        Raises:
            MissingAnalysisError: No blueprint yet; nothing is recorded.
        """
        state = self.state
        if state.analysis is None:
            raise MissingAnalysisError(
                "Run the manuscript analysis before asking the advisor.",
                operation="advisory",
            )
        history = state.chat_history

        self.store.commit(lambda s: append_chat_turn(s, ChatRole.USER, query))
        reply = await advise(
            self.provider,
            query,
            history,
            state.analysis,
            window=self.settings.chat_history_window,
            policy=self.policy,
            sleep=self._sleep,
        )
        self.store.commit(lambda s: append_chat_turn(s, ChatRole.ASSISTANT, reply))
        return reply

    # =========================================================================
    # Export
    # =========================================================================

    def render_markdown(self) -> str:
        return render_manuscript(self.state)

    def export_markdown(self, path: str | Path | None = None) -> MarkdownExportResult:
        """Write the current draft as markdown."""
        result = export_manuscript(self.state, path, output_dir=self.settings.output_dir)
        logger.info(f"Exported {len(result.sections)} sections to {result.path}")
        return result
