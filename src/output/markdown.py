"""Markdown assembly and export of the manuscript draft."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from src.config import settings
from src.errors.exceptions import MissingAnalysisError
from src.state.enums import SectionKind
from src.state.models import SessionState


@dataclass(frozen=True)
class MarkdownExportResult:
    path: str
    sections: list[str]
    characters: int


def _utc_stamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")


def _sanitize_filename(value: str) -> str:
    cleaned = re.sub(r"[^A-Za-z0-9._-]+", "_", (value or "").strip())
    return cleaned.strip("_.-") or "draft_manuscript"


def render_manuscript(state: SessionState) -> str:
    """
    Render the draft as one markdown document.

    Layout: ``# <title>``, the target journal line, then every non-empty
    section in manuscript order under a ``##`` heading. The title section
    is represented by the document heading.

    Raises:
        MissingAnalysisError: No blueprint to take the title from.
    """
    if state.analysis is None:
        raise MissingAnalysisError(
            "Run the manuscript analysis before exporting.",
            operation="export",
        )

    parts = [
        f"# {state.analysis.title}\n\n",
        f"**Target Journal:** {state.analysis.target_venue}\n\n",
    ]
    for section in state.sections:
        if section.kind == SectionKind.TITLE:
            continue
        content = section.content.strip()
        if not content:
            continue
        parts.append(f"## {section.title}\n\n{content}\n\n")
    return "".join(parts)


def export_manuscript(
    state: SessionState,
    path: str | Path | None = None,
    output_dir: str | Path | None = None,
) -> MarkdownExportResult:
    """
    Write the rendered draft to *path*.

    When *path* is omitted the file goes to *output_dir* (default from
    settings), named after the title with a UTC timestamp.
    """
    text = render_manuscript(state)

    if path is None:
        base_dir = Path(output_dir or settings.output_dir)
        name = _sanitize_filename(state.analysis.title)
        target = base_dir / f"{name}-{_utc_stamp()}.md"
    else:
        target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(text, encoding="utf-8")

    exported = [
        s.id for s in state.sections
        if s.kind != SectionKind.TITLE and s.content.strip()
    ]
    return MarkdownExportResult(path=str(target), sections=exported, characters=len(text))
