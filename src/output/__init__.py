"""Manuscript export."""

from src.output.markdown import MarkdownExportResult, export_manuscript, render_manuscript

__all__ = ["MarkdownExportResult", "export_manuscript", "render_manuscript"]
