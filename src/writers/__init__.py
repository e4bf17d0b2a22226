"""Section writing for manuscript drafting.

Provides the section writer and the per-section guidance it follows:
- Title, Abstract, Introduction, Literature Review, Methodology
- Results, Discussion, Conclusion, References
"""

from src.writers.base import SectionWriter, SectionWriterConfig, build_drafting_context
from src.writers.guidelines import (
    COMMON_INSTRUCTIONS,
    SECTION_GUIDELINES,
    get_section_guidelines,
)

__all__ = [
    "SectionWriter",
    "SectionWriterConfig",
    "build_drafting_context",
    "COMMON_INSTRUCTIONS",
    "SECTION_GUIDELINES",
    "get_section_guidelines",
]
