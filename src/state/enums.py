"""Enums and constants for Novus Academica session state."""

from enum import Enum


class DocumentKind(str, Enum):
    """Recognized kinds of uploaded source documents."""

    PDF = "pdf"
    TEXT = "text"      # plain text, markdown, LaTeX source
    OTHER = "other"    # unsupported; filtered out before any provider call


class PartKind(str, Enum):
    """Kinds of provider content parts."""

    BINARY = "binary"
    TEXT = "text"


class SectionKind(str, Enum):
    """Manuscript section kinds, in manuscript order."""

    TITLE = "Title"
    ABSTRACT = "Abstract"
    INTRODUCTION = "Introduction"
    LITERATURE_REVIEW = "Literature Review"
    METHODOLOGY = "Methodology"
    RESULTS = "Results"
    DISCUSSION = "Discussion"
    CONCLUSION = "Conclusion"
    REFERENCES = "References"

    @property
    def section_id(self) -> str:
        """Stable identifier used for the section of this kind."""
        return self.value.lower().replace(" ", "_")


class SectionStatus(str, Enum):
    """Lifecycle of a manuscript section.

    EMPTY -> GENERATING -> DRAFTED -> (EDITED | GENERATING)
    """

    EMPTY = "empty"
    GENERATING = "generating"
    DRAFTED = "drafted"
    EDITED = "edited"


class ChatRole(str, Enum):
    """Author of a chat turn."""

    USER = "user"
    ASSISTANT = "assistant"


class ModelTier(str, Enum):
    """Quality/cost level of the text generation capability."""

    PREFERRED = "preferred"  # Higher quality, tighter quota
    FAST = "fast"            # Cheaper, looser quota


class ResponseFormat(str, Enum):
    """Requested shape of a provider response."""

    TEXT = "text"
    JSON = "json"


class TransformKind(str, Enum):
    """Post-hoc text transformation tools."""

    EXPAND = "Expand"
    CONDENSE = "Condense"
    FIX_GRAMMAR = "FixGrammar"
    MAKE_RIGOROUS = "MakeRigorous"


class CondensationMode(str, Enum):
    """How source documents are attached to the analysis request."""

    DIRECT = "direct"
    MAP_REDUCE = "map_reduce"


# Section kinds created eagerly at session start
INITIAL_SECTIONS: tuple[SectionKind, ...] = tuple(SectionKind)

# Supported upload formats, as shown to the user
SUPPORTED_FORMATS_DESCRIPTION = "PDF (.pdf), plain text (.txt), Markdown (.md), LaTeX (.tex)"
