"""Per-section writing guidance for manuscript drafting."""

from src.state.enums import SectionKind


SECTION_GUIDELINES: dict[SectionKind, str] = {
    SectionKind.TITLE: (
        "Propose one informative title and, on the next line, a short running title. "
        "No commentary."
    ),
    SectionKind.ABSTRACT: (
        "One paragraph of 150-250 words: context, gap, approach, main quantitative "
        "result, implication. No citations."
    ),
    SectionKind.INTRODUCTION: (
        "Problem statement -> research gap -> contribution bullets -> paper roadmap."
    ),
    SectionKind.LITERATURE_REVIEW: (
        "Critical analysis of work from the last five years, grouped by theme; "
        "end each theme by stating how this work differs."
    ),
    SectionKind.METHODOLOGY: (
        "Transparent method description with mathematical rigor; typeset losses and "
        "estimators in LaTeX (e.g. $\\mathcal{L}_{total}$); state assumptions."
    ),
    SectionKind.RESULTS: (
        "Comparative analysis against at least three baselines; report the metrics "
        "used; state the main claim without overclaiming."
    ),
    SectionKind.DISCUSSION: (
        "Interpret the results against the gap, discuss limitations and threats to "
        "validity, and outline implications."
    ),
    SectionKind.CONCLUSION: (
        "Restate the contribution and main finding in one paragraph, then give "
        "concrete future work."
    ),
    SectionKind.REFERENCES: (
        "A numbered reference list in a consistent citation style, using only works "
        "that appear in the sources or the blueprint references."
    ),
}

COMMON_INSTRUCTIONS = """WRITING RULES:
1. Content must be original synthesis of the sources, never copied passages;
   attribute claims to the source documents they come from
2. Tone: scientific rigor, formal, ethical; hedge claims the evidence does not fully support
3. Do not invent data, results or citations
4. Formatting: Markdown"""


def get_section_guidelines(kind: SectionKind) -> str:
    """Writing guidance for a section kind."""
    return SECTION_GUIDELINES.get(kind, "Write the section in a formal academic register.")
