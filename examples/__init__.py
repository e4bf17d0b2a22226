"""
Novus Academica - Usage Examples

Examples:
- basic_workflow.py: Upload sources, analyze, draft every section, export

Run examples:
    python examples/basic_workflow.py paper.pdf notes.md
"""
