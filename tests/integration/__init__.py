"""Integration tests for the manuscript drafting session.

These tests verify end-to-end functionality including:
- Ingestion, analysis and drafting through the session facade
- Map-reduce condensation inside the analysis graph
- Tier fallback and failure surfacing
- Transforms, advisory dialogue and export
"""
