"""Fixtures for integration tests.

Provides sessions wired to the fake provider with instant sleeps.
"""

import pytest

from src.config import Settings
from src.session import ManuscriptSession


@pytest.fixture
def test_settings(tmp_path):
    """Settings with the default limits and a temporary output directory."""
    return Settings(
        anthropic_api_key="test-key",
        max_retries=3,
        retry_initial_delay=2.0,
        condensation_threshold=2,
        summary_pause=0.5,
        drafting_document_limit=3,
        section_excerpt_chars=500,
        chat_history_window=10,
        output_dir=str(tmp_path / "outputs"),
    )


@pytest.fixture
def make_session(test_settings, recording_sleep):
    """Factory for a session around a given provider."""
    def _create(provider) -> ManuscriptSession:
        return ManuscriptSession(provider, settings=test_settings, sleep=recording_sleep)
    return _create


@pytest.fixture
def pdf_upload():
    return ("graph_forecasting.pdf", "application/pdf", b"%PDF-1.4\n%%EOF")


@pytest.fixture
def text_upload():
    return ("notes.md", "text/markdown", b"# Notes\nSensors cover 10% of the grid.")
