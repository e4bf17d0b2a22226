"""Application settings and environment configuration."""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env file from project root
PROJECT_ROOT = Path(__file__).parent.parent.parent
load_dotenv(PROJECT_ROOT / ".env")


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    # Anthropic
    anthropic_api_key: str = os.getenv("ANTHROPIC_API_KEY", "")

    # Model tiers: preferred is slower with a tighter quota, fast is cheaper
    preferred_model: str = os.getenv("NOVUS_PREFERRED_MODEL", "claude-sonnet-4-5-20250929")
    fast_model: str = os.getenv("NOVUS_FAST_MODEL", "claude-haiku-4-5-20251001")
    temperature: float = float(os.getenv("NOVUS_TEMPERATURE", "0.3"))
    max_tokens: int = int(os.getenv("NOVUS_MAX_TOKENS", "4096"))

    # LangSmith
    langsmith_api_key: str = os.getenv("LANGSMITH_API_KEY", "") or os.getenv(
        "LANGCHAIN_SMITH_API_KEY", ""
    )
    langsmith_tracing: bool = os.getenv("LANGSMITH_TRACING", "true").lower() == "true"
    langsmith_project: str = os.getenv("LANGSMITH_PROJECT", "novus-academica")

    # Retry governor
    max_retries: int = int(os.getenv("NOVUS_MAX_RETRIES", "3"))
    retry_initial_delay: float = float(os.getenv("NOVUS_RETRY_INITIAL_DELAY", "2.0"))  # seconds

    # Document condensation
    condensation_threshold: int = int(os.getenv("NOVUS_CONDENSATION_THRESHOLD", "2"))
    summary_pause: float = float(os.getenv("NOVUS_SUMMARY_PAUSE", "0.5"))  # seconds

    # Drafting and dialogue context limits
    drafting_document_limit: int = int(os.getenv("NOVUS_DRAFTING_DOCUMENT_LIMIT", "3"))
    section_excerpt_chars: int = int(os.getenv("NOVUS_SECTION_EXCERPT_CHARS", "500"))
    chat_history_window: int = int(os.getenv("NOVUS_CHAT_HISTORY_WINDOW", "10"))

    # Where exported manuscripts are written
    output_dir: str = os.getenv("NOVUS_OUTPUT_DIR", str(PROJECT_ROOT / "data" / "outputs"))

    def __post_init__(self):
        """Configure LangSmith environment variables."""
        if self.langsmith_api_key:
            os.environ["LANGSMITH_API_KEY"] = self.langsmith_api_key
            os.environ["LANGSMITH_TRACING"] = str(self.langsmith_tracing).lower()
            os.environ["LANGSMITH_PROJECT"] = self.langsmith_project

    def validate(self) -> list[str]:
        """Validate required settings are present."""
        errors = []
        if not self.anthropic_api_key:
            errors.append("ANTHROPIC_API_KEY is not set")
        if self.max_retries < 0:
            errors.append("NOVUS_MAX_RETRIES must not be negative")
        if self.condensation_threshold < 0:
            errors.append("NOVUS_CONDENSATION_THRESHOLD must not be negative")
        return errors


# Global settings instance
settings = Settings()
