"""Text generation providers and tier routing."""

from src.providers.base import CompletionProvider
from src.providers.chat_model import ChatModelProvider, create_model
from src.providers.router import (
    ADVISORY,
    ANALYSIS,
    DRAFTING,
    SUMMARIZATION,
    TASK_PROFILES,
    TRANSFORM,
    TaskProfile,
    get_task_profile,
    run_with_fallback,
)

__all__ = [
    "CompletionProvider",
    "ChatModelProvider",
    "create_model",
    "TaskProfile",
    "TASK_PROFILES",
    "ANALYSIS",
    "DRAFTING",
    "ADVISORY",
    "TRANSFORM",
    "SUMMARIZATION",
    "get_task_profile",
    "run_with_fallback",
]
