"""Text generation capability used by every pipeline task.

The pipeline depends only on ``CompletionProvider``: "run a completion for
these parts on this tier, optionally constrained to a JSON schema". Tests
substitute a deterministic fake with canned responses and injected failures.
"""

from typing import Protocol, runtime_checkable

from src.state.models import ProviderRequest, ProviderResponse


@runtime_checkable
class CompletionProvider(Protocol):
    """Protocol for the text generation capability."""

    async def complete(self, request: ProviderRequest) -> ProviderResponse:
        """Run one completion.

        Raises whatever the underlying client raises; callers classify the
        error by its message.
        """
        ...
