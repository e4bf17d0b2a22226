"""CompletionProvider backed by LangChain chat models.

One chat model per tier. PDF parts are sent as base64 document blocks,
text parts as text blocks. JSON requests use ``with_structured_output``
and the parsed object is serialized back to text so every caller sees the
same ``ProviderResponse`` contract.
"""

import base64
import json
import logging
from typing import Any

from langchain_anthropic import ChatAnthropic
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage

from src.config import Settings, settings as default_settings
from src.errors.exceptions import ProviderError, RateLimitError
from src.state.enums import ModelTier, PartKind, ResponseFormat
from src.state.models import ContentPart, ProviderRequest, ProviderResponse

logger = logging.getLogger(__name__)


def create_model(
    model_name: str,
    temperature: float = 0.3,
    max_tokens: int = 4096,
    api_key: str | None = None,
) -> ChatAnthropic:
    """
    Create a ChatAnthropic model instance.

    Args:
        model_name: Claude model to use.
        temperature: Sampling temperature.
        max_tokens: Maximum tokens in response.
        api_key: API key (default from settings).

    Returns:
        Configured ChatAnthropic instance.
    """
    return ChatAnthropic(
        model=model_name,
        temperature=temperature,
        max_tokens=max_tokens,
        api_key=api_key or default_settings.anthropic_api_key,
    )


def to_content_block(part: ContentPart) -> dict[str, Any]:
    """Convert a content part into a chat message content block."""
    if part.kind == PartKind.BINARY:
        return {
            "type": "document",
            "source": {
                "type": "base64",
                "media_type": part.mime_type,
                "data": base64.b64encode(part.data).decode("ascii"),
            },
        }
    return {"type": "text", "text": part.text}


def extract_text(raw_content: Any) -> str:
    """Extract text from string or structured message content."""
    if isinstance(raw_content, list):
        return "".join(
            item if isinstance(item, str) else item.get("text", "")
            for item in raw_content
        )
    return raw_content or ""


# Status codes the provider uses for rate limits and overload
TRANSIENT_STATUS_CODES = frozenset({429, 503, 529})


def _retry_after(error: BaseException) -> float | None:
    response = getattr(error, "response", None)
    headers = getattr(response, "headers", None) or {}
    value = headers.get("retry-after")
    try:
        return float(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def to_provider_error(error: BaseException, tier: ModelTier) -> BaseException:
    """
    Map an SDK exception carrying an HTTP status onto the provider errors.

    Exceptions without a status code are returned unchanged.
    """
    status_code = getattr(error, "status_code", None)
    if not isinstance(status_code, int):
        return error
    message = str(error) or f"Provider returned status {status_code}"
    if status_code in TRANSIENT_STATUS_CODES:
        return RateLimitError(
            message,
            retry_after=_retry_after(error),
            status_code=status_code,
            tier=tier.value,
        )
    return ProviderError(
        message,
        status_code=status_code,
        tier=tier.value,
        recoverable=status_code >= 500,
    )


class ChatModelProvider:
    """Run provider requests against LangChain chat models, one per tier."""

    def __init__(
        self,
        models: dict[ModelTier, BaseChatModel] | None = None,
        settings: Settings | None = None,
    ):
        """
        Initialize the provider.

        Args:
            models: Chat model per tier. Missing tiers are created lazily
                from settings.
            settings: Settings to read model names and limits from.
        """
        self.settings = settings or default_settings
        self._models: dict[ModelTier, BaseChatModel] = dict(models or {})

    def get_model(self, tier: ModelTier) -> BaseChatModel:
        """Return the chat model for *tier*, creating it on first use."""
        if tier not in self._models:
            model_name = (
                self.settings.preferred_model
                if tier == ModelTier.PREFERRED
                else self.settings.fast_model
            )
            logger.debug(f"Creating chat model {model_name} for tier {tier.value}")
            self._models[tier] = create_model(
                model_name,
                temperature=self.settings.temperature,
                max_tokens=self.settings.max_tokens,
                api_key=self.settings.anthropic_api_key,
            )
        return self._models[tier]

    async def complete(self, request: ProviderRequest) -> ProviderResponse:
        """Run one completion on the requested tier.

        SDK errors carrying an HTTP status are raised as ``ProviderError``
        (``RateLimitError`` for rate limits and overload).
        """
        model = self.get_model(request.tier)
        messages = [HumanMessage(content=[to_content_block(p) for p in request.parts])]

        try:
            if request.response_format == ResponseFormat.JSON:
                structured = model.with_structured_output(request.json_schema)
                result = await structured.ainvoke(messages)
            else:
                response = await model.ainvoke(messages)
        except Exception as e:
            mapped = to_provider_error(e, request.tier)
            if mapped is e:
                raise
            raise mapped from e

        if request.response_format == ResponseFormat.JSON:
            if result is None:
                return ProviderResponse(text="", tier=request.tier)
            if hasattr(result, "model_dump"):
                result = result.model_dump()
            return ProviderResponse(text=json.dumps(result), tier=request.tier)

        return ProviderResponse(text=extract_text(response.content), tier=request.tier)
