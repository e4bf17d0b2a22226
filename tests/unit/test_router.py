"""Tests for task profiles and the tier fallback router."""

import logging

import pytest

from src.errors import MalformedResponseError, ProviderError, RetryPolicy, TaskFailedError
from src.providers import (
    ADVISORY,
    ANALYSIS,
    DRAFTING,
    SUMMARIZATION,
    TRANSFORM,
    TaskProfile,
    get_task_profile,
    run_with_fallback,
)
from src.state.enums import ModelTier
from src.state.models import ContentPart, ProviderRequest


def _request() -> ProviderRequest:
    return ProviderRequest(parts=(ContentPart.from_text("Write something."),))


def _text(response):
    if not response.text:
        raise MalformedResponseError("empty", operation="test")
    return response.text


class TestTaskProfiles:
    """Tests for the tier preferences of each task."""

    def test_quality_tasks_fall_back_to_fast(self):
        for profile in (ANALYSIS, DRAFTING, ADVISORY):
            assert profile.tiers == [ModelTier.PREFERRED, ModelTier.FAST]
            assert profile.retry is True

    def test_transform_uses_fast_only(self):
        assert TRANSFORM.tiers == [ModelTier.FAST]
        assert TRANSFORM.retry is True

    def test_summarization_has_no_retry(self):
        assert SUMMARIZATION.tiers == [ModelTier.FAST]
        assert SUMMARIZATION.retry is False

    def test_get_task_profile(self):
        assert get_task_profile("drafting") is DRAFTING
        with pytest.raises(ValueError):
            get_task_profile("translation")

    def test_profile_without_fallback(self):
        profile = TaskProfile("custom", ModelTier.PREFERRED)
        assert profile.tiers == [ModelTier.PREFERRED]


class TestRunWithFallback:
    """Tests for tiered execution."""

    async def test_preferred_tier_success(self, make_provider, recording_sleep):
        provider = make_provider(script={ModelTier.PREFERRED: ["from preferred"]})

        result = await run_with_fallback(provider, DRAFTING, _request(), _text, sleep=recording_sleep)

        assert result == "from preferred"
        assert provider.tiers == [ModelTier.PREFERRED]

    async def test_falls_back_after_retries_exhausted(self, make_provider, recording_sleep, caplog):
        provider = make_provider(script={
            ModelTier.PREFERRED: [ProviderError("503 Service Unavailable", status_code=503)],
            ModelTier.FAST: ["from fast"],
        })
        policy = RetryPolicy(max_retries=3, initial_delay=2.0)

        with caplog.at_level(logging.WARNING, logger="src.providers.router"):
            result = await run_with_fallback(
                provider, ANALYSIS, _request(), _text, policy=policy, sleep=recording_sleep
            )

        assert result == "from fast"
        assert provider.tiers == [ModelTier.PREFERRED] * 4 + [ModelTier.FAST]
        assert recording_sleep.delays == [2.0, 4.0, 8.0]
        assert "falling back to fast tier" in caplog.text

    async def test_fatal_error_falls_back_without_sleeping(self, make_provider, recording_sleep):
        provider = make_provider(script={
            ModelTier.PREFERRED: [ProviderError("400 Invalid request", status_code=400)],
            ModelTier.FAST: ["from fast"],
        })

        result = await run_with_fallback(provider, DRAFTING, _request(), _text, sleep=recording_sleep)

        assert result == "from fast"
        assert provider.tiers == [ModelTier.PREFERRED, ModelTier.FAST]
        assert recording_sleep.delays == []

    async def test_malformed_response_triggers_fallback(self, make_provider, recording_sleep):
        provider = make_provider(script={
            ModelTier.PREFERRED: [""],
            ModelTier.FAST: ["valid"],
        })

        result = await run_with_fallback(provider, ADVISORY, _request(), _text, sleep=recording_sleep)

        assert result == "valid"
        assert recording_sleep.delays == []

    async def test_all_tiers_fail(self, make_provider, recording_sleep):
        provider = make_provider(script={
            ModelTier.PREFERRED: [ProviderError("400 Invalid request", status_code=400)],
            ModelTier.FAST: [ProviderError("401 Unauthorized", status_code=401)],
        })

        with pytest.raises(TaskFailedError) as exc_info:
            await run_with_fallback(provider, DRAFTING, _request(), _text, sleep=recording_sleep)

        assert str(exc_info.value).startswith("drafting failed after retries:")
        assert "401 Unauthorized" in str(exc_info.value)
        assert exc_info.value.operation == "drafting"
        assert isinstance(exc_info.value.__cause__, ProviderError)

    async def test_no_retry_profile_single_attempt(self, make_provider, recording_sleep):
        provider = make_provider(script={
            ModelTier.FAST: [ProviderError("429 rate limit", status_code=429)],
        })

        with pytest.raises(TaskFailedError):
            await run_with_fallback(provider, SUMMARIZATION, _request(), _text, sleep=recording_sleep)

        assert provider.tiers == [ModelTier.FAST]
        assert recording_sleep.delays == []

    async def test_request_parts_preserved_across_tiers(self, make_provider, recording_sleep):
        provider = make_provider(script={
            ModelTier.PREFERRED: [ProviderError("400 bad", status_code=400)],
            ModelTier.FAST: ["ok"],
        })

        await run_with_fallback(provider, DRAFTING, _request(), _text, sleep=recording_sleep)

        assert [c.prompt_text for c in provider.calls] == ["Write something."] * 2
