"""Model tier selection and fallback routing.

Each task declares a preferred tier and an optional fallback tier. The
preferred tier runs through the retry governor; if it still fails, a
warning is logged and the fallback tier runs through the governor too.
If the fallback fails as well, the caller receives a ``TaskFailedError``
naming the operation instead of a raw provider error string.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, TypeVar

from src.errors.exceptions import TaskFailedError
from src.errors.policies import (
    NO_RETRY_POLICY,
    RetryPolicy,
    Sleep,
    default_retry_policy,
    run_with_policy,
)
from src.providers.base import CompletionProvider
from src.state.enums import ModelTier
from src.state.models import ProviderRequest, ProviderResponse

logger = logging.getLogger(__name__)

T = TypeVar("T")


# =============================================================================
# Task Profiles
# =============================================================================


@dataclass(frozen=True)
class TaskProfile:
    """Tier preferences for one logical task.

    Attributes:
        name: Operation name used in logs and final error messages
        preferred_tier: Tier tried first
        fallback_tier: Tier tried after the preferred tier fails, if any
        retry: Whether provider calls go through the retry governor
    """

    name: str
    preferred_tier: ModelTier
    fallback_tier: ModelTier | None = None
    retry: bool = True

    @property
    def tiers(self) -> list[ModelTier]:
        """Tiers in execution order."""
        tiers = [self.preferred_tier]
        if self.fallback_tier is not None and self.fallback_tier != self.preferred_tier:
            tiers.append(self.fallback_tier)
        return tiers


ANALYSIS = TaskProfile("analysis", ModelTier.PREFERRED, ModelTier.FAST)
DRAFTING = TaskProfile("drafting", ModelTier.PREFERRED, ModelTier.FAST)
ADVISORY = TaskProfile("advisory", ModelTier.PREFERRED, ModelTier.FAST)
TRANSFORM = TaskProfile("transform", ModelTier.FAST)
SUMMARIZATION = TaskProfile("summarization", ModelTier.FAST, retry=False)

TASK_PROFILES: dict[str, TaskProfile] = {
    profile.name: profile
    for profile in (ANALYSIS, DRAFTING, ADVISORY, TRANSFORM, SUMMARIZATION)
}
"""Mapping of task names to their tier preferences."""


def get_task_profile(task: str) -> TaskProfile:
    """Get the tier profile configured for a task."""
    try:
        return TASK_PROFILES[task]
    except KeyError:
        raise ValueError(f"Unknown task: {task}") from None


# =============================================================================
# Fallback Routing
# =============================================================================


async def run_with_fallback(
    provider: CompletionProvider,
    profile: TaskProfile,
    request: ProviderRequest,
    validate: Callable[[ProviderResponse], T],
    policy: RetryPolicy | None = None,
    sleep: Sleep = asyncio.sleep,
) -> T:
    """Run *request* on the profile's tiers until one produces a valid result.

    Args:
        provider: Text generation capability
        profile: Task tier preferences
        request: Request to send; its tier is replaced per attempt
        validate: Turns a response into the task result; raising marks the
            tier attempt as failed
        policy: Retry policy (default from settings)
        sleep: Awaitable sleep, injectable for tests

    Returns:
        The validated result of the first tier that succeeds

    Raises:
        TaskFailedError: every tier failed
    """
    if not profile.retry:
        policy = NO_RETRY_POLICY
    elif policy is None:
        policy = default_retry_policy()

    last_error: Exception | None = None
    for index, tier in enumerate(profile.tiers):
        if index > 0:
            logger.warning(
                f"{profile.name} failed on {profile.tiers[index - 1].value} tier "
                f"({last_error}); falling back to {tier.value} tier"
            )
        tier_request = request.with_tier(tier)

        async def _attempt() -> T:
            response = await provider.complete(tier_request)
            return validate(response)

        try:
            return await run_with_policy(_attempt, policy, sleep=sleep)
        except Exception as e:
            last_error = e

    raise TaskFailedError(
        f"{profile.name} failed after retries: {last_error}",
        operation=profile.name,
    ) from last_error
