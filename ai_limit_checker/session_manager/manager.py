"""Limit check orchestration.

Runs one independent check per requested provider and folds each
provider-specific record into an LlmLimitStatus. A provider that is
missing, misconfigured or fails outright is reported as available with an
unknown reset time, never as an error for the whole run.
"""

from __future__ import annotations

import asyncio
import logging
import shutil
import sys
from datetime import datetime
from typing import Awaitable, Callable, Iterable, Optional

from ..config import CLAUDE_COMMAND, GEMINI_COMMAND, is_chrome_config_available, load_chrome_config
from ..constants import (
    CLAUDE_LIMIT_PERCENT,
    GEMINI_LIMIT_PERCENT,
    PROVIDERS,
    STATUS_AVAILABLE,
    STATUS_RATE_LIMITED,
    UNKNOWN,
    UNKNOWN_SKIPPED,
    ZAI_LIMIT_PERCENT,
    ZAI_TOKENS_LIMIT,
)
from ..models.usage import LlmLimitStatus
from ..providers.claude import ClaudeClient
from ..providers.gemini import GeminiClient
from ..providers.zai import ZaiClient
from .reset_time import format_epoch_ms, to_absolute_instant

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s [%(name)s] %(levelname)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)


# ── Helpers ──────────────────────────────────────────────────────────────────


def is_command_available(command: str) -> bool:
    return shutil.which(command) is not None


def _unknown_status(provider: str, human: str = UNKNOWN) -> LlmLimitStatus:
    return LlmLimitStatus(provider=provider, status=STATUS_AVAILABLE, reset_at=0, reset_at_human=human)


def _limit_state(is_limited: bool) -> str:
    return STATUS_RATE_LIMITED if is_limited else STATUS_AVAILABLE


def _percent(value: str) -> float:
    try:
        return float(value)
    except ValueError:
        return 0.0


# ── Provider Checks ──────────────────────────────────────────────────────────


async def get_claude_status(now: Optional[datetime] = None) -> LlmLimitStatus:
    provider = "claude"
    try:
        if not is_command_available(CLAUDE_COMMAND):
            logger.warning("Skipping claude: CLI is not available on this system")
            return _unknown_status(provider, UNKNOWN_SKIPPED)

        status = await ClaudeClient().get_usage_stats()
        if not status.has_subscription:
            logger.warning("claude: /usage is only available for subscription plans")

        reset_at = to_absolute_instant(status.session_reset_time, now, status.session_reset_timezone)
        if isinstance(reset_at, int):
            human = format_epoch_ms(reset_at)
        else:
            # Keep the raw text so the caller still sees what the CLI printed
            reset_at, human = 0, status.session_reset_time

        return LlmLimitStatus(
            provider=provider,
            status=_limit_state(status.session_used >= CLAUDE_LIMIT_PERCENT),
            reset_at=reset_at,
            reset_at_human=human,
        )
    except Exception as e:
        logger.warning(f"claude check failed: {e}")
        return _unknown_status(provider)


async def get_gemini_status(now: Optional[datetime] = None) -> LlmLimitStatus:
    provider = "gemini"
    try:
        if not is_command_available(GEMINI_COMMAND):
            logger.warning("Skipping gemini: CLI is not available on this system")
            return _unknown_status(provider, UNKNOWN_SKIPPED)

        usage = await GeminiClient().get_usage_stats()

        is_limited = any(_percent(row.usage) >= GEMINI_LIMIT_PERCENT for row in usage)

        resets = [to_absolute_instant(row.resets, now) for row in usage]
        known = [reset for reset in resets if isinstance(reset, int)]
        earliest = min(known) if known else None

        return LlmLimitStatus(
            provider=provider,
            status=_limit_state(is_limited),
            reset_at=earliest if earliest is not None else 0,
            reset_at_human=format_epoch_ms(earliest) if earliest is not None else UNKNOWN,
        )
    except Exception as e:
        logger.warning(f"gemini check failed: {e}")
        return _unknown_status(provider)


async def get_zai_status(now: Optional[datetime] = None) -> LlmLimitStatus:
    provider = "zai"
    try:
        if not is_chrome_config_available():
            logger.warning(
                "Skipping zai: Chrome environment variables "
                "(CHROME_OUTPUT_DIR, CHROME_USER_DATA_DIR) are not set"
            )
            return _unknown_status(provider, UNKNOWN_SKIPPED)

        config = load_chrome_config()
        limits = await ZaiClient(config).get_usage_quota()

        tokens_limit = next((limit for limit in limits if limit.type == ZAI_TOKENS_LIMIT), None)
        if tokens_limit is None:
            logger.warning(f"zai: no {ZAI_TOKENS_LIMIT} entry among {len(limits)} limits")
            return _unknown_status(provider)

        # A zero timestamp means the API has no reset scheduled
        if tokens_limit.next_reset_time:
            reset_at = to_absolute_instant(tokens_limit.next_reset_time, now)
        else:
            reset_at = UNKNOWN
        is_limited = tokens_limit.percentage >= ZAI_LIMIT_PERCENT
        if not isinstance(reset_at, int):
            return LlmLimitStatus(
                provider=provider, status=_limit_state(is_limited), reset_at=0, reset_at_human=UNKNOWN
            )

        return LlmLimitStatus(
            provider=provider,
            status=_limit_state(is_limited),
            reset_at=reset_at,
            reset_at_human=format_epoch_ms(reset_at),
        )
    except Exception as e:
        logger.warning(f"zai check failed: {e}")
        return _unknown_status(provider)


STATUS_CHECKS: dict[str, Callable[..., Awaitable[LlmLimitStatus]]] = {
    "claude": get_claude_status,
    "gemini": get_gemini_status,
    "zai": get_zai_status,
}


# ── Aggregation ──────────────────────────────────────────────────────────────


async def check_limits(tools: Optional[Iterable[str]] = None) -> list[LlmLimitStatus]:
    """Check rate limits for ``tools`` (all providers when empty).

    Checks run concurrently. The result has one entry per requested
    provider, in request order.

    Raises:
        ValueError: a requested provider name is not recognized.
    """
    providers = list(tools) if tools else list(PROVIDERS)
    unknown = [name for name in providers if name not in STATUS_CHECKS]
    if unknown:
        raise ValueError(f"Unknown provider(s): {', '.join(unknown)}. Valid: {', '.join(PROVIDERS)}")

    logger.debug(f"Checking limits for: {', '.join(providers)}")
    results = await asyncio.gather(
        *(STATUS_CHECKS[name]() for name in providers),
        return_exceptions=True,
    )

    statuses = []
    for name, result in zip(providers, results):
        if isinstance(result, BaseException):
            logger.warning(f"{name} check failed: {result}")
            result = _unknown_status(name)
        statuses.append(result)
    return statuses
