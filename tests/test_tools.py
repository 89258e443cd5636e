"""Tests for the MCP tool body."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, patch

import pytest

from ai_limit_checker.models.usage import LlmLimitStatus
from ai_limit_checker.tools.limit_tools import check_provider_limits

CHECK_LIMITS = "ai_limit_checker.tools.limit_tools.check_limits"

RESULTS = [
    LlmLimitStatus(
        provider="claude",
        status="rate_limit_exceed",
        reset_at=1767225600000,
        reset_at_human="2026-01-01T00:00:00.000Z",
    ),
    LlmLimitStatus(provider="gemini", status="available", reset_at=0, reset_at_human="Unknown (skipped)"),
]


@pytest.mark.asyncio
async def test_reports_each_provider_and_json():
    with patch(CHECK_LIMITS, AsyncMock(return_value=RESULTS)) as check:
        text = await check_provider_limits(" Claude , gemini ")

    check.assert_awaited_once_with(["claude", "gemini"])
    assert "Checked 2 provider(s):" in text
    assert "- **claude**: RATE LIMITED, resets 2026-01-01T00:00:00.000Z" in text
    assert "- **gemini**: available (reset: Unknown (skipped))" in text

    payload = json.loads(text.split("```json\n", 1)[1].rsplit("\n```", 1)[0])
    assert payload[0] == {
        "provider": "claude",
        "status": "rate_limit_exceed",
        "resetAt": 1767225600000,
        "resetAtHuman": "2026-01-01T00:00:00.000Z",
    }


@pytest.mark.asyncio
async def test_empty_selection_checks_everything():
    with patch(CHECK_LIMITS, AsyncMock(return_value=[])) as check:
        await check_provider_limits("")

    check.assert_awaited_once_with(None)


@pytest.mark.asyncio
async def test_unknown_provider_is_reported_without_checking():
    with patch(CHECK_LIMITS, AsyncMock()) as check:
        text = await check_provider_limits("claude,openai")

    check.assert_not_awaited()
    assert text.startswith("Error: unknown provider(s) openai")
