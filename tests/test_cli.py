"""Tests for the command-line entry point."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, patch

from typer.testing import CliRunner

from ai_limit_checker.cli import app
from ai_limit_checker.models.usage import LlmLimitStatus

CHECK_LIMITS = "ai_limit_checker.cli.check_limits"

runner = CliRunner()


def test_prints_json_records():
    results = [
        LlmLimitStatus(provider="zai", status="rate_limit_exceed", reset_at=1767225600000,
                       reset_at_human="2026-01-01T00:00:00.000Z"),
    ]
    with patch(CHECK_LIMITS, AsyncMock(return_value=results)) as check:
        result = runner.invoke(app, ["ZAI"])

    assert result.exit_code == 0
    check.assert_awaited_once_with(["zai"])
    assert json.loads(result.stdout) == [
        {
            "provider": "zai",
            "status": "rate_limit_exceed",
            "resetAt": 1767225600000,
            "resetAtHuman": "2026-01-01T00:00:00.000Z",
        }
    ]


def test_no_arguments_checks_all_providers():
    with patch(CHECK_LIMITS, AsyncMock(return_value=[])) as check:
        result = runner.invoke(app, [])

    assert result.exit_code == 0
    check.assert_awaited_once_with(None)
    assert json.loads(result.stdout) == []


def test_unknown_provider_exits_with_usage_error():
    with patch(CHECK_LIMITS, AsyncMock()) as check:
        result = runner.invoke(app, ["claude", "openai"])

    assert result.exit_code == 2
    check.assert_not_awaited()


def test_unexpected_failure_exits_nonzero():
    with patch(CHECK_LIMITS, AsyncMock(side_effect=RuntimeError("event loop broke"))):
        result = runner.invoke(app, ["claude"])

    assert result.exit_code == 1
