"""Shared test fixtures."""

from __future__ import annotations

import stat
from pathlib import Path
from typing import Callable

import pytest

CLAUDE_USAGE_SCREEN = (
    "\x1b[2J\x1b[H\x1b[1m Settings:\x1b[0m  Status   Config   \x1b[7mUsage\x1b[0m\r\n"
    "\r\n"
    " Current session\r\n"
    " \x1b[38;5;75m█████████████████████████████████████████████\x1b[39m    87% used\r\n"
    " Resets 4pm (Europe/Berlin)\r\n"
    "\r\n"
    " Current week (all models)\r\n"
    " \x1b[38;5;75m███████\x1b[39m                                         14% used\r\n"
    " Resets Jan 10, 12pm (Europe/Berlin)\r\n"
    "\r\n"
    " Current week (Opus)\r\n"
    " \x1b[38;5;75m██\x1b[39m                                               3% used\r\n"
    "\r\n"
    " \x1b[2mEsc to exit\x1b[22m\r\n"
)

GEMINI_STATS_SCREEN = (
    "\x1b[36m╭──────────────────────────────────────────────────────────────╮\x1b[39m\r\n"
    "│  Model Usage                  Reqs   Usage left                │\r\n"
    "│  gemini-2.5-pro                 12    41.0% (Resets in 23h 45m) │\r\n"
    "│  \x1b[1mgemini-2.5-flash\x1b[22m               -    98.6% (Resets in 2h 39m)  │\r\n"
    "│  gemini-2.5-flash-lite          3    12.5% (Resets in 1d 2h 30m)│\r\n"
    "\x1b[36m╰──────────────────────────────────────────────────────────────╯\x1b[39m\r\n"
)


@pytest.fixture
def zai_body() -> dict:
    """A successful Z.ai quota envelope, as the dashboard receives it."""
    return {
        "code": 200,
        "msg": "Operation successful",
        "success": True,
        "data": {
            "limits": [
                {
                    "type": "TIME_LIMIT",
                    "unit": 5,
                    "number": 1,
                    "usage": 4000,
                    "currentValue": 120,
                    "remaining": 3880,
                    "percentage": 3,
                    "usageDetails": [
                        {"modelCode": "search-prime", "usage": 100},
                        {"modelCode": "web-reader", "usage": 20},
                    ],
                },
                {
                    "type": "TOKENS_LIMIT",
                    "unit": 3,
                    "number": 5,
                    "usage": 40000000,
                    "currentValue": 40000000,
                    "remaining": 0,
                    "percentage": 100,
                    "nextResetTime": 1767225600000,
                },
            ]
        },
    }


@pytest.fixture
def fake_cli(tmp_path: Path) -> Callable[[str, str], str]:
    """Write an executable shell script standing in for a provider CLI."""

    def _make(name: str, body: str) -> str:
        path = tmp_path / name
        path.write_text("#!/bin/sh\n" + body)
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return str(path)

    return _make
