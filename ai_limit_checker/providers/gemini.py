"""Gemini CLI client: reads per-model quota rows from `/stats`."""

from __future__ import annotations

from ..config import GEMINI_COMMAND
from ..constants import (
    GEMINI_ARGS,
    GEMINI_READY_MARKERS,
    GEMINI_STATS_MARKER,
    KEY_ENTER,
    READY_TIMEOUT_MS,
    RESULT_TIMEOUT_MS,
)
from ..models.usage import GeminiModelUsage
from ..session_manager.parser import parse_gemini_usage
from ..session_manager.script import Script, Send, Settle, WaitFor, run_script, save_debug_captures
from ..session_manager.terminal import TerminalSession

GEMINI_STATS_SCRIPT = Script(
    name="gemini",
    steps=(
        WaitFor("ready", tuple(GEMINI_READY_MARKERS), READY_TIMEOUT_MS),
        Send("/stats" + KEY_ENTER),
        WaitFor("stats", (GEMINI_STATS_MARKER,), RESULT_TIMEOUT_MS),
        # The first row can land before the rest of the table
        Settle(1000),
    ),
    teardown=(
        Send("/exit" + KEY_ENTER, settle_ms=1000),
    ),
)


class GeminiClient:
    """Drives `gemini` through `/stats` and parses the model usage table."""

    def __init__(self, command: str = GEMINI_COMMAND, args: list[str] | None = None):
        self._command = command
        self._args = list(GEMINI_ARGS if args is None else args)

    async def get_usage_stats(self) -> list[GeminiModelUsage]:
        async with TerminalSession(self._command, self._args) as session:
            result = await run_script(session, GEMINI_STATS_SCRIPT)

        save_debug_captures("gemini", result)
        return parse_gemini_usage(result.text)
