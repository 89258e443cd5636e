"""Claude CLI client: reads usage from the interactive `/usage` view."""

from __future__ import annotations

from ..config import CLAUDE_COMMAND
from ..constants import (
    CLAUDE_READY_MARKERS,
    CLAUDE_USAGE_MARKERS,
    KEY_CLEAR_LINE,
    KEY_ENTER,
    KEY_ESCAPE,
    READY_TIMEOUT_MS,
    RESULT_TIMEOUT_MS,
)
from ..models.usage import ClaudeStatusInfo
from ..session_manager.parser import parse_claude_status
from ..session_manager.script import Script, Send, WaitFor, run_script, save_debug_captures
from ..session_manager.terminal import TerminalSession

CLAUDE_USAGE_SCRIPT = Script(
    name="claude",
    steps=(
        WaitFor("ready", tuple(CLAUDE_READY_MARKERS), READY_TIMEOUT_MS),
        Send(KEY_CLEAR_LINE, settle_ms=200),
        Send("/usage", settle_ms=300),
        Send(KEY_ENTER, settle_ms=500),
        WaitFor("usage", tuple(CLAUDE_USAGE_MARKERS), RESULT_TIMEOUT_MS),
    ),
    teardown=(
        Send(KEY_ESCAPE, settle_ms=500),
        Send(KEY_CLEAR_LINE, settle_ms=200),
        Send("/exit" + KEY_ENTER, settle_ms=1000),
    ),
)


class ClaudeClient:
    """Drives `claude` through `/usage` and parses the rendered view."""

    def __init__(self, command: str = CLAUDE_COMMAND):
        self._command = command

    async def get_usage_stats(self) -> ClaudeStatusInfo:
        async with TerminalSession(self._command) as session:
            result = await run_script(session, CLAUDE_USAGE_SCRIPT)

        save_debug_captures("claude", result)
        return parse_claude_status(result.text)
