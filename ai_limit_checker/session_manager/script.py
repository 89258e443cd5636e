"""Keystroke scripts that walk an interactive CLI to a result screen.

A script is a fixed list of steps. ``WaitFor`` steps watch for observable
text and always have a bounded, non-fatal timeout. ``Send`` and ``Settle``
steps only pause for a fixed time, for UI debounce the program gives no
signal about.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from typing import Optional, Union

from ..config import write_debug_capture
from .terminal import TerminalSession

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s [%(name)s] %(levelname)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)


@dataclass(frozen=True)
class Send:
    """Write ``data`` to the session, then pause ``settle_ms``."""

    data: str
    settle_ms: int = 0


@dataclass(frozen=True)
class Settle:
    ms: int


@dataclass(frozen=True)
class WaitFor:
    """Wait until any marker shows up in the normalized output."""

    label: str
    markers: tuple[str, ...]
    timeout_ms: int


Step = Union[Send, Settle, WaitFor]


@dataclass(frozen=True)
class Script:
    name: str
    steps: tuple[Step, ...]
    teardown: tuple[Step, ...] = ()


@dataclass
class ScriptResult:
    """Outcome of each wait, keyed by label (matched marker or None)."""

    waits: dict[str, Optional[str]] = field(default_factory=dict)
    text: str = ""
    output: str = ""

    def matched(self, label: str) -> bool:
        return self.waits.get(label) is not None


async def _run_step(session: TerminalSession, step: Step, result: ScriptResult, script: str) -> None:
    if isinstance(step, Send):
        session.send(step.data)
        if step.settle_ms:
            await session.settle(step.settle_ms)
    elif isinstance(step, Settle):
        await session.settle(step.ms)
    elif isinstance(step, WaitFor):
        marker = await session.wait_for_any(step.markers, step.timeout_ms)
        result.waits[step.label] = marker
        if marker is None:
            logger.info(
                f"[{script}] '{step.label}' not seen within {step.timeout_ms}ms, continuing"
            )
        else:
            logger.debug(f"[{script}] '{step.label}' reached via {marker!r}")
    else:
        raise TypeError(f"Unknown script step: {step!r}")


async def run_script(session: TerminalSession, script: Script) -> ScriptResult:
    """Run ``script`` against a started session.

    Teardown steps run even when a main step raises. The session itself is
    closed by its owner, not here.
    """
    result = ScriptResult()
    try:
        for step in script.steps:
            await _run_step(session, step, result, script.name)
    finally:
        if session.is_alive:
            for step in script.teardown:
                await _run_step(session, step, result, script.name)
        result.output = session.output
        result.text = session.text
    return result


def save_debug_captures(name: str, result: ScriptResult) -> None:
    """Dump the raw and cleaned captures when DEBUG_CAPTURE_DIR is set."""
    try:
        raw_path = write_debug_capture(f"{name}-debug-output.txt", result.output)
        write_debug_capture(f"{name}-debug-cleaned.txt", result.text)
    except OSError as e:
        logger.warning(f"[{name}] Could not save debug captures: {e}")
        return
    if raw_path is not None:
        logger.info(f"[{name}] Debug captures saved next to {raw_path}")
