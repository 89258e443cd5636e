"""Parse normalized CLI captures and API payloads into usage records.

Terminal extraction never raises for a missing field: absent values fall
back to 0, "Unknown" or the documented flag default. Only a capture that
lacks the view entirely (no structural marker) is reported as an error.

Claude `/usage` view, after normalization::

    Current session
    ██████████████████████████████████  87% used
    Resets 4pm (Europe/Berlin)

    Current week (all models)
    ███████                             14% used
    Resets Jan 10, 12pm (Europe/Berlin)

Gemini `/stats` table row::

    │  gemini-2.5-flash      -    98.6% (Resets in 2h 39m)      │
"""

from __future__ import annotations

import logging
import re
import sys
from typing import Any, Optional

from pydantic import ValidationError

from ..constants import (
    CLAUDE_NOT_ENTITLED_PHRASE,
    CLAUDE_SECTION_LABELS,
    CLAUDE_SESSION_LABEL,
    CLAUDE_WEEK_LABEL,
    GEMINI_STATS_MARKER,
    UNKNOWN,
)
from ..exceptions import ApiEnvelopeError, StructuralMarkerError
from ..models.usage import ClaudeStatusInfo, GeminiModelUsage, ZaiLimit, ZaiUsageResponse

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s [%(name)s] %(levelname)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)


# ── Patterns ─────────────────────────────────────────────────────────────────

_PERCENT_USED = re.compile(r"(\d+)%\s*used", re.IGNORECASE)
_RESETS = re.compile(r"Resets\s+([^(\r\n]+)(?:\(([^)\r\n]+)\))?", re.IGNORECASE)
_SECTION_START = re.compile(
    "|".join(re.escape(label) for label in CLAUDE_SECTION_LABELS), re.IGNORECASE
)

_GEMINI_ROW = re.compile(
    r"(gemini[\w.-]+)\s+(-|\d+)\s+(\d+(?:\.\d+)?)%\s*\(Resets in ([^)]+)\)"
)


# ── Utility Functions ────────────────────────────────────────────────────────


def _sections(text: str, label: str) -> list[str]:
    """Every block of ``text`` that starts at ``label``.

    A block ends where the next section label begins. The CLI redraws the
    view while it loads, so the same label may appear several times.
    """
    blocks = []
    for match in re.finditer(re.escape(label), text, re.IGNORECASE):
        body_start = match.end()
        next_label = _SECTION_START.search(text, body_start)
        end = next_label.start() if next_label else len(text)
        blocks.append(text[body_start:end])
    return blocks


def _section_percent(text: str, label: str) -> int:
    for block in _sections(text, label):
        match = _PERCENT_USED.search(block)
        if match:
            return int(match.group(1))
    return 0


def _section_reset(text: str, label: str) -> tuple[str, Optional[str]]:
    for block in _sections(text, label):
        match = _RESETS.search(block)
        if match and match.group(1).strip():
            tz = match.group(2).strip() if match.group(2) else None
            return match.group(1).strip(), tz
    return UNKNOWN, None


# ── Claude ───────────────────────────────────────────────────────────────────


def parse_claude_status(text: str) -> ClaudeStatusInfo:
    """Extract session and weekly usage from the Claude `/usage` view."""
    session_reset, session_tz = _section_reset(text, CLAUDE_SESSION_LABEL)
    weekly_reset, weekly_tz = _section_reset(text, CLAUDE_WEEK_LABEL)

    return ClaudeStatusInfo(
        session_used=_section_percent(text, CLAUDE_SESSION_LABEL),
        session_reset_time=session_reset,
        session_reset_timezone=session_tz,
        weekly_used=_section_percent(text, CLAUDE_WEEK_LABEL),
        weekly_reset_time=weekly_reset,
        weekly_reset_timezone=weekly_tz,
        has_subscription=CLAUDE_NOT_ENTITLED_PHRASE not in text,
    )


# ── Gemini ───────────────────────────────────────────────────────────────────


def parse_gemini_row(line: str) -> Optional[GeminiModelUsage]:
    match = _GEMINI_ROW.search(line)
    if not match:
        return None
    return GeminiModelUsage(
        model=match.group(1),
        requests=match.group(2),
        usage=match.group(3),
        resets=match.group(4).strip(),
    )


def parse_gemini_usage(text: str) -> list[GeminiModelUsage]:
    """Extract one record per model row of the Gemini `/stats` table.

    Raises:
        StructuralMarkerError: no rows and no "Resets in" anywhere, meaning
            the stats view never rendered.
    """
    lines = text.replace("\r\n", "\n").replace("\r", "\n").split("\n")
    rows = [row for row in (parse_gemini_row(line) for line in lines) if row is not None]

    if not rows and GEMINI_STATS_MARKER not in text:
        raise StructuralMarkerError(
            'Failed to get usage stats from gemini CLI - "Resets in" not found in output'
        )
    if not rows:
        logger.warning("Gemini stats view rendered but no model rows matched.")
    return rows


# ── Z.ai ─────────────────────────────────────────────────────────────────────


def parse_zai_response(body: Any) -> list[ZaiLimit]:
    """Validate the Z.ai envelope and return its limits.

    Raises:
        ApiEnvelopeError: the body is not an envelope, or reports failure.
    """
    try:
        envelope = ZaiUsageResponse.model_validate(body)
    except ValidationError as e:
        raise ApiEnvelopeError(f"Z.ai API returned an unexpected payload: {e}") from e

    if not envelope.success or envelope.code != 200:
        raise ApiEnvelopeError(f"Z.ai API error: {envelope.msg}", code=envelope.code)

    if envelope.data is None:
        return []
    return envelope.data.limits
