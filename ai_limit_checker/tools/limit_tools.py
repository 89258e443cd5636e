"""MCP tool bodies for checking provider rate limits."""

from __future__ import annotations

import json

from ..constants import PROVIDERS
from ..session_manager.manager import check_limits


def _parse_providers(providers: str) -> list[str]:
    return [name.strip().lower() for name in providers.split(",") if name.strip()]


async def check_provider_limits(providers: str = "") -> str:
    """Check whether LLM provider accounts are currently rate-limited.

    Args:
        providers: Comma-separated names ("claude,gemini,zai"). Empty checks all.

    Returns:
        One line per provider followed by the raw JSON records.
    """
    names = _parse_providers(providers)
    unknown = [name for name in names if name not in PROVIDERS]
    if unknown:
        return f"Error: unknown provider(s) {', '.join(unknown)}. Valid: {', '.join(PROVIDERS)}"

    results = await check_limits(names or None)

    lines = [f"Checked {len(results)} provider(s):\n"]
    for status in results:
        state = "RATE LIMITED" if status.is_rate_limited else "available"
        reset = status.reset_at_human or "Unknown"
        if status.is_rate_limited:
            lines.append(f"- **{status.provider}**: {state}, resets {reset}")
        else:
            lines.append(f"- **{status.provider}**: {state} (reset: {reset})")

    payload = json.dumps([status.to_output() for status in results], indent=2)
    lines.append(f"\n```json\n{payload}\n```")
    return "\n".join(lines)
