"""MCP Server entry point for the AI limit checker.

Exposes one tool over the Model Context Protocol:
- tool_check_limits: report whether Claude, Gemini and Z.ai accounts are
  rate-limited, and when they reset.
"""

from __future__ import annotations

import logging
import sys

from mcp.server.fastmcp import FastMCP

from .tools.limit_tools import check_provider_limits

# stdout is reserved for MCP JSON-RPC
logger = logging.getLogger("ai-limit-checker")
if not logger.handlers:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s [%(name)s] %(levelname)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)


mcp = FastMCP(
    "ai-limit-checker",
    instructions=(
        "AI Limit Checker - Reports whether LLM provider accounts are rate-limited. "
        "Call tool_check_limits before starting long work on a provider to see "
        "whether it is exhausted and when its quota resets. Checks drive the "
        "provider CLIs and dashboards, so a call can take up to a minute."
    ),
)


@mcp.tool()
async def tool_check_limits(providers: str = "") -> str:
    """Check current rate-limit status for LLM providers.

    Drives the `claude` and `gemini` CLIs and the Z.ai dashboard, then
    reports each provider as rate limited or available with its reset time.

    Args:
        providers: Comma-separated subset of "claude,gemini,zai". Empty=all.
    """
    return await check_provider_limits(providers)


def main():
    """Run the MCP server on STDIO transport."""
    logger.info("Starting AI Limit Checker MCP server...")
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
