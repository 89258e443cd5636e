"""
AI Limit Checker CLI - prints provider rate-limit status as JSON.
"""
import asyncio
import json
from typing import Optional

import typer

from .constants import PROVIDERS
from .session_manager.manager import check_limits


app = typer.Typer(
    name="ai-limit-checker",
    help="Check whether Claude, Gemini and Z.ai accounts are currently rate-limited",
    add_completion=False,
)


@app.command()
def main(
    providers: Optional[list[str]] = typer.Argument(
        None, help=f"Providers to check ({', '.join(PROVIDERS)}). Default: all"
    ),
):
    """
    Check LLM provider rate limits and print one JSON record per provider.

    Diagnostics for skipped or failed providers go to stderr; stdout only
    carries the JSON list.
    """
    names = [name.lower() for name in providers or []]
    unknown = [name for name in names if name not in PROVIDERS]
    if unknown:
        typer.echo(f"Error: unknown provider(s): {', '.join(unknown)}", err=True)
        raise typer.Exit(code=2)

    try:
        results = asyncio.run(check_limits(names or None))
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    typer.echo(json.dumps([status.to_output() for status in results], indent=2))


if __name__ == "__main__":
    app()
