"""Command-line interface for LLM Security Core."""

from __future__ import annotations

import asyncio
import json
import sys
import time

import click

from llm_security_core.config import get_settings
from llm_security_core.errors import AdapterError
from llm_security_core.factory import create_orchestrator_from_settings
from llm_security_core.logging import setup_logging
from llm_security_core.models import RequestKind, SecurityRequest, SecurityResult

_EXAMPLES = """\b
Examples:
  llm-security check "Hello world" prompt
  llm-security validate "User input here"
  llm-security status
"""


@click.group(invoke_without_command=True, epilog=_EXAMPLES)
@click.option("--verbose", "-v", is_flag=True, help="Log at the configured level")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """LLM-Security-Core CLI."""
    setup_logging(get_settings(), level=None if verbose else "WARNING")
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@main.command()
@click.argument("content", default="")
@click.argument(
    "request_type",
    metavar="[TYPE]",
    type=click.Choice([RequestKind.PROMPT.value, RequestKind.OUTPUT.value]),
    default=RequestKind.PROMPT.value,
)
def check(content: str, request_type: str) -> None:
    """Process content through security orchestration.

    TYPE is prompt or output (default: prompt).
    """
    result = _run(content, RequestKind(request_type))
    click.echo(json.dumps(result.to_dict(), indent=2))
    sys.exit(0 if result.allowed else 1)


@main.command()
@click.argument("content", default="")
def validate(content: str) -> None:
    """Quick validation check (returns VALID/BLOCKED)."""
    result = _run(content, RequestKind.PROMPT)
    click.echo("VALID" if result.allowed else "BLOCKED")
    if result.violations:
        click.echo("Violations: " + ", ".join(v.policy for v in result.violations))
    sys.exit(0 if result.allowed else 1)


@main.command()
def status() -> None:
    """Show service status."""
    settings = get_settings()
    click.echo(
        json.dumps(
            {
                "status": "ready",
                "mode": "simulator" if settings.simulator_mode else "bound",
                "version": settings.version,
            }
        )
    )


@main.command("help")
@click.pass_context
def help_command(ctx: click.Context) -> None:
    """Show this help message."""
    click.echo(ctx.parent.get_help() if ctx.parent else ctx.get_help())


def _run(content: str, kind: RequestKind) -> SecurityResult:
    """Process one CLI request, exiting with status 1 on adapter failure."""
    request = SecurityRequest(id=f"cli-{int(time.time() * 1000)}", kind=kind, content=content)
    try:
        return asyncio.run(_process(request))
    except AdapterError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


async def _process(request: SecurityRequest) -> SecurityResult:
    orchestrator = create_orchestrator_from_settings()
    try:
        return await orchestrator.process(request)
    finally:
        await orchestrator.close()


if __name__ == "__main__":
    main()
