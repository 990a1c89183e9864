"""
Shared plumbing for CLI commands.
"""

import asyncio
import sys
from typing import Any, Awaitable, Callable

import click

from ..core.exceptions import AdStudioError
from ..services.api_client import ApiClient


def run_with_client(action: Callable[[ApiClient], Awaitable[Any]]) -> Any:
    """
    Run an async action against a fresh ApiClient and close it afterwards.

    AdStudio errors are printed to stderr and exit with status 1.
    """
    async def _run():
        async with ApiClient() as client:
            return await action(client)

    try:
        return asyncio.run(_run())
    except AdStudioError as e:
        click.echo(f"❌ Error: {e}", err=True)
        sys.exit(1)


def format_ctr(ctr: float) -> str:
    return f"{ctr * 100:.2f}%"
