"""Shared helpers for CLI commands."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, TypeVar

import typer

from relctl.api.client import HttpxApiClient, build_async_client
from relctl.core.errors import error_code_for
from relctl.core.result import Err, Result
from relctl.output.console import Style
from relctl.services.release.errors import ReleaseError
from relctl.services.release.model import ReleaseSession

if TYPE_CHECKING:
    from relctl.cli.context import CLIContext


T = TypeVar("T")

ReleaseOperation = Callable[[ReleaseSession], Awaitable[Result[T, ReleaseError]]]


async def confirm_prompt(question: str, default: bool) -> bool:
    return await asyncio.to_thread(typer.confirm, question, default=default)


def exit_on_error(result: Result[T, ReleaseError], ctx: CLIContext) -> None:
    """Print the error and exit with the code for its kind; no-op for Ok."""
    if isinstance(result, Err):
        error = result.error
        ctx.console.error(error.message)
        if error.hint:
            ctx.console.print(f"hint: {error.hint}", Style.DIM)
        raise typer.Exit(code=int(error_code_for(error.kind)))


def run_release(ctx: CLIContext, operation: ReleaseOperation[T]) -> T:
    """Run one release operation on a fresh event loop and HTTP client.

    Exits the process with the mapped error code on Err.
    """

    async def _run() -> Result[T, ReleaseError]:
        async with build_async_client(ctx.config) as client:
            session = ReleaseSession(
                api=HttpxApiClient(client),
                console=ctx.console,
                confirm=confirm_prompt,
                project_dir=ctx.project_dir,
                deploy_key=ctx.config.deploy_key,
            )
            return await operation(session)

    result = asyncio.run(_run())
    exit_on_error(result, ctx)
    return result.unwrap()
