from __future__ import annotations

import typer

from relctl.cli.commands._helpers import run_release
from relctl.cli.context import build_context
from relctl.services.access import collaborate as manage_admins


def collaborate(
    email: str | None = typer.Argument(None, help="Admin to add (or remove with --remove)"),
    remove: bool = typer.Option(False, "--remove", help="Remove the admin instead"),
) -> None:
    """Manage the admins on your app. Without an email, list them."""
    ctx = build_context()
    run_release(ctx, lambda session: manage_admins(session, email, remove=remove))
