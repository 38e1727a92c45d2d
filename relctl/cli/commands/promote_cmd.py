from __future__ import annotations

import typer

from relctl.cli.commands._helpers import run_release
from relctl.cli.context import build_context
from relctl.services.release.promote import promote as promote_version


def promote(
    version: str | None = typer.Argument(None, help="Version to promote, e.g. 1.0.0"),
) -> None:
    """Promote a specific version to public access.

    This marks the version as the official public version; existing users stay
    on their current version until you run `relctl migrate`.
    """
    ctx = build_context()
    run_release(ctx, lambda session: promote_version(session, version))
