from __future__ import annotations

import typer

from relctl.cli.commands._helpers import run_release
from relctl.cli.context import build_context
from relctl.services.release.migrate import migrate as migrate_versions
from relctl.services.release.model import DEFAULT_PERCENT, MigrateOptions


def migrate(
    from_version: str | None = typer.Argument(None, help="Version to migrate users from"),
    to_version: str | None = typer.Argument(None, help="Version to migrate users to"),
    percent: str = typer.Argument(DEFAULT_PERCENT, help="Percent of users to migrate"),
    user: str | None = typer.Option(None, "--user", help="Migrate only this user"),
    update_migrations: bool = typer.Option(
        False,
        "--update-migrations",
        help="Update migration code with code from the working directory",
    ),
) -> None:
    """Migrate users from one version of your app to another.

    Swap the versions to revert. Migrations take 5-10 minutes; track them with
    `relctl history`.
    """
    ctx = build_context()
    options = MigrateOptions(user=user, update_migrations=update_migrations)
    run_release(
        ctx,
        lambda session: migrate_versions(session, from_version, to_version, percent, options),
    )
