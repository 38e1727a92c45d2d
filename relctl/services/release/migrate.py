"""Migrate users from one app version to another.

Migrations are queued on the platform and finish asynchronously (usually
within 5-10 minutes); this module never polls for completion.
"""

from __future__ import annotations

import asyncio

from relctl.api.outcome import Success
from relctl.core.result import Err, Ok, Result
from relctl.core.structured import StrDict
from relctl.output.console import Style
from relctl.services.app_link import AppRecord, get_linked_app
from relctl.services.build import build_bundle, encode_bundle
from relctl.services.release.errors import MIGRATION_FAILED, ReleaseError, rejection_error
from relctl.services.release.model import (
    DEFAULT_PERCENT,
    MigrateOptions,
    MigrateOutcome,
    ReleaseSession,
    parse_percent,
)
from relctl.services.release.promote import promote

__all__ = ["migrate", "migration_body", "should_offer_promotion"]

USAGE = "Must provide both old and new version like `relctl migrate 1.0.0 1.0.1`."
QUEUED = (
    "Migration successfully queued, please check `relctl history` to track the status. "
    "Migrations usually take between 5-10 minutes."
)


def should_offer_promotion(percent: int | None, app: AppRecord, to_version: str) -> bool:
    """Moving everyone on a public app to a non-production version?"""
    return percent == 100 and app.public and to_version != app.latest_version


def migration_body(percent: int | None, user: str | None) -> Result[StrDict, ReleaseError]:
    if user:
        if percent != 100:
            return Err(
                ReleaseError(
                    kind="usage",
                    message="Cannot define percent and user. Use only one or the other.",
                )
            )
        return Ok({"user": user})
    return Ok({"percent": percent})


async def _maybe_promote_first(
    session: ReleaseSession, app: AppRecord, to_version: str, percent: int | None
) -> Result[None, ReleaseError]:
    if not should_offer_promotion(percent, app, to_version):
        return Ok(None)

    session.console.print(
        f"You're trying to migrate all the users to {to_version}, "
        "which is not the current production version.",
        Style.WARNING,
    )
    question = f"Do you want to promote {to_version} to production first?"
    if not await session.confirm(question, False):
        return Ok(None)

    promoted = await promote(session, to_version, emit_migrate_hint=False)
    if isinstance(promoted, Err):
        return promoted
    return Ok(None)


async def migrate(
    session: ReleaseSession,
    from_version: str | None,
    to_version: str | None,
    percent_text: str | int | None = DEFAULT_PERCENT,
    options: MigrateOptions | None = None,
) -> Result[MigrateOutcome, ReleaseError]:
    """Queue a migration of users from ``from_version`` to ``to_version``.

    Args:
        session: Shared collaborators for this invocation
        from_version: Version users are currently on
        to_version: Version to move them to
        percent_text: Rollout fraction, e.g. "15%"; defaults to everyone
        options: Single-user targeting and migration code refresh

    Returns:
        Ok("queued") once the platform accepted the migration, Ok("skipped")
        when a version argument is missing, or Err.
    """
    options = options or MigrateOptions()
    console = session.console

    if not from_version or not to_version:
        console.print(USAGE, Style.WARNING)
        return Ok("skipped")

    percent = parse_percent(percent_text)
    body_r = migration_body(percent, options.user)
    if isinstance(body_r, Err):
        return body_r
    body = body_r.value

    app_r = await get_linked_app(session.api, session.project_dir)
    if isinstance(app_r, Err):
        return app_r
    app = app_r.value

    promoted = await _maybe_promote_first(session, app, to_version, percent)
    if isinstance(promoted, Err):
        return promoted

    if options.user:
        console.print(
            f'Getting ready to migrate "{options.user}" in your app "{app.title}" '
            f"from {from_version} to {to_version}.\n"
        )
        label = f"Starting migration from {from_version} to {to_version} for {options.user}"
    else:
        console.print(
            f'Getting ready to migrate your app "{app.title}" '
            f"from {from_version} to {to_version}.\n"
        )
        label = f"Starting migration from {from_version} to {to_version} for {percent}%"

    with console.progress(label):
        if options.update_migrations:
            zip_path = await asyncio.to_thread(build_bundle, session.project_dir)
            if isinstance(zip_path, Err):
                return zip_path
            encoded = encode_bundle(zip_path.value)
            if isinstance(encoded, Err):
                return encoded
            body["zip_file"] = encoded.value

        outcome = await session.api.request(
            "POST",
            f"/apps/{app.id}/versions/{from_version}/migrate-to/{to_version}",
            body=body,
        )

    if not isinstance(outcome, Success):
        return Err(rejection_error(outcome, heading=MIGRATION_FAILED))

    console.newline()
    console.success(QUEUED)
    return Ok("queued")
