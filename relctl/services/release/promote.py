"""Promote an app version to production.

Flow: credentials check, then the app record and the version's changelog are
read together, the operator confirms, and the platform is asked to promote.
An app that has never been activated for public use is rejected with an
activation URL; in that case the app review checks run and the operator is
sent to the activation page instead of getting a bare error.
"""

from __future__ import annotations

import asyncio

from relctl.api.outcome import (
    RejectedWithActivation,
    RejectedWithErrors,
    Success,
    TransportFailure,
)
from relctl.core.result import Err, Ok, Result
from relctl.core.structured import StrDict, get_list
from relctl.output.console import Style
from relctl.services.app_link import AppRecord, ensure_credentials, get_linked_app
from relctl.services.changelog import CHANGELOG_FILE_NAME, read_version_changelog
from relctl.services.release.errors import (
    PROMOTION_FAILED,
    ReleaseError,
    format_failures,
    rejection_error,
    transport_error,
)
from relctl.services.release.model import PromoteOutcome, ReleaseSession

__all__ = ["promote", "run_app_review_checks"]

CHANGELOG_FORMAT_URL = "https://keepachangelog.com/en/1.1.0/"
MIGRATE_HINT = "Optionally, run the `relctl migrate` command to move users to this version."


async def run_app_review_checks(
    session: ReleaseSession, app_id: int, version: str
) -> Result[None, ReleaseError]:
    """Run the platform's app review checks for ``version``.

    Every reported failure ends up in the error message, in the order the
    platform listed them. A passing review is Ok(None); promotion is never
    retried from here.
    """
    session.console.header("Running App Review Checks.")
    outcome = await session.api.request(
        "POST", f"/apps/{app_id}/versions/{version}/app-review-run"
    )
    if not isinstance(outcome, Success):
        return Err(rejection_error(outcome, heading=PROMOTION_FAILED))

    failed = get_list(outcome.payload, "failed") or []
    if failed:
        return Err(
            ReleaseError(kind="review_failed", message=format_failures(PROMOTION_FAILED, failed))
        )
    return Ok(None)


async def _confirm_changelog(session: ReleaseSession, version: str, changelog: str | None) -> bool:
    console = session.console
    if changelog:
        console.print(f"Changelog found for {version}!", Style.SUCCESS)
        console.print(f"\n---\n{changelog}\n---\n")
        return await session.confirm(
            "Would you like to continue promoting with this changelog?", False
        )

    console.warning(
        f"Changelog not found. Please create a `{CHANGELOG_FILE_NAME}` file in a format "
        f"similar to {CHANGELOG_FORMAT_URL}, with user-facing descriptions."
    )
    return await session.confirm("Would you like to continue promoting without a changelog?", False)


async def promote(
    session: ReleaseSession,
    version: str | None,
    *,
    emit_migrate_hint: bool = True,
) -> Result[PromoteOutcome, ReleaseError]:
    """Promote ``version`` of the linked app to production.

    Args:
        session: Shared collaborators for this invocation
        version: Version to promote; a missing version is reported and skipped
        emit_migrate_hint: Suggest ``relctl migrate`` after a successful promotion.
            False when called from a migration that is about to migrate anyway.

    Returns:
        Ok("promoted"), Ok("activation_requested") when the app still needs
        its one-time activation, Ok("skipped") without a version, or Err.
        Declining the changelog prompt is Err(kind="cancelled").
    """
    console = session.console
    if not version:
        console.print("Error: No deployment/version selected...", Style.ERROR)
        return Ok("skipped")

    creds = await ensure_credentials(session.api, session.deploy_key)
    if isinstance(creds, Err):
        return creds

    app_r, changelog_r = await asyncio.gather(
        get_linked_app(session.api, session.project_dir),
        asyncio.to_thread(read_version_changelog, session.project_dir, version),
    )
    if isinstance(app_r, Err):
        return app_r
    if isinstance(changelog_r, Err):
        return changelog_r
    app: AppRecord = app_r.value
    changelog = changelog_r.value

    console.print(f'Preparing to promote version {version} of your app "{app.title}".\n')

    if not await _confirm_changelog(session, version, changelog):
        console.newline()
        return Err(ReleaseError(kind="cancelled", message="Cancelled promote."))
    console.newline()

    body: StrDict = {}
    if changelog:
        body["changelog"] = changelog

    with console.progress(f"Verifying and promoting {version}"):
        outcome = await session.api.request(
            "PUT", f"/apps/{app.id}/versions/{version}/promote/production", body=body
        )

    match outcome:
        case Success():
            console.success("Promotion successful!")
            if emit_migrate_hint:
                console.print(MIGRATE_HINT, Style.DIM)
            return Ok("promoted")
        case RejectedWithActivation(url=activation_url):
            review = await run_app_review_checks(session, app.id, version)
            if isinstance(review, Err):
                return review
            console.success(
                "Good news! Your app passes validation and has the required number "
                "of testers and active users."
            )
            console.print(
                f"The next step is to visit: {activation_url} "
                "to request public activation of your app.",
                Style.INFO,
            )
            return Ok("activation_requested")
        case RejectedWithErrors(errors=errors):
            return Err(
                ReleaseError(kind="rejected", message=format_failures(PROMOTION_FAILED, errors))
            )
        case TransportFailure(cause=cause):
            return Err(transport_error(cause))
