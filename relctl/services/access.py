"""Manage who can administer the linked app."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from relctl.api.client import ApiClient
from relctl.api.outcome import Success
from relctl.core.result import Err, Ok, Result
from relctl.core.structured import as_str_dict, get_list, get_str
from relctl.output.console import ConsoleProtocol
from relctl.services.app_link import get_linked_app
from relctl.services.release.errors import ReleaseError, rejection_error
from relctl.services.release.model import ReleaseSession

__all__ = ["Collaborator", "collaborate", "list_collaborators"]

AccessOutcome = Literal["listed", "added", "removed"]

_FAILED = "Updating admins failed for the following reasons:"


@dataclass(frozen=True, slots=True)
class Collaborator:
    email: str
    role: str
    status: str


async def list_collaborators(
    api: ApiClient, app_id: int
) -> Result[list[Collaborator], ReleaseError]:
    outcome = await api.request("GET", f"/apps/{app_id}/collaborators")
    if not isinstance(outcome, Success):
        return Err(rejection_error(outcome, heading=_FAILED))

    out: list[Collaborator] = []
    for item in get_list(outcome.payload, "objects") or []:
        entry = as_str_dict(item)
        if entry is None:
            continue
        email = get_str(entry, "email")
        if email is None:
            continue
        out.append(
            Collaborator(
                email=email,
                role=get_str(entry, "role") or "admin",
                status=get_str(entry, "status") or "unknown",
            )
        )
    return Ok(out)


def _render(console: ConsoleProtocol, title: str, collaborators: list[Collaborator]) -> None:
    if not collaborators:
        console.print(f'Your app "{title}" has no admins yet.')
        return
    console.print(f'The admins on your app "{title}" listed below.\n')
    console.table(
        ["Email", "Role", "Status"],
        [[c.email, c.role, c.status] for c in collaborators],
    )


async def collaborate(
    session: ReleaseSession,
    email: str | None = None,
    *,
    remove: bool = False,
) -> Result[AccessOutcome, ReleaseError]:
    """List admins, or add/remove ``email`` as an admin of the linked app."""
    console = session.console
    app_r = await get_linked_app(session.api, session.project_dir)
    if isinstance(app_r, Err):
        return app_r
    app = app_r.value

    if not email:
        if remove:
            return Err(ReleaseError(kind="usage", message="--remove needs an email to remove"))
        listed = await list_collaborators(session.api, app.id)
        if isinstance(listed, Err):
            return listed
        _render(console, app.title, listed.value)
        return Ok("listed")

    verb = "remove" if remove else "add"
    preposition = "from" if remove else "to"
    console.print(f'Preparing to {verb} admin {email} {preposition} your app "{app.title}".\n')

    label = f"Removing {email}" if remove else f"Adding {email}"
    with console.progress(label):
        outcome = await session.api.request(
            "DELETE" if remove else "POST",
            f"/apps/{app.id}/collaborators/{email}",
        )
    if not isinstance(outcome, Success):
        return Err(rejection_error(outcome, heading=_FAILED))

    console.newline()
    console.success("Admins updated! Try viewing them with `relctl collaborate`.")
    return Ok("removed" if remove else "added")
