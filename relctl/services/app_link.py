"""Linked app lookup and credentials check.

A project directory is linked to a platform app through ``.relctlrc``:

    {"id": 4021}

The app record itself is always fetched fresh from the platform.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from relctl.api.client import ApiClient
from relctl.api.outcome import Success
from relctl.core.config import LINK_FILE_NAME
from relctl.core.result import Err, Ok, Result
from relctl.core.structured import StrDict, as_str_dict, get_bool, get_int, get_str
from relctl.services.release.errors import ReleaseError, rejection_error

__all__ = [
    "AppRecord",
    "ensure_credentials",
    "fetch_app",
    "get_linked_app",
    "read_linked_app_id",
]


@dataclass(frozen=True, slots=True)
class AppRecord:
    id: int
    title: str
    public: bool
    latest_version: str | None

    @classmethod
    def from_payload(cls, payload: StrDict) -> AppRecord | None:
        app_id = get_int(payload, "id")
        if app_id is None:
            return None
        return cls(
            id=app_id,
            title=get_str(payload, "title") or f"app {app_id}",
            public=get_bool(payload, "public"),
            latest_version=get_str(payload, "latest_version"),
        )


def read_linked_app_id(project_dir: Path) -> Result[int, ReleaseError]:
    path = project_dir / LINK_FILE_NAME
    hint = f"Run relctl from your app directory, or create {LINK_FILE_NAME} with the app id"
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return Err(ReleaseError(kind="app_not_linked", message="No linked app found", hint=hint))
    except OSError as e:
        return Err(ReleaseError(kind="io", message=f"Error reading {path}: {e}"))

    try:
        obj: object = json.loads(raw)
    except json.JSONDecodeError as e:
        return Err(
            ReleaseError(kind="app_not_linked", message=f"Invalid {LINK_FILE_NAME}: {e}", hint=hint)
        )

    data = as_str_dict(obj)
    app_id = get_int(data, "id") if data is not None else None
    if app_id is None:
        return Err(
            ReleaseError(
                kind="app_not_linked", message=f"{LINK_FILE_NAME} has no app id", hint=hint
            )
        )
    return Ok(app_id)


async def fetch_app(api: ApiClient, app_id: int) -> Result[AppRecord, ReleaseError]:
    outcome = await api.request("GET", f"/apps/{app_id}")
    if not isinstance(outcome, Success):
        return Err(rejection_error(outcome, heading="Could not load app:"))

    app = AppRecord.from_payload(outcome.payload)
    if app is None:
        return Err(
            ReleaseError(kind="invalid_response", message=f"Unexpected app payload for {app_id}")
        )
    return Ok(app)


async def get_linked_app(api: ApiClient, project_dir: Path) -> Result[AppRecord, ReleaseError]:
    app_id = read_linked_app_id(project_dir)
    if isinstance(app_id, Err):
        return app_id
    return await fetch_app(api, app_id.value)


async def ensure_credentials(api: ApiClient, deploy_key: str | None) -> Result[None, ReleaseError]:
    """Fail fast unless a deploy key is configured and accepted by the platform."""
    login_hint = "set RELCTL_DEPLOY_KEY or add deploy_key to credentials.toml"
    if not deploy_key:
        return Err(
            ReleaseError(kind="auth_required", message="No deploy key found", hint=login_hint)
        )

    outcome = await api.request("GET", "/check")
    if isinstance(outcome, Success):
        return Ok(None)

    error = rejection_error(outcome, heading="Credentials check failed:")
    if error.cause is not None and error.cause.status in (401, 403):
        return Err(
            ReleaseError(
                kind="auth_required",
                message="Deploy key was rejected",
                hint=login_hint,
                cause=error.cause,
            )
        )
    return Err(error)
