from __future__ import annotations

import re
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from relctl.api.client import ApiClient
from relctl.output.console import ConsoleProtocol

# confirm(question, default) -> answer
Confirm = Callable[[str, bool], Awaitable[bool]]

PromoteOutcome = Literal["skipped", "promoted", "activation_requested"]
MigrateOutcome = Literal["skipped", "queued"]

DEFAULT_PERCENT = "100%"

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


@dataclass(frozen=True, slots=True)
class ReleaseSession:
    """Collaborators shared by one promote/migrate invocation."""

    api: ApiClient
    console: ConsoleProtocol
    confirm: Confirm
    project_dir: Path
    deploy_key: str | None


@dataclass(frozen=True, slots=True)
class MigrateOptions:
    """Rollout targeting and code refresh for a migration.

    ``user`` limits the migration to a single user and requires a 100% rollout.
    """

    user: str | None = None
    update_migrations: bool = False


def parse_percent(text: str | int | None) -> int | None:
    """Parse a rollout fraction like ``"15%"`` or ``"15"``.

    Only the leading integer counts (``"12.5%"`` is 12). Text without one
    yields None; range checking is left to the platform.
    """
    if text is None:
        return None
    if isinstance(text, int):
        return text
    m = _LEADING_INT.match(text)
    if m is None:
        return None
    return int(m.group(1))
