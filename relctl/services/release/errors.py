"""Error type and message formatting for release operations."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Literal

from relctl.api.outcome import (
    HttpError,
    RejectedWithActivation,
    RejectedWithErrors,
    TransportFailure,
)
from relctl.core.structured import as_str_dict, get_str

ReleaseErrorKind = Literal[
    "usage",
    "cancelled",
    "auth_required",
    "app_not_linked",
    "config",
    "io",
    "rejected",
    "review_failed",
    "transport",
    "invalid_response",
    "build_failed",
]

PROMOTION_FAILED = "Promotion failed for the following reasons:"
MIGRATION_FAILED = "Migration failed for the following reasons:"


@dataclass(frozen=True, slots=True)
class ReleaseError:
    """Failure payload returned by every release operation.

    ``kind`` selects the exit code; ``message`` is shown to the operator
    as-is, so multi-line failure lists keep their bullets.
    """

    kind: ReleaseErrorKind
    message: str
    hint: str | None = None
    cause: HttpError | None = None

    def pretty(self) -> str:
        if self.hint:
            return f"{self.message} (hint: {self.hint})"
        return self.message


def failure_reason(entry: object) -> str:
    """Text of one error-list entry: a plain string or an object with ``message``."""
    if isinstance(entry, str):
        return entry
    table = as_str_dict(entry)
    if table is not None:
        message = get_str(table, "message")
        if message:
            return message
    return str(entry)


def format_failures(heading: str, entries: Iterable[object]) -> str:
    bullets = "\n".join(f"* {failure_reason(e)}" for e in entries)
    return f"{heading}\n\n{bullets}"


def transport_error(cause: HttpError) -> ReleaseError:
    return ReleaseError(kind="transport", message=str(cause), cause=cause)


def rejection_error(
    outcome: RejectedWithErrors | RejectedWithActivation | TransportFailure,
    *,
    heading: str,
) -> ReleaseError:
    """Convert a non-success outcome into a ReleaseError.

    Activation rejections only get special handling on promotion; everywhere
    else they are reported as a plain rejection pointing at the activation URL.
    """
    match outcome:
        case RejectedWithErrors(errors=errors):
            return ReleaseError(kind="rejected", message=format_failures(heading, errors))
        case RejectedWithActivation(url=url):
            return ReleaseError(
                kind="rejected",
                message="App has not been activated for public use yet",
                hint=f"request activation at {url}",
            )
        case TransportFailure(cause=cause):
            return transport_error(cause)
