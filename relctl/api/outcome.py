"""Tagged outcomes of a platform API call.

Every response is classified exactly once, at the HTTP boundary, into one of
four variants. Callers ``match`` on the variant instead of poking at raw
response bodies:

    match await api.request("PUT", url, body=body):
        case Success(payload): ...
        case RejectedWithActivation(url=activation_url): ...
        case RejectedWithErrors(errors): ...
        case TransportFailure(cause): ...
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TypeAlias, Union

from relctl.core.structured import StrDict

__all__ = [
    "ApiOutcome",
    "HttpError",
    "RejectedWithActivation",
    "RejectedWithErrors",
    "Success",
    "TransportFailure",
]


@dataclass(frozen=True, slots=True)
class HttpError:
    """HTTP error details.

    Attributes:
        url: The URL that failed
        status: HTTP status code (0 for network errors)
        message: Response text or transport error message
    """

    url: str
    status: int
    message: str

    def __str__(self) -> str:
        if self.status:
            return f"HTTP {self.status}: {self.message} ({self.url})"
        return f"{self.message} ({self.url})"


def _empty_payload() -> StrDict:
    return {}


@dataclass(frozen=True, slots=True)
class Success:
    payload: StrDict = field(default_factory=_empty_payload)


@dataclass(frozen=True, slots=True)
class RejectedWithErrors:
    """The platform refused the request and listed its reasons, in order."""

    errors: tuple[object, ...]
    status: int = 400


@dataclass(frozen=True, slots=True)
class RejectedWithActivation:
    """The app has not passed its one-time public activation review yet."""

    url: str
    status: int = 403


@dataclass(frozen=True, slots=True)
class TransportFailure:
    cause: HttpError


ApiOutcome: TypeAlias = Union[Success, RejectedWithErrors, RejectedWithActivation, TransportFailure]
