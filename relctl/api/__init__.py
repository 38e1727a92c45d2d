"""Platform API access."""

from .client import ApiCall, ApiClient, HttpxApiClient, MockApiClient, build_async_client
from .outcome import (
    ApiOutcome,
    HttpError,
    RejectedWithActivation,
    RejectedWithErrors,
    Success,
    TransportFailure,
)

__all__ = [
    "ApiCall",
    "ApiClient",
    "ApiOutcome",
    "HttpError",
    "HttpxApiClient",
    "MockApiClient",
    "RejectedWithActivation",
    "RejectedWithErrors",
    "Success",
    "TransportFailure",
    "build_async_client",
]
