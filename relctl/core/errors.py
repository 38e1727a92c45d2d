"""Exit codes for relctl commands.

The numeric values are process exit statuses and must stay stable:
- 0: Success
- 1: Usage error (missing arguments, conflicting options)
- 2: Cancelled by the operator at a confirmation prompt
- 3: Authentication or project link missing
- 4: Rejected by the platform (validation, review checks)
- 5: Network or transport failure
- 6: Local build failure
"""

from enum import IntEnum

__all__ = ["ErrorCode", "error_code_for"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands."""

    OK = 0
    USER_ERROR = 1
    CANCELLED = 2
    ENV_ERROR = 3
    REJECTED = 4
    NETWORK_ERROR = 5
    BUILD_ERROR = 6

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK


_KIND_CODES: dict[str, ErrorCode] = {
    "usage": ErrorCode.USER_ERROR,
    "cancelled": ErrorCode.CANCELLED,
    "auth_required": ErrorCode.ENV_ERROR,
    "app_not_linked": ErrorCode.ENV_ERROR,
    "config": ErrorCode.ENV_ERROR,
    "rejected": ErrorCode.REJECTED,
    "review_failed": ErrorCode.REJECTED,
    "transport": ErrorCode.NETWORK_ERROR,
    "invalid_response": ErrorCode.NETWORK_ERROR,
    "io": ErrorCode.ENV_ERROR,
    "build_failed": ErrorCode.BUILD_ERROR,
}


def error_code_for(kind: str) -> ErrorCode:
    """Map a release error kind to its exit code (unknown kinds are usage errors)."""
    return _KIND_CODES.get(kind, ErrorCode.USER_ERROR)
