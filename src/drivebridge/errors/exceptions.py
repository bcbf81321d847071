"""Exception hierarchy and HTTP error mapping for drivebridge."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


class DriveBridgeError(Exception):
    """
    Base exception for drivebridge.

    Attributes:
        details: Optional structured information (e.g., HTTP status, folder id).
        cause: Optional original exception that triggered this error.
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.details = details or {}
        self.cause = cause


class InvalidStateError(DriveBridgeError):
    """Raised when an operation is not valid in the current state."""


class AuthError(DriveBridgeError):
    """Raised when the bearer token is missing or rejected (HTTP 401)."""


class PermissionError(DriveBridgeError):
    """Raised when access is denied (HTTP 403 non-quota)."""


class InvalidArgumentError(DriveBridgeError):
    """Raised when arguments are invalid (HTTP 400, bad config, unknown ids)."""


class NotFoundError(DriveBridgeError):
    """Raised when a remote item is not found (HTTP 404)."""


class ConflictError(DriveBridgeError):
    """Raised when the backend reports a conflict (HTTP 409/412)."""


class RateLimitError(DriveBridgeError):
    """Raised when rate-limited (HTTP 429)."""


class QuotaExceededError(DriveBridgeError):
    """Raised when quota is exceeded (HTTP 403 with quota-related reason)."""


class NetworkError(DriveBridgeError):
    """Raised when network/timeout issues prevent the request."""


class ApiError(DriveBridgeError):
    """Raised for unclassified API errors (5xx, unknown 4xx, etc.)."""


class ListingFailedError(DriveBridgeError):
    """
    Raised when a folder or section listing fails.

    `details` carries the listing context and the page token being fetched.
    Listings are read-only, so the caller may simply retry.
    """


class LeafFetchFailedError(DriveBridgeError):
    """Raised when downloading the content of a single file fails."""


class EmptySelectionError(DriveBridgeError):
    """Raised when there is nothing to export."""


class ArchiveAssemblyError(DriveBridgeError):
    """Raised when the zip archive cannot be assembled."""


class ArchiveCancelledError(DriveBridgeError):
    """Raised when an archive build is cancelled through its token."""


@dataclass(frozen=True)
class HttpErrorInfo:
    """Lightweight HTTP error information for mapping to drivebridge exceptions."""

    status_code: int
    reason: str | None = None
    message: str | None = None
    details: dict[str, Any] | None = None


_QUOTA_REASON_KEYWORDS: tuple[str, ...] = (
    "quota",
    "rateLimitExceeded",
    "userRateLimitExceeded",
    "dailyLimitExceeded",
    "usageLimits",
    "storageQuotaExceeded",
    "activityLimitReached",
)


def _is_quota_reason(reason: str | None) -> bool:
    if not reason:
        return False
    return any(key.lower() in reason.lower() for key in _QUOTA_REASON_KEYWORDS)


def map_http_error(
    info: HttpErrorInfo,
    *,
    cause: Optional[BaseException] = None,
) -> DriveBridgeError:
    """
    Map an HTTP error from either provider to a drivebridge exception.

    Policy:
        - 401 -> AuthError
        - 403 -> PermissionError (default), but QuotaExceededError if quota-related
        - 404 -> NotFoundError
        - 409/412 -> ConflictError
        - 429 -> RateLimitError
        - 400 -> InvalidArgumentError
        - 5xx -> ApiError
        - otherwise -> ApiError
    """
    details: dict[str, Any] = {
        "status_code": info.status_code,
        "reason": info.reason,
    }
    if info.details:
        details.update(info.details)

    message = info.message or f"HTTP error {info.status_code}"

    if info.status_code == 400:
        return InvalidArgumentError(message, details=details, cause=cause)
    if info.status_code == 401:
        return AuthError(message, details=details, cause=cause)
    if info.status_code == 403:
        if _is_quota_reason(info.reason):
            return QuotaExceededError(message, details=details, cause=cause)
        return PermissionError(message, details=details, cause=cause)
    if info.status_code == 404:
        return NotFoundError(message, details=details, cause=cause)
    if info.status_code in (409, 412):
        return ConflictError(message, details=details, cause=cause)
    if info.status_code == 429:
        return RateLimitError(message, details=details, cause=cause)

    return ApiError(message, details=details, cause=cause)
