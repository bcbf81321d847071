"""Public error exports for drivebridge."""

from __future__ import annotations

from .exceptions import (
    ApiError,
    ArchiveAssemblyError,
    ArchiveCancelledError,
    AuthError,
    ConflictError,
    DriveBridgeError,
    EmptySelectionError,
    HttpErrorInfo,
    InvalidArgumentError,
    InvalidStateError,
    LeafFetchFailedError,
    ListingFailedError,
    NetworkError,
    NotFoundError,
    PermissionError,
    QuotaExceededError,
    RateLimitError,
    map_http_error,
)

__all__ = [
    "DriveBridgeError",
    "InvalidStateError",
    "AuthError",
    "PermissionError",
    "InvalidArgumentError",
    "NotFoundError",
    "ConflictError",
    "RateLimitError",
    "QuotaExceededError",
    "NetworkError",
    "ApiError",
    "ListingFailedError",
    "LeafFetchFailedError",
    "EmptySelectionError",
    "ArchiveAssemblyError",
    "ArchiveCancelledError",
    "HttpErrorInfo",
    "map_http_error",
]
