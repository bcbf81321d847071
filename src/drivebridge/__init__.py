"""drivebridge public API."""

from __future__ import annotations

from drivebridge.archive import ArchiveBuilder, CancellationToken
from drivebridge.browser import DriveBrowser
from drivebridge.config import ClientConfig
from drivebridge.controller import (
    GoogleDriveController,
    ListingClient,
    ListingContext,
    ListingKind,
    ListingPage,
    MicrosoftGraphController,
)
from drivebridge.errors import (
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
from drivebridge.models import (
    ArchiveResult,
    DownloadProgress,
    FileEntry,
    GoogleRecord,
    MicrosoftRecord,
    Provider,
    SharedDrive,
    SkippedLeaf,
)
from drivebridge.navigation import (
    BreadcrumbItem,
    NavigationState,
    NavigationStateMachine,
    Section,
    SelectionSet,
)
from drivebridge.session import Session

__all__ = [
    # High-level
    "DriveBrowser",
    "Session",
    "ClientConfig",
    # Listing
    "ListingClient",
    "ListingContext",
    "ListingKind",
    "ListingPage",
    "GoogleDriveController",
    "MicrosoftGraphController",
    # Navigation / selection
    "Section",
    "BreadcrumbItem",
    "NavigationState",
    "NavigationStateMachine",
    "SelectionSet",
    # Archive
    "ArchiveBuilder",
    "CancellationToken",
    # Models
    "Provider",
    "GoogleRecord",
    "MicrosoftRecord",
    "FileEntry",
    "SharedDrive",
    "DownloadProgress",
    "SkippedLeaf",
    "ArchiveResult",
    # Errors
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
