"""Provider listing clients for drivebridge."""

from __future__ import annotations

from .base import (
    ROOT_FOLDER_ID,
    ListingClient,
    ListingContext,
    ListingKind,
    ListingPage,
    context_for_folder,
)
from .google_controller import GoogleDriveController
from .microsoft_controller import MicrosoftGraphController

__all__ = [
    "ROOT_FOLDER_ID",
    "ListingClient",
    "ListingContext",
    "ListingKind",
    "ListingPage",
    "context_for_folder",
    "GoogleDriveController",
    "MicrosoftGraphController",
]
