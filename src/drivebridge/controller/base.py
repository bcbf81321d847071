"""Listing contract shared by the provider controllers."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Protocol, runtime_checkable

from drivebridge.errors import DriveBridgeError, ListingFailedError
from drivebridge.models import FileEntry, Provider, SharedDrive
from drivebridge.models.adapter import remote_drive_id, remote_item_id
from drivebridge.util.ordering import sort_entries

logger = logging.getLogger(__name__)

ROOT_FOLDER_ID: str = "root"


class ListingKind(str, Enum):
    """What a listing request enumerates."""

    FOLDER = "folder"
    SHARED_WITH_ME = "shared-with-me"
    RECENT = "recent"
    SHARED_DRIVE = "shared-drive"


@dataclass(frozen=True)
class ListingContext:
    """
    Target of a listing: a folder (optionally inside a specific drive) or a
    flat pseudo-section.
    """

    kind: ListingKind
    folder_id: str = ROOT_FOLDER_ID
    drive_id: Optional[str] = None

    @classmethod
    def folder(cls, folder_id: str, drive_id: Optional[str] = None) -> "ListingContext":
        return cls(ListingKind.FOLDER, folder_id=folder_id, drive_id=drive_id)

    @classmethod
    def shared_with_me(cls) -> "ListingContext":
        return cls(ListingKind.SHARED_WITH_ME)

    @classmethod
    def recent(cls) -> "ListingContext":
        return cls(ListingKind.RECENT)

    @classmethod
    def shared_drive(cls, drive_id: str, folder_id: str = ROOT_FOLDER_ID) -> "ListingContext":
        return cls(ListingKind.SHARED_DRIVE, folder_id=folder_id, drive_id=drive_id)

    @property
    def is_drive_root(self) -> bool:
        return self.folder_id == ROOT_FOLDER_ID

    def describe(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "folder_id": self.folder_id,
            "drive_id": self.drive_id,
        }


@dataclass(slots=True)
class ListingPage:
    """One page of a listing, already in presentation order."""

    entries: list[FileEntry] = field(default_factory=list)
    next_page_token: Optional[str] = None


@runtime_checkable
class ListingClient(Protocol):
    """Read-only operations the browser and the archive builder rely on."""

    provider: Provider
    max_download_workers: Optional[int]

    def list_page(
        self,
        context: ListingContext,
        page_token: Optional[str] = None,
    ) -> ListingPage: ...

    def list_all(self, context: ListingContext) -> list[FileEntry]: ...

    def list_shared_drives(self) -> list[SharedDrive]: ...

    def download(self, entry: FileEntry) -> bytes: ...

    def close(self) -> None: ...


class PagedListingMixin:
    """
    Pagination and error wrapping on top of a provider's `_fetch_page`.

    Subclasses implement `_fetch_page(context, page_token)` returning
    `(entries, next_page_token)` and raising drivebridge errors.
    """

    def list_page(
        self,
        context: ListingContext,
        page_token: Optional[str] = None,
    ) -> ListingPage:
        try:
            entries, next_token = self._fetch_page(context, page_token)  # type: ignore[attr-defined]
        except ListingFailedError:
            raise
        except DriveBridgeError as exc:
            raise ListingFailedError(
                "Listing failed",
                details={**context.describe(), "page_token": page_token,
                         "error_type": exc.__class__.__name__},
                cause=exc,
            ) from exc

        logger.debug(
            "Listed %d entries [kind=%s folder=%s more=%s]",
            len(entries), context.kind.value, context.folder_id, bool(next_token),
        )
        return ListingPage(entries=sort_entries(entries), next_page_token=next_token or None)

    def list_all(self, context: ListingContext) -> list[FileEntry]:
        """Follow page tokens until exhausted and return the complete listing."""
        all_entries: list[FileEntry] = []
        page_token: Optional[str] = None

        while True:
            page = self.list_page(context, page_token)
            all_entries.extend(page.entries)

            page_token = page.next_page_token
            if not page_token:
                break

        return sort_entries(all_entries)


def context_for_folder(entry: FileEntry, drive_id: Optional[str] = None) -> ListingContext:
    """
    Listing context for the children of a folder entry.

    Graph items are listed inside the drive their record names as owner;
    otherwise `drive_id` (the drive being browsed, if any) is used.
    """
    owner = remote_drive_id(entry.record)
    return ListingContext.folder(remote_item_id(entry.record), drive_id=owner or drive_id)
