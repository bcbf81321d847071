"""DriveBrowser: navigation + listing + selection + export for one session."""

from __future__ import annotations

import logging
from typing import Optional

from drivebridge.archive import ArchiveBuilder, CancellationToken, ProgressCallback
from drivebridge.config import ClientConfig
from drivebridge.controller import ListingClient, context_for_folder
from drivebridge.errors import EmptySelectionError, InvalidArgumentError, ListingFailedError
from drivebridge.models import ArchiveResult, FileEntry, Provider, SharedDrive
from drivebridge.navigation import (
    BreadcrumbItem,
    NavigationState,
    NavigationStateMachine,
    Section,
    SelectionSet,
)
from drivebridge.session import Session

logger = logging.getLogger(__name__)


class DriveBrowser:
    """
    High-level browsing API over one provider.

    Every navigation call transitions the state machine (which clears the
    selection) and then reloads the listing. If the reload fails the new
    position is kept and `refresh()` can be retried.
    """

    def __init__(self, session: Session) -> None:
        self._client = session.listing_client()
        self._config = session.config
        self._init_view()

    @classmethod
    def from_client(
        cls,
        client: ListingClient,
        *,
        config: Optional[ClientConfig] = None,
    ) -> "DriveBrowser":
        """Create a browser with an injected listing client (useful for tests)."""
        obj = cls.__new__(cls)
        obj._client = client
        obj._config = config or ClientConfig()
        obj._init_view()
        return obj

    def _init_view(self) -> None:
        self._selection = SelectionSet()
        self._nav = NavigationStateMachine(self._selection)
        self._entries: list[FileEntry] = []

    # ----------------------------
    # View
    # ----------------------------
    @property
    def provider(self) -> Provider:
        return self._client.provider

    @property
    def state(self) -> NavigationState:
        return self._nav.state

    @property
    def breadcrumb(self) -> tuple[BreadcrumbItem, ...]:
        return self._nav.breadcrumb

    @property
    def entries(self) -> tuple[FileEntry, ...]:
        return tuple(self._entries)

    @property
    def selection(self) -> SelectionSet:
        return self._selection

    def refresh(self) -> list[FileEntry]:
        """
        Reload the listing for the current position.

        Raises:
            ListingFailedError: the listing could not be loaded; safe to retry.
        """
        context = self._nav.listing_context()
        try:
            entries = self._client.list_all(context)
        except ListingFailedError:
            self._entries = []
            self._selection.set_listing([])
            logger.warning("Failed to load listing [kind=%s folder=%s]",
                           context.kind.value, context.folder_id)
            raise

        self._entries = entries
        self._selection.set_listing(entries)
        return list(entries)

    # ----------------------------
    # Navigation
    # ----------------------------
    def navigate_to_section(self, section: Section) -> list[FileEntry]:
        self._nav.navigate_to_section(section)
        return self.refresh()

    def navigate_into_folder(self, entry: FileEntry) -> list[FileEntry]:
        self._nav.navigate_into_folder(entry)
        return self.refresh()

    def navigate_to_breadcrumb(self, index: int) -> list[FileEntry]:
        self._nav.navigate_to_breadcrumb(index)
        return self.refresh()

    def navigate_to_shared_drive(self, drive: SharedDrive) -> list[FileEntry]:
        self._nav.navigate_to_shared_drive(drive)
        return self.refresh()

    def shared_drives(self) -> list[SharedDrive]:
        return self._client.list_shared_drives()

    # ----------------------------
    # Download / export
    # ----------------------------
    def download_file(self, entry: FileEntry) -> bytes:
        """Download a single file's content."""
        if entry.is_folder:
            raise InvalidArgumentError(
                "Folders cannot be downloaded directly; use export_folder()",
                details={"entry_id": entry.id},
            )
        return self._client.download(entry)

    def export_selection(
        self,
        label: Optional[str] = None,
        *,
        on_progress: Optional[ProgressCallback] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> ArchiveResult:
        """Archive the selected entries; label defaults to the current folder name."""
        selected = self._selection.selected_entries()
        if not selected:
            raise EmptySelectionError("Nothing selected")

        return self._builder().build(
            selected,
            label or self._nav.state.folder_name,
            on_progress=on_progress,
            cancel_token=cancel_token,
        )

    def export_folder(
        self,
        entry: FileEntry,
        *,
        on_progress: Optional[ProgressCallback] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> ArchiveResult:
        """Archive the contents of one folder as `<folder name>.zip`."""
        if not entry.is_folder:
            raise InvalidArgumentError(
                "export_folder() requires a folder",
                details={"entry_id": entry.id},
            )

        children = self._client.list_all(context_for_folder(entry, self._nav.state.drive_id))
        if not children:
            raise EmptySelectionError("Folder is empty", details={"folder_id": entry.id})

        return self._builder().build(
            children,
            entry.name,
            on_progress=on_progress,
            cancel_token=cancel_token,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "DriveBrowser":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _builder(self) -> ArchiveBuilder:
        return ArchiveBuilder(
            self._client,
            drive_id=self._nav.state.drive_id,
            config=self._config,
        )
