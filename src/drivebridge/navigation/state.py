"""Navigation state machine: section, folder, breadcrumb and drive context."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from drivebridge.controller.base import ROOT_FOLDER_ID, ListingContext
from drivebridge.errors import InvalidArgumentError, InvalidStateError
from drivebridge.models import FileEntry, SharedDrive

from .selection import SelectionSet

logger = logging.getLogger(__name__)


class Section(str, Enum):
    """Top-level browsing contexts."""

    MY_DRIVE = "my-drive"
    SHARED_WITH_ME = "shared-with-me"
    RECENT = "recent"
    SHARED_DRIVE = "shared-drives"

    @property
    def display_name(self) -> str:
        return _SECTION_NAMES[self]

    @property
    def has_folders(self) -> bool:
        """False for flat sections whose breadcrumb never grows."""
        return self not in (Section.SHARED_WITH_ME, Section.RECENT)


_SECTION_NAMES: dict[Section, str] = {
    Section.MY_DRIVE: "My Drive",
    Section.SHARED_WITH_ME: "Shared with me",
    Section.RECENT: "Recent",
    Section.SHARED_DRIVE: "Shared drives",
}


@dataclass(frozen=True)
class BreadcrumbItem:
    id: str
    name: str


@dataclass(frozen=True)
class NavigationState:
    """Where the user currently is."""

    section: Section
    folder_id: str
    folder_name: str
    drive_id: Optional[str] = None
    drive_name: Optional[str] = None


class NavigationStateMachine:
    """
    Tracks the current section/folder/breadcrumb and clears the selection on
    every transition.

    Notes:
        - breadcrumb[0] is always the root of the current section.
        - Recent and Shared with me are flat: entering a folder is rejected
          there, so their breadcrumb always has exactly one item.
    """

    def __init__(self, selection: Optional[SelectionSet] = None) -> None:
        self.selection = selection if selection is not None else SelectionSet()
        root = BreadcrumbItem(ROOT_FOLDER_ID, Section.MY_DRIVE.display_name)
        self._state = NavigationState(
            section=Section.MY_DRIVE,
            folder_id=root.id,
            folder_name=root.name,
        )
        self._breadcrumb: list[BreadcrumbItem] = [root]

    @property
    def state(self) -> NavigationState:
        return self._state

    @property
    def breadcrumb(self) -> tuple[BreadcrumbItem, ...]:
        return tuple(self._breadcrumb)

    # ----------------------------
    # Transitions
    # ----------------------------
    def navigate_to_section(self, section: Section) -> NavigationState:
        if section is Section.SHARED_DRIVE:
            raise InvalidArgumentError(
                "Shared drives need a drive; use navigate_to_shared_drive()",
            )

        root = BreadcrumbItem(ROOT_FOLDER_ID, section.display_name)
        self._breadcrumb = [root]
        self._state = NavigationState(
            section=section,
            folder_id=root.id,
            folder_name=root.name,
        )
        return self._after_transition()

    def navigate_into_folder(self, entry: FileEntry) -> NavigationState:
        if not entry.is_folder:
            raise InvalidArgumentError(
                "Only folders can be entered",
                details={"entry_id": entry.id, "name": entry.name},
            )
        if not self._state.section.has_folders:
            raise InvalidStateError(
                "Section has no folder hierarchy",
                details={"section": self._state.section.value},
            )

        self._breadcrumb.append(BreadcrumbItem(entry.id, entry.name))
        self._state = NavigationState(
            section=self._state.section,
            folder_id=entry.id,
            folder_name=entry.name,
            drive_id=self._state.drive_id,
            drive_name=self._state.drive_name,
        )
        return self._after_transition()

    def navigate_to_breadcrumb(self, index: int) -> NavigationState:
        if not 0 <= index < len(self._breadcrumb):
            raise InvalidArgumentError(
                "Breadcrumb index out of range",
                details={"index": index, "length": len(self._breadcrumb)},
            )

        self._breadcrumb = self._breadcrumb[: index + 1]
        tail = self._breadcrumb[-1]
        self._state = NavigationState(
            section=self._state.section,
            folder_id=tail.id,
            folder_name=tail.name,
            drive_id=self._state.drive_id,
            drive_name=self._state.drive_name,
        )
        return self._after_transition()

    def navigate_to_shared_drive(self, drive: SharedDrive) -> NavigationState:
        root = BreadcrumbItem(ROOT_FOLDER_ID, drive.name)
        self._breadcrumb = [root]
        self._state = NavigationState(
            section=Section.SHARED_DRIVE,
            folder_id=root.id,
            folder_name=drive.name,
            drive_id=drive.id,
            drive_name=drive.name,
        )
        return self._after_transition()

    # ----------------------------
    # Queries
    # ----------------------------
    def listing_context(self) -> ListingContext:
        """Listing request for the current view."""
        state = self._state
        if state.section is Section.SHARED_WITH_ME:
            return ListingContext.shared_with_me()
        if state.section is Section.RECENT:
            return ListingContext.recent()
        if state.section is Section.SHARED_DRIVE:
            return ListingContext.shared_drive(state.drive_id or "", state.folder_id)
        return ListingContext.folder(state.folder_id)

    def _after_transition(self) -> NavigationState:
        self.selection.clear()
        logger.debug(
            "Navigated [section=%s folder=%s depth=%d]",
            self._state.section.value, self._state.folder_id, len(self._breadcrumb),
        )
        return self._state
