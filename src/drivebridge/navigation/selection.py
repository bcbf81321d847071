"""Selection of listed entries for export."""

from __future__ import annotations

from typing import Iterable, Iterator

from drivebridge.errors import InvalidArgumentError
from drivebridge.models import FileEntry


class SelectionSet:
    """
    Ids chosen from the currently displayed listing.

    The set is always a subset of the displayed entries: replacing the listing
    drops ids that are no longer shown.
    """

    def __init__(self, entries: Iterable[FileEntry] = ()) -> None:
        self._listing: list[FileEntry] = []
        self._ids: set[str] = set()
        self.set_listing(entries)

    def set_listing(self, entries: Iterable[FileEntry]) -> None:
        self._listing = list(entries)
        shown = {e.id for e in self._listing}
        self._ids &= shown

    def toggle(self, entry_id: str) -> bool:
        """Add the id if absent, else remove it. Returns the new membership."""
        if entry_id in self._ids:
            self._ids.remove(entry_id)
            return False

        if not any(e.id == entry_id for e in self._listing):
            raise InvalidArgumentError(
                "Entry is not in the current listing",
                details={"entry_id": entry_id},
            )
        self._ids.add(entry_id)
        return True

    def select_all(self) -> None:
        # Folders too: the archive builder expands them to their subtree.
        self._ids = {e.id for e in self._listing}

    def clear(self) -> None:
        self._ids.clear()

    def is_selected(self, entry_id: str) -> bool:
        return entry_id in self._ids

    def selected_ids(self) -> set[str]:
        return set(self._ids)

    def selected_entries(self) -> list[FileEntry]:
        """Selected entries in listing order."""
        return [e for e in self._listing if e.id in self._ids]

    def __contains__(self, entry_id: object) -> bool:
        return entry_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._ids))
