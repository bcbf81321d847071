"""Presentation order for listings: folders first, then by name."""

from __future__ import annotations

from typing import Iterable

from drivebridge.models.file_entry import FileEntry


def entry_sort_key(entry: FileEntry) -> tuple[int, str, str, str]:
    # Raw name and id break ties so the order is total and repeatable.
    return (0 if entry.is_folder else 1, entry.name.casefold(), entry.name, entry.id)


def sort_entries(entries: Iterable[FileEntry]) -> list[FileEntry]:
    """Return entries folders-before-files, then case-insensitive by name."""
    return sorted(entries, key=entry_sort_key)
