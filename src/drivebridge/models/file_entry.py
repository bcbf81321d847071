"""Normalized view of a listed item."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from .records import ProviderRecord


@dataclass(frozen=True)
class FileEntry:
    """
    One file or folder as shown to the user, independent of the provider.

    Notes:
        - Build instances with `drivebridge.models.adapter.to_file_entry`.
        - `record` is the provider-native record; only the adapter and the
          owning controller read it.
    """

    id: str
    name: str
    is_folder: bool
    modified_time: Optional[datetime]
    size: Optional[int]
    can_download: bool
    record: ProviderRecord = field(repr=False, compare=False)


@dataclass(frozen=True)
class SharedDrive:
    """A Google shared drive (team drive)."""

    id: str
    name: str
