"""Public model exports for drivebridge."""

from __future__ import annotations

from .file_entry import FileEntry, SharedDrive
from .records import GoogleRecord, MicrosoftRecord, Provider, ProviderRecord
from .results import ArchiveResult, DownloadProgress, SkippedLeaf

__all__ = [
    "Provider",
    "GoogleRecord",
    "MicrosoftRecord",
    "ProviderRecord",
    "FileEntry",
    "SharedDrive",
    "DownloadProgress",
    "SkippedLeaf",
    "ArchiveResult",
]
