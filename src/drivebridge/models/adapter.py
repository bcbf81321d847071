"""
Adapter from provider records to the unified file model.

Every function here is pure and total: it never raises, and it only reads the
fields of its own record variant. Nothing outside this module branches on raw
record fields.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional

from drivebridge.util.mime import is_folder_mime, is_google_app
from drivebridge.util.time import try_parse_rfc3339

from .file_entry import FileEntry
from .records import GoogleRecord, MicrosoftRecord, ProviderRecord


def is_folder(record: ProviderRecord) -> bool:
    if isinstance(record, GoogleRecord):
        mime_type = record.data.get("mimeType")
        return isinstance(mime_type, str) and is_folder_mime(mime_type)
    if isinstance(record, MicrosoftRecord):
        if isinstance(record.data.get("folder"), Mapping):
            return True
        remote = record.data.get("remoteItem")
        return isinstance(remote, Mapping) and isinstance(remote.get("folder"), Mapping)
    return False


def modified_time(record: ProviderRecord) -> Optional[datetime]:
    if isinstance(record, GoogleRecord):
        return try_parse_rfc3339(record.data.get("modifiedTime"))
    if isinstance(record, MicrosoftRecord):
        return try_parse_rfc3339(record.data.get("lastModifiedDateTime"))
    return None


def size(record: ProviderRecord) -> Optional[int]:
    # Drive encodes int64 as a decimal string; Graph uses a JSON number.
    if isinstance(record, (GoogleRecord, MicrosoftRecord)):
        return _coerce_size(record.data.get("size"))
    return None


def can_download(record: ProviderRecord) -> bool:
    if is_folder(record):
        return False
    if isinstance(record, GoogleRecord):
        # Google Docs/Sheets/... have no binary content to fetch.
        mime_type = record.data.get("mimeType")
        if isinstance(mime_type, str) and is_google_app(mime_type):
            return False
        return bool(record.data.get("webContentLink"))
    return isinstance(record, MicrosoftRecord)


def entry_id(record: ProviderRecord) -> str:
    value = record.data.get("id") if isinstance(record, (GoogleRecord, MicrosoftRecord)) else None
    return value if isinstance(value, str) else ""


def entry_name(record: ProviderRecord) -> str:
    value = record.data.get("name") if isinstance(record, (GoogleRecord, MicrosoftRecord)) else None
    return value if isinstance(value, str) else ""


def remote_drive_id(record: ProviderRecord) -> Optional[str]:
    """
    Drive that owns a Graph item, if the record names one.

    A shared entry points at its owner through
    `remoteItem.parentReference.driveId`. Items listed inside a shared folder
    are plain driveItems and carry the owner in `parentReference.driveId`.
    """
    if not isinstance(record, MicrosoftRecord):
        return None
    remote = record.data.get("remoteItem")
    if isinstance(remote, Mapping):
        drive_id = _parent_drive_id(remote)
        if drive_id:
            return drive_id
    return _parent_drive_id(record.data)


def remote_item_id(record: ProviderRecord) -> str:
    """Item id inside the owning drive (`remoteItem.id` for shared Graph items)."""
    if isinstance(record, MicrosoftRecord):
        remote = record.data.get("remoteItem")
        if isinstance(remote, Mapping) and isinstance(remote.get("id"), str):
            return remote["id"]
    return entry_id(record)


def to_file_entry(record: ProviderRecord) -> FileEntry:
    """Build the normalized FileEntry for a provider record."""
    return FileEntry(
        id=entry_id(record),
        name=entry_name(record),
        is_folder=is_folder(record),
        modified_time=modified_time(record),
        size=size(record),
        can_download=can_download(record),
        record=record,
    )


def _parent_drive_id(item: Mapping[str, Any]) -> Optional[str]:
    parent = item.get("parentReference")
    if not isinstance(parent, Mapping):
        return None
    drive_id = parent.get("driveId")
    return drive_id if isinstance(drive_id, str) and drive_id else None


def _coerce_size(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return None
