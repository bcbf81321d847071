"""Field selections for Drive v3 and Graph responses."""

from __future__ import annotations

FILE_FIELDS: str = (
    "id,"
    "name,"
    "mimeType,"
    "modifiedTime,"
    "size,"
    "parents,"
    "webViewLink,"
    "webContentLink,"
    "iconLink,"
    "shared,"
    "sharedWithMeTime"
)

LIST_FIELDS: str = f"nextPageToken,files({FILE_FIELDS})"

DRIVE_LIST_FIELDS: str = "nextPageToken,drives(id,name)"

GRAPH_ITEM_FIELDS: str = (
    "id,"
    "name,"
    "folder,"
    "file,"
    "size,"
    "lastModifiedDateTime,"
    "parentReference,"
    "webUrl,"
    "remoteItem"
)
