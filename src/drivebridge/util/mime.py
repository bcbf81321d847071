from __future__ import annotations

FOLDER_MIME: str = "application/vnd.google-apps.folder"

GOOGLE_APP_PREFIX: str = "application/vnd.google-apps."


def is_folder_mime(mime_type: str) -> bool:
    return mime_type == FOLDER_MIME


def is_google_app(mime_type: str) -> bool:
    """
    Returns True if the MIME type is a Google 'apps' type (Docs, Sheets, ...).

    These have no binary content and cannot be fetched with a media download.
    """
    return mime_type.startswith(GOOGLE_APP_PREFIX)
