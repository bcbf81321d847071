from .mime import FOLDER_MIME, is_folder_mime, is_google_app
from .time import parse_rfc3339, try_parse_rfc3339

__all__ = [
    "FOLDER_MIME",
    "is_folder_mime",
    "is_google_app",
    "parse_rfc3339",
    "try_parse_rfc3339",
]
