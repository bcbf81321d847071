"""Google Drive v3 listing and download controller."""

from __future__ import annotations

import io
import json
import logging
from typing import Any, Callable, Optional, TypeVar

from drivebridge.config import ClientConfig
from drivebridge.errors import (
    ApiError,
    AuthError,
    DriveBridgeError,
    HttpErrorInfo,
    LeafFetchFailedError,
    ListingFailedError,
    NetworkError,
    PermissionError,
    map_http_error,
)
from drivebridge.models import FileEntry, GoogleRecord, Provider, SharedDrive
from drivebridge.models.adapter import to_file_entry

from .base import ListingContext, ListingKind, PagedListingMixin
from .fields import DRIVE_LIST_FIELDS, LIST_FIELDS
from .retry import RetryPolicy, execute_with_retry

T = TypeVar("T")

logger = logging.getLogger(__name__)


class GoogleDriveController(PagedListingMixin):
    """
    Read-only Drive API controller.

    Notes:
        - The Drive `service` object is NOT exposed.
        - Credentials are a bare bearer token; refreshing it is the caller's job.
        - Shared-drive items are always included (`supportsAllDrives`).
    """

    provider = Provider.GOOGLE
    # The SDK's httplib2 transport is not thread-safe.
    max_download_workers: Optional[int] = 1

    def __init__(self, access_token: str, *, config: Optional[ClientConfig] = None) -> None:
        if not isinstance(access_token, str) or not access_token.strip():
            raise AuthError("access_token must be a non-empty string")

        self._config = config or ClientConfig()
        self._retry_policy = RetryPolicy.from_config(self._config)

        try:
            from google.oauth2.credentials import Credentials
            from googleapiclient.discovery import build
        except Exception as exc:  # pragma: no cover
            raise AuthError(
                "Google API libraries are not available",
                details={"hint": "Install google-api-python-client and google-auth"},
                cause=exc,
            ) from exc

        creds = Credentials(token=access_token)
        try:
            self._service = build("drive", "v3", credentials=creds, cache_discovery=False)
        except Exception as exc:
            raise AuthError("Failed to build Drive service", cause=exc) from exc

    @classmethod
    def from_service(
        cls,
        service: Any,
        *,
        config: Optional[ClientConfig] = None,
    ) -> "GoogleDriveController":
        """Create controller from a pre-built Drive service (useful for tests)."""
        obj = cls.__new__(cls)
        obj._config = config or ClientConfig()
        obj._retry_policy = RetryPolicy.from_config(obj._config)
        obj._service = service
        return obj

    # ----------------------------
    # Public API
    # ----------------------------
    def list_shared_drives(self) -> list[SharedDrive]:
        """
        List shared drives visible to the user.

        An account without shared-drive access gets an empty list instead of
        an error.
        """
        drives: list[SharedDrive] = []
        page_token: Optional[str] = None

        while True:
            req = self._service.drives().list(
                pageSize=self._config.page_size,
                fields=DRIVE_LIST_FIELDS,
                pageToken=page_token,
            )
            try:
                data = self._execute(req.execute)
            except PermissionError as exc:
                logger.warning("Shared drives are not accessible: %s", exc)
                return []
            except DriveBridgeError as exc:
                raise ListingFailedError(
                    "Listing shared drives failed",
                    details={"kind": "shared-drives", "page_token": page_token},
                    cause=exc,
                ) from exc

            for d in data.get("drives", []) or []:
                if isinstance(d, dict) and isinstance(d.get("id"), str):
                    drives.append(SharedDrive(id=d["id"], name=str(d.get("name", ""))))

            page_token = data.get("nextPageToken")
            if not page_token:
                break

        return drives

    def download(self, entry: FileEntry) -> bytes:
        if entry.is_folder or not entry.can_download:
            raise LeafFetchFailedError(
                "Item has no downloadable content",
                details={"file_id": entry.id, "name": entry.name},
            )

        try:
            from googleapiclient.http import MediaIoBaseDownload
        except Exception as exc:  # pragma: no cover
            raise AuthError(
                "google-api-python-client is not available",
                cause=exc,
            ) from exc

        req = self._service.files().get_media(fileId=entry.id, supportsAllDrives=True)
        buf = io.BytesIO()
        try:
            downloader = MediaIoBaseDownload(buf, req)
            done = False
            while not done:
                _, done = self._execute(downloader.next_chunk)
        except DriveBridgeError as exc:
            raise LeafFetchFailedError(
                "Download failed",
                details={"file_id": entry.id, "name": entry.name,
                         "error_type": exc.__class__.__name__},
                cause=exc,
            ) from exc

        return buf.getvalue()

    def close(self) -> None:
        close = getattr(self._service, "close", None)
        if callable(close):
            close()

    # ----------------------------
    # Internals
    # ----------------------------
    def _fetch_page(
        self,
        context: ListingContext,
        page_token: Optional[str],
    ) -> tuple[list[FileEntry], Optional[str]]:
        req = self._service.files().list(
            fields=LIST_FIELDS,
            pageSize=self._config.page_size,
            pageToken=page_token,
            **_list_kwargs(context),
        )
        data = self._execute(req.execute)

        entries = [
            to_file_entry(GoogleRecord(f))
            for f in data.get("files", []) or []
            if isinstance(f, dict)
        ]
        return entries, data.get("nextPageToken")

    def _execute(self, func: Callable[[], T]) -> T:
        return execute_with_retry(func, self._retry_policy, _map_exception)


def _list_kwargs(context: ListingContext) -> dict[str, Any]:
    if context.kind is ListingKind.SHARED_WITH_ME:
        return {
            "q": "sharedWithMe = true and trashed = false",
            "orderBy": "folder,name",
        }

    if context.kind is ListingKind.RECENT:
        return {
            "q": "trashed = false",
            "orderBy": "modifiedTime desc",
        }

    if context.drive_id is not None:
        # A shared drive's root folder id is the drive id itself.
        parent = context.drive_id if context.is_drive_root else context.folder_id
        return {
            "q": _build_parent_query(parent),
            "orderBy": "folder,name",
            "driveId": context.drive_id,
            "corpora": "drive",
            "includeItemsFromAllDrives": True,
            "supportsAllDrives": True,
        }

    if context.kind is ListingKind.SHARED_DRIVE:
        raise ListingFailedError(
            "Shared drive listing requires a drive_id",
            details=context.describe(),
        )

    return {
        "q": _build_parent_query(context.folder_id),
        "orderBy": "folder,name",
        "includeItemsFromAllDrives": True,
        "supportsAllDrives": True,
    }


def _build_parent_query(parent_id: str) -> str:
    escaped = parent_id.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}' in parents and trashed = false"


def _map_exception(exc: Exception) -> Exception:
    if isinstance(exc, DriveBridgeError):
        return exc

    try:
        from googleapiclient.errors import HttpError
    except Exception:  # pragma: no cover
        HttpError = None  # type: ignore[assignment]

    if HttpError is not None and isinstance(exc, HttpError):
        info = _http_error_to_info(exc)
        return map_http_error(info, cause=exc)

    if isinstance(exc, (OSError, TimeoutError)):
        return NetworkError("Network error", cause=exc)

    return ApiError("Drive API error", cause=exc)


def _http_error_to_info(exc: Any) -> HttpErrorInfo:
    status_code = getattr(getattr(exc, "resp", None), "status", None)
    reason = getattr(getattr(exc, "resp", None), "reason", None)

    message = None
    details: dict[str, Any] = {}

    content = getattr(exc, "content", None)
    if isinstance(content, (bytes, bytearray)):
        try:
            payload = json.loads(content.decode("utf-8"))
        except (UnicodeDecodeError, ValueError):
            payload = None
        err = payload.get("error", {}) if isinstance(payload, dict) else {}
        if isinstance(err, dict):
            message = err.get("message") or None
            errors = err.get("errors") or []
            if errors and isinstance(errors, list) and isinstance(errors[0], dict):
                details["domain"] = errors[0].get("domain")
                details["reason_detail"] = errors[0].get("reason")
                if isinstance(errors[0].get("reason"), str):
                    reason = errors[0]["reason"]

    if not isinstance(status_code, int):
        status_code = 0

    return HttpErrorInfo(
        status_code=status_code,
        reason=reason if isinstance(reason, str) else None,
        message=message,
        details=details or None,
    )
