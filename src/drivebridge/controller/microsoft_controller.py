"""Microsoft Graph (OneDrive) listing and download controller."""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, TypeVar
from urllib.parse import quote

import requests

from drivebridge.config import ClientConfig
from drivebridge.errors import (
    ApiError,
    AuthError,
    DriveBridgeError,
    HttpErrorInfo,
    LeafFetchFailedError,
    NetworkError,
    map_http_error,
)
from drivebridge.models import FileEntry, MicrosoftRecord, Provider, SharedDrive
from drivebridge.models.adapter import remote_drive_id, remote_item_id, to_file_entry

from .base import ListingContext, ListingKind, PagedListingMixin
from .fields import GRAPH_ITEM_FIELDS
from .retry import RetryPolicy, execute_with_retry

T = TypeVar("T")

logger = logging.getLogger(__name__)

DOWNLOAD_URL_KEY = "@microsoft.graph.downloadUrl"


class MicrosoftGraphController(PagedListingMixin):
    """
    Read-only Graph API controller for the signed-in user's OneDrive.

    Notes:
        - Page tokens are the opaque `@odata.nextLink` URLs returned by Graph.
        - Downloads resolve a fresh pre-authenticated download URL per file.
    """

    GRAPH_BASE = "https://graph.microsoft.com/v1.0"

    provider = Provider.MICROSOFT
    max_download_workers: Optional[int] = None

    def __init__(
        self,
        access_token: str,
        *,
        config: Optional[ClientConfig] = None,
        http: Optional[requests.Session] = None,
    ) -> None:
        if not isinstance(access_token, str) or not access_token.strip():
            raise AuthError("access_token must be a non-empty string")

        self._config = config or ClientConfig()
        self._retry_policy = RetryPolicy.from_config(self._config)
        self._http = http or requests.Session()
        self._headers = {"Authorization": f"Bearer {access_token}"}

    # ----------------------------
    # Public API
    # ----------------------------
    def list_shared_drives(self) -> list[SharedDrive]:
        """OneDrive has no shared-drive section."""
        return []

    def download(self, entry: FileEntry) -> bytes:
        if entry.is_folder or not entry.can_download:
            raise LeafFetchFailedError(
                "Item has no downloadable content",
                details={"file_id": entry.id, "name": entry.name},
            )

        try:
            item = self._execute(
                lambda: self._get_json(
                    self._item_url(entry),
                    params={"$select": f"id,{DOWNLOAD_URL_KEY}"},
                )
            )
            url = item.get(DOWNLOAD_URL_KEY)
            if not isinstance(url, str) or not url:
                raise ApiError(
                    "Download URL not available",
                    details={"file_id": entry.id},
                )
            # The download URL is pre-authenticated; no bearer header.
            return self._execute(lambda: self._get_content(url))
        except DriveBridgeError as exc:
            raise LeafFetchFailedError(
                "Download failed",
                details={"file_id": entry.id, "name": entry.name,
                         "error_type": exc.__class__.__name__},
                cause=exc,
            ) from exc

    def close(self) -> None:
        self._http.close()

    # ----------------------------
    # Internals
    # ----------------------------
    def _fetch_page(
        self,
        context: ListingContext,
        page_token: Optional[str],
    ) -> tuple[list[FileEntry], Optional[str]]:
        if page_token:
            data = self._execute(lambda: self._get_json(page_token))
        else:
            url, params = self._listing_request(context)
            data = self._execute(lambda: self._get_json(url, params=params))

        entries = [
            to_file_entry(MicrosoftRecord(item))
            for item in data.get("value", []) or []
            if isinstance(item, dict)
        ]
        return entries, data.get("@odata.nextLink")

    def _listing_request(self, context: ListingContext) -> tuple[str, dict[str, Any]]:
        params: dict[str, Any] = {"$top": self._config.page_size}

        if context.kind is ListingKind.SHARED_WITH_ME:
            return f"{self.GRAPH_BASE}/me/drive/sharedWithMe", params
        if context.kind is ListingKind.RECENT:
            return f"{self.GRAPH_BASE}/me/drive/recent", params

        params["$select"] = GRAPH_ITEM_FIELDS
        params["$orderby"] = "name"

        if context.drive_id is not None:
            drive = f"{self.GRAPH_BASE}/drives/{quote(context.drive_id, safe='')}"
        else:
            drive = f"{self.GRAPH_BASE}/me/drive"

        if context.is_drive_root:
            return f"{drive}/root/children", params
        return f"{drive}/items/{quote(context.folder_id, safe='')}/children", params

    def _item_url(self, entry: FileEntry) -> str:
        drive_id = remote_drive_id(entry.record)
        item_id = quote(remote_item_id(entry.record), safe="")
        if drive_id:
            return f"{self.GRAPH_BASE}/drives/{quote(drive_id, safe='')}/items/{item_id}"
        return f"{self.GRAPH_BASE}/me/drive/items/{item_id}"

    def _get_json(self, url: str, params: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        response = self._http.get(
            url,
            params=params,
            headers=self._headers,
            timeout=self._config.timeout_sec,
        )
        response.raise_for_status()
        payload = response.json()
        return payload if isinstance(payload, dict) else {}

    def _get_content(self, url: str) -> bytes:
        response = self._http.get(url, timeout=self._config.timeout_sec)
        response.raise_for_status()
        return response.content

    def _execute(self, func: Callable[[], T]) -> T:
        return execute_with_retry(func, self._retry_policy, _map_exception)


def _map_exception(exc: Exception) -> Exception:
    if isinstance(exc, DriveBridgeError):
        return exc

    if isinstance(exc, requests.exceptions.HTTPError):
        info = _http_error_to_info(exc)
        return map_http_error(info, cause=exc)

    if isinstance(exc, (requests.exceptions.ConnectionError, requests.exceptions.Timeout)):
        return NetworkError("Network error", cause=exc)

    if isinstance(exc, (OSError, TimeoutError)):
        return NetworkError("Network error", cause=exc)

    return ApiError("Graph API error", cause=exc)


def _http_error_to_info(exc: requests.exceptions.HTTPError) -> HttpErrorInfo:
    response = exc.response
    status_code = getattr(response, "status_code", None)
    reason = None
    message = None
    details: dict[str, Any] = {}

    if response is not None:
        try:
            payload = response.json()
        except ValueError:
            payload = None
        err = payload.get("error") if isinstance(payload, dict) else None
        if isinstance(err, dict):
            code = err.get("code")
            reason = code if isinstance(code, str) else None
            message = err.get("message") or None
            inner = err.get("innerError")
            if isinstance(inner, dict) and isinstance(inner.get("request-id"), str):
                details["request_id"] = inner["request-id"]
        if reason is None and isinstance(getattr(response, "reason", None), str):
            reason = response.reason

    if not isinstance(status_code, int):
        status_code = 0

    return HttpErrorInfo(
        status_code=status_code,
        reason=reason,
        message=message,
        details=details or None,
    )
