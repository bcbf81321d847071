import json
import unittest
from unittest.mock import Mock, patch

from drivebridge.config import ClientConfig
from drivebridge.controller.base import ListingContext, ListingKind
from drivebridge.controller.google_controller import (
    GoogleDriveController,
    _build_parent_query,
    _http_error_to_info,
)
from drivebridge.errors import (
    LeafFetchFailedError,
    ListingFailedError,
    NotFoundError,
    QuotaExceededError,
)
from drivebridge.models import GoogleRecord
from drivebridge.models.adapter import to_file_entry
from drivebridge.util.mime import FOLDER_MIME


def _http_error(status: int, reason: str = "", payload=None):
    from googleapiclient.errors import HttpError

    resp = Mock()
    resp.status = status
    resp.reason = reason
    content = json.dumps(payload).encode("utf-8") if payload is not None else b"{}"
    return HttpError(resp=resp, content=content)


def _file(file_id: str, name: str, *, folder: bool = False) -> dict:
    data = {
        "id": file_id,
        "name": name,
        "mimeType": FOLDER_MIME if folder else "text/plain",
        "modifiedTime": "2025-01-01T00:00:00Z",
    }
    if not folder:
        data["size"] = "3"
        data["webContentLink"] = f"https://drive.google.com/uc?id={file_id}"
    return data


class TestGoogleListing(unittest.TestCase):
    def _service(self, *responses):
        service = Mock()
        files_resource = Mock()
        request = Mock()
        service.files.return_value = files_resource
        files_resource.list.return_value = request
        request.execute.side_effect = list(responses)
        return service, files_resource

    def test_folder_listing_query(self) -> None:
        service, files_resource = self._service({"files": []})
        controller = GoogleDriveController.from_service(service, config=ClientConfig(page_size=50))

        controller.list_all(ListingContext.folder("P1"))

        kwargs = files_resource.list.call_args.kwargs
        self.assertEqual(kwargs["q"], "'P1' in parents and trashed = false")
        self.assertEqual(kwargs["pageSize"], 50)
        self.assertTrue(kwargs["supportsAllDrives"])
        self.assertTrue(kwargs["includeItemsFromAllDrives"])
        self.assertNotIn("driveId", kwargs)

    def test_shared_with_me_and_recent_queries(self) -> None:
        service, files_resource = self._service({"files": []}, {"files": []})
        controller = GoogleDriveController.from_service(service)

        controller.list_all(ListingContext.shared_with_me())
        self.assertIn("sharedWithMe = true", files_resource.list.call_args.kwargs["q"])

        controller.list_all(ListingContext.recent())
        self.assertEqual(files_resource.list.call_args.kwargs["orderBy"], "modifiedTime desc")

    def test_shared_drive_root_uses_drive_id_as_parent(self) -> None:
        service, files_resource = self._service({"files": []})
        controller = GoogleDriveController.from_service(service)

        controller.list_all(ListingContext.shared_drive("D1"))

        kwargs = files_resource.list.call_args.kwargs
        self.assertEqual(kwargs["driveId"], "D1")
        self.assertEqual(kwargs["corpora"], "drive")
        self.assertIn("'D1' in parents", kwargs["q"])

    def test_shared_drive_without_drive_id_fails(self) -> None:
        service, _ = self._service()
        controller = GoogleDriveController.from_service(service)

        with self.assertRaises(ListingFailedError):
            controller.list_all(ListingContext(kind=ListingKind.SHARED_DRIVE))

    def test_paginates_and_sorts(self) -> None:
        service, files_resource = self._service(
            {"files": [_file("2", "b.txt"), _file("3", "a.txt")], "nextPageToken": "t2"},
            {"files": [_file("1", "docs", folder=True)]},
        )
        controller = GoogleDriveController.from_service(service)

        entries = controller.list_all(ListingContext.folder("root"))

        self.assertEqual([e.name for e in entries], ["docs", "a.txt", "b.txt"])
        self.assertEqual(files_resource.list.call_args_list[1].kwargs["pageToken"], "t2")

    def test_http_error_becomes_listing_failed(self) -> None:
        service, _ = self._service(_http_error(404, "Not Found"))
        controller = GoogleDriveController.from_service(service)

        with self.assertRaises(ListingFailedError) as cm:
            controller.list_all(ListingContext.folder("X"))
        self.assertIsInstance(cm.exception.cause, NotFoundError)

    @patch("drivebridge.controller.retry.time.sleep")
    def test_rate_limit_is_retried(self, sleep: Mock) -> None:
        service, _ = self._service(_http_error(429, "Too Many Requests"), {"files": [_file("1", "a")]})
        controller = GoogleDriveController.from_service(service)

        entries = controller.list_all(ListingContext.folder("root"))

        self.assertEqual(len(entries), 1)
        sleep.assert_called_once()


class TestGoogleSharedDrives(unittest.TestCase):
    def test_lists_drives(self) -> None:
        service = Mock()
        service.drives.return_value.list.return_value.execute.return_value = {
            "drives": [{"id": "D1", "name": "Team"}, {"name": "no id"}],
        }
        controller = GoogleDriveController.from_service(service)

        drives = controller.list_shared_drives()

        self.assertEqual([(d.id, d.name) for d in drives], [("D1", "Team")])

    def test_permission_denied_gives_empty_list(self) -> None:
        service = Mock()
        service.drives.return_value.list.return_value.execute.side_effect = _http_error(403, "forbidden")
        controller = GoogleDriveController.from_service(service)

        self.assertEqual(controller.list_shared_drives(), [])


class _FakeDownloader:
    def __init__(self, fd, request, chunks=(b"he", b"llo")):
        self._fd = fd
        self._chunks = list(chunks)

    def next_chunk(self):
        self._fd.write(self._chunks.pop(0))
        return None, not self._chunks


class TestGoogleDownload(unittest.TestCase):
    @patch("googleapiclient.http.MediaIoBaseDownload", _FakeDownloader)
    def test_download_reads_all_chunks(self) -> None:
        service = Mock()
        controller = GoogleDriveController.from_service(service)
        entry = to_file_entry(GoogleRecord(_file("F1", "a.txt")))

        data = controller.download(entry)

        self.assertEqual(data, b"hello")
        service.files.return_value.get_media.assert_called_once_with(
            fileId="F1", supportsAllDrives=True
        )

    def test_non_downloadable_makes_no_request(self) -> None:
        service = Mock()
        controller = GoogleDriveController.from_service(service)
        doc = to_file_entry(
            GoogleRecord({"id": "G1", "name": "doc", "mimeType": "application/vnd.google-apps.document"})
        )

        with self.assertRaises(LeafFetchFailedError):
            controller.download(doc)
        service.files.assert_not_called()

    def test_chunk_failure_is_leaf_fetch_failed(self) -> None:
        class _Failing(_FakeDownloader):
            def next_chunk(self):
                raise _http_error(404, "Not Found")

        service = Mock()
        controller = GoogleDriveController.from_service(service)
        entry = to_file_entry(GoogleRecord(_file("F1", "a.txt")))

        with patch("googleapiclient.http.MediaIoBaseDownload", _Failing):
            with self.assertRaises(LeafFetchFailedError) as cm:
                controller.download(entry)
        self.assertEqual(cm.exception.details["error_type"], "NotFoundError")


class TestGoogleHelpers(unittest.TestCase):
    def test_parent_query_escapes_quotes(self) -> None:
        self.assertEqual(
            _build_parent_query("a'b"),
            "'a\\'b' in parents and trashed = false",
        )

    def test_http_error_reason_from_payload(self) -> None:
        exc = _http_error(
            403,
            "Forbidden",
            {"error": {"message": "limit", "errors": [{"domain": "usageLimits",
                                                       "reason": "userRateLimitExceeded"}]}},
        )
        info = _http_error_to_info(exc)
        self.assertEqual(info.status_code, 403)
        self.assertEqual(info.reason, "userRateLimitExceeded")
        self.assertEqual(info.message, "limit")

    def test_quota_reason_maps_to_quota_error(self) -> None:
        service = Mock()
        service.files.return_value.list.return_value.execute.side_effect = _http_error(
            403, "Forbidden", {"error": {"errors": [{"reason": "storageQuotaExceeded"}]}}
        )
        controller = GoogleDriveController.from_service(service)

        with self.assertRaises(ListingFailedError) as cm:
            controller.list_all(ListingContext.folder("root"))
        self.assertIsInstance(cm.exception.cause, QuotaExceededError)

    def test_close_closes_service(self) -> None:
        service = Mock()
        GoogleDriveController.from_service(service).close()
        service.close.assert_called_once()


if __name__ == "__main__":
    unittest.main()
