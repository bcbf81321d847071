import unittest
from datetime import datetime, timezone

from drivebridge.models import GoogleRecord, MicrosoftRecord, Provider
from drivebridge.models import adapter
from drivebridge.util.mime import FOLDER_MIME


class TestGoogleRecords(unittest.TestCase):
    def test_file_fields(self) -> None:
        rec = GoogleRecord(
            {
                "id": "F1",
                "name": "report.pdf",
                "mimeType": "application/pdf",
                "modifiedTime": "2025-01-01T00:00:00.000Z",
                "size": "2048",
                "webContentLink": "https://drive.google.com/uc?id=F1",
            }
        )
        entry = adapter.to_file_entry(rec)
        self.assertEqual(entry.id, "F1")
        self.assertEqual(entry.name, "report.pdf")
        self.assertFalse(entry.is_folder)
        self.assertEqual(entry.size, 2048)
        self.assertTrue(entry.can_download)
        self.assertEqual(entry.modified_time, datetime(2025, 1, 1, tzinfo=timezone.utc))
        self.assertIs(entry.record, rec)
        self.assertEqual(rec.provider, Provider.GOOGLE)

    def test_folder_is_not_downloadable(self) -> None:
        rec = GoogleRecord({"id": "D1", "name": "docs", "mimeType": FOLDER_MIME})
        self.assertTrue(adapter.is_folder(rec))
        self.assertFalse(adapter.can_download(rec))
        self.assertIsNone(adapter.size(rec))

    def test_google_doc_is_not_downloadable(self) -> None:
        rec = GoogleRecord(
            {
                "id": "G1",
                "name": "notes",
                "mimeType": "application/vnd.google-apps.document",
                "webContentLink": "https://example.invalid",
            }
        )
        self.assertFalse(adapter.is_folder(rec))
        self.assertFalse(adapter.can_download(rec))

    def test_missing_web_content_link_is_not_downloadable(self) -> None:
        rec = GoogleRecord({"id": "F2", "name": "a.bin", "mimeType": "application/octet-stream"})
        self.assertFalse(adapter.can_download(rec))


class TestMicrosoftRecords(unittest.TestCase):
    def test_file_fields(self) -> None:
        rec = MicrosoftRecord(
            {
                "id": "M1",
                "name": "photo.jpg",
                "file": {"mimeType": "image/jpeg"},
                "size": 3072,
                "lastModifiedDateTime": "2024-06-01T08:00:00Z",
            }
        )
        entry = adapter.to_file_entry(rec)
        self.assertFalse(entry.is_folder)
        self.assertTrue(entry.can_download)
        self.assertEqual(entry.size, 3072)
        self.assertEqual(entry.modified_time, datetime(2024, 6, 1, 8, tzinfo=timezone.utc))
        self.assertEqual(rec.provider, Provider.MICROSOFT)

    def test_folder_facet(self) -> None:
        rec = MicrosoftRecord({"id": "M2", "name": "Pictures", "folder": {"childCount": 3}})
        self.assertTrue(adapter.is_folder(rec))
        self.assertFalse(adapter.can_download(rec))

    def test_shared_item_reads_remote_item(self) -> None:
        rec = MicrosoftRecord(
            {
                "id": "local-1",
                "name": "Team",
                "remoteItem": {
                    "id": "remote-1",
                    "folder": {"childCount": 1},
                    "parentReference": {"driveId": "drive-b"},
                },
            }
        )
        self.assertTrue(adapter.is_folder(rec))
        self.assertEqual(adapter.remote_drive_id(rec), "drive-b")
        self.assertEqual(adapter.remote_item_id(rec), "remote-1")

    def test_child_of_shared_folder_reads_parent_reference(self) -> None:
        rec = MicrosoftRecord(
            {
                "id": "S1",
                "name": "Nested",
                "folder": {"childCount": 1},
                "parentReference": {"driveId": "drive-b", "id": "remote-1"},
            }
        )
        self.assertEqual(adapter.remote_drive_id(rec), "drive-b")
        self.assertEqual(adapter.remote_item_id(rec), "S1")

    def test_remote_item_owner_wins_over_parent_reference(self) -> None:
        rec = MicrosoftRecord(
            {
                "id": "local-1",
                "parentReference": {"driveId": "my-drive"},
                "remoteItem": {"id": "remote-1", "parentReference": {"driveId": "drive-b"}},
            }
        )
        self.assertEqual(adapter.remote_drive_id(rec), "drive-b")

    def test_own_item_has_no_remote_drive(self) -> None:
        rec = MicrosoftRecord({"id": "M3", "name": "a.txt", "file": {}})
        self.assertIsNone(adapter.remote_drive_id(rec))
        self.assertEqual(adapter.remote_item_id(rec), "M3")


class TestAdapterIsTotal(unittest.TestCase):
    def test_malformed_values_never_raise(self) -> None:
        for rec in (
            GoogleRecord({"id": 5, "name": None, "mimeType": 7, "size": "12kb",
                          "modifiedTime": "not-a-date"}),
            MicrosoftRecord({"folder": "yes", "size": -1, "lastModifiedDateTime": 0,
                             "remoteItem": "x"}),
            GoogleRecord({}),
            MicrosoftRecord({}),
        ):
            entry = adapter.to_file_entry(rec)
            self.assertEqual(entry.id, "")
            self.assertIsNone(entry.size)
            self.assertIsNone(entry.modified_time)
            self.assertFalse(entry.is_folder)

    def test_boolean_size_is_ignored(self) -> None:
        self.assertIsNone(adapter.size(MicrosoftRecord({"size": True})))

    def test_same_input_same_output(self) -> None:
        rec = GoogleRecord({"id": "F1", "name": "n", "mimeType": "text/plain", "size": "1"})
        self.assertEqual(adapter.to_file_entry(rec), adapter.to_file_entry(rec))


if __name__ == "__main__":
    unittest.main()
