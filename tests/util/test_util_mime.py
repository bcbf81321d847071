import unittest

from drivebridge.util.mime import FOLDER_MIME, is_folder_mime, is_google_app


class TestUtilMime(unittest.TestCase):
    def test_is_folder_mime(self) -> None:
        self.assertTrue(is_folder_mime(FOLDER_MIME))
        self.assertFalse(is_folder_mime("text/plain"))

    def test_is_google_app(self) -> None:
        self.assertTrue(is_google_app("application/vnd.google-apps.document"))
        self.assertTrue(is_google_app("application/vnd.google-apps.spreadsheet"))

        # Prefix-based detection for unlisted Google apps types.
        self.assertTrue(is_google_app("application/vnd.google-apps.some-new-type"))

        self.assertFalse(is_google_app("application/pdf"))


if __name__ == "__main__":
    unittest.main()
