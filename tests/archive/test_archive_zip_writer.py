import io
import unittest
import zipfile
from datetime import datetime, timezone

from drivebridge.archive.zip_writer import ZipWriter
from drivebridge.errors import ArchiveAssemblyError


def _open(data: bytes) -> zipfile.ZipFile:
    return zipfile.ZipFile(io.BytesIO(data))


class TestZipWriter(unittest.TestCase):
    def test_writes_entries_in_order(self) -> None:
        writer = ZipWriter()
        writer.write("a.txt", b"A")
        writer.write("dir/b.txt", b"B")
        self.assertEqual(writer.file_count, 2)

        with _open(writer.finish()) as zf:
            self.assertEqual(zf.namelist(), ["a.txt", "dir/b.txt"])
            self.assertEqual(zf.read("dir/b.txt"), b"B")
            self.assertEqual(zf.getinfo("a.txt").compress_type, zipfile.ZIP_DEFLATED)

    def test_modified_time_is_kept(self) -> None:
        writer = ZipWriter()
        writer.write("a.txt", b"A", datetime(2024, 3, 4, 5, 6, 8, tzinfo=timezone.utc))

        with _open(writer.finish()) as zf:
            self.assertEqual(zf.getinfo("a.txt").date_time, (2024, 3, 4, 5, 6, 8))

    def test_missing_or_pre_1980_time_uses_zip_epoch(self) -> None:
        writer = ZipWriter()
        writer.write("old.txt", b"x", datetime(1970, 1, 1, tzinfo=timezone.utc))
        writer.write("unknown.txt", b"y")

        with _open(writer.finish()) as zf:
            self.assertEqual(zf.getinfo("old.txt").date_time, (1980, 1, 1, 0, 0, 0))
            self.assertEqual(zf.getinfo("unknown.txt").date_time, (1980, 1, 1, 0, 0, 0))

    def test_same_input_gives_same_bytes(self) -> None:
        def build() -> bytes:
            writer = ZipWriter()
            writer.write("a.txt", b"A")
            writer.write("b.txt", b"B", datetime(1960, 5, 5, tzinfo=timezone.utc))
            return writer.finish()

        self.assertEqual(build(), build())

    def test_file_count_counts_distinct_paths(self) -> None:
        writer = ZipWriter()
        writer.write("a.txt", b"1")
        writer.write("a.txt", b"2")
        writer.write("b.txt", b"3")
        self.assertEqual(writer.file_count, 2)
        writer.discard()

    def test_duplicate_path_last_write_wins(self) -> None:
        writer = ZipWriter()
        writer.write("same.txt", b"first")
        writer.write("other.txt", b"o")
        writer.write("same.txt", b"second")

        with _open(writer.finish()) as zf:
            self.assertEqual(zf.namelist(), ["other.txt", "same.txt"])
            self.assertEqual(zf.read("same.txt"), b"second")

    def test_compress_level_accepted(self) -> None:
        writer = ZipWriter(compress_level=9)
        writer.write("z.txt", b"z" * 1000)
        with _open(writer.finish()) as zf:
            self.assertEqual(zf.read("z.txt"), b"z" * 1000)

    def test_closed_writer_rejects_use(self) -> None:
        writer = ZipWriter()
        writer.finish()
        with self.assertRaises(ArchiveAssemblyError):
            writer.write("late.txt", b"x")
        with self.assertRaises(ArchiveAssemblyError):
            writer.finish()

    def test_discard_is_idempotent(self) -> None:
        writer = ZipWriter()
        writer.write("a.txt", b"A")
        writer.discard()
        writer.discard()
        with self.assertRaises(ArchiveAssemblyError):
            writer.finish()


if __name__ == "__main__":
    unittest.main()
