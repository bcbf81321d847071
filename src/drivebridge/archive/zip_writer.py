"""In-memory zip assembly for one archive build."""

from __future__ import annotations

import io
import logging
import warnings
import zipfile
from datetime import datetime
from typing import Optional

from drivebridge.errors import ArchiveAssemblyError

logger = logging.getLogger(__name__)

_ZIP_ERRORS = (zipfile.BadZipFile, zipfile.LargeZipFile, OSError, MemoryError, ValueError)

# Zip timestamps cannot represent dates before 1980; such entries get the epoch.
_ZIP_EPOCH = (1980, 1, 1, 0, 0, 0)


class ZipWriter:
    """
    Writes entries into an in-memory zip.

    A path written twice keeps only the last content: the archive is
    compacted on `finish()` when that happened.
    """

    def __init__(self, compress_level: Optional[int] = None) -> None:
        self._compress_level = compress_level
        self._buffer = io.BytesIO()
        self._written: set[str] = set()
        self._has_duplicates = False
        try:
            self._zip: Optional[zipfile.ZipFile] = zipfile.ZipFile(
                self._buffer,
                mode="w",
                compression=zipfile.ZIP_DEFLATED,
                compresslevel=compress_level,
            )
        except _ZIP_ERRORS as exc:
            raise ArchiveAssemblyError("Failed to create archive", cause=exc) from exc

    @property
    def file_count(self) -> int:
        return len(self._written)

    def write(self, path: str, data: bytes, modified: Optional[datetime] = None) -> None:
        if self._zip is None:
            raise ArchiveAssemblyError("Archive is already closed")

        if path in self._written:
            logger.warning("Duplicate archive path, last write wins: %s", path)
            self._has_duplicates = True

        info = zipfile.ZipInfo(path, date_time=_zip_date_time(modified))
        info.compress_type = zipfile.ZIP_DEFLATED
        try:
            with warnings.catch_warnings():
                # zipfile warns on duplicate names; handled in finish().
                warnings.simplefilter("ignore", UserWarning)
                self._zip.writestr(info, data, compresslevel=self._compress_level)
        except _ZIP_ERRORS as exc:
            self.discard()
            raise ArchiveAssemblyError(
                "Failed to add file to archive",
                details={"path": path},
                cause=exc,
            ) from exc
        self._written.add(path)

    def finish(self) -> bytes:
        """Close the archive and return its bytes."""
        if self._zip is None:
            raise ArchiveAssemblyError("Archive is already closed")
        try:
            self._zip.close()
            self._zip = None
            data = self._buffer.getvalue()
            if self._has_duplicates:
                data = _keep_last_entries(data, self._compress_level)
        except _ZIP_ERRORS as exc:
            self.discard()
            raise ArchiveAssemblyError("Failed to finalize archive", cause=exc) from exc
        finally:
            self._buffer.close()
        return data

    def discard(self) -> None:
        """Drop the partial archive."""
        if self._zip is not None:
            zf, self._zip = self._zip, None
            try:
                zf.close()
            except _ZIP_ERRORS:
                logger.debug("Ignoring error while discarding partial archive")
        self._buffer.close()


def _zip_date_time(modified: Optional[datetime]) -> tuple[int, int, int, int, int, int]:
    if modified is None or modified.year < _ZIP_EPOCH[0]:
        return _ZIP_EPOCH
    return (modified.year, modified.month, modified.day,
            modified.hour, modified.minute, modified.second)


def _keep_last_entries(data: bytes, compress_level: Optional[int]) -> bytes:
    with zipfile.ZipFile(io.BytesIO(data)) as src:
        infos = src.infolist()
        last = {info.filename: info for info in infos}

        out = io.BytesIO()
        with zipfile.ZipFile(
            out,
            mode="w",
            compression=zipfile.ZIP_DEFLATED,
            compresslevel=compress_level,
        ) as dst:
            for info in infos:
                if last[info.filename] is info:
                    dst.writestr(info, src.read(info), compresslevel=compress_level)
    return out.getvalue()
