"""Cooperative cancellation for archive builds."""

from __future__ import annotations

import threading

from drivebridge.errors import ArchiveCancelledError


class CancellationToken:
    """Set once by the caller; checked by the builder between network calls."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise ArchiveCancelledError("Archive build was cancelled")
