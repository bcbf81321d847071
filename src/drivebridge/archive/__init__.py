"""Archive assembly exports for drivebridge."""

from __future__ import annotations

from .builder import ArchiveBuilder, ProgressCallback
from .cancellation import CancellationToken

__all__ = ["ArchiveBuilder", "CancellationToken", "ProgressCallback"]
