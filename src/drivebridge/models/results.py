"""Progress and result models for archive builds."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass(slots=True)
class DownloadProgress:
    """
    Leaf counter for one archive build.

    `total` is fixed before the first download; `current` only moves forward
    and never passes `total`.
    """

    total: int
    current: int = 0

    def advance(self) -> int:
        if self.current >= self.total:
            raise ValueError("progress cannot exceed total")
        self.current += 1
        return self.current


@dataclass(slots=True, frozen=True)
class SkippedLeaf:
    """A file left out of the archive, with the reason."""

    path: str
    file_id: str
    reason: str
    error_type: Optional[str] = None


@dataclass(slots=True)
class ArchiveResult:
    """Outcome of one archive build."""

    filename: str
    data: bytes
    total: int
    completed: int

    skipped: list[SkippedLeaf] = field(default_factory=list)
    empty_folders: list[str] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        """True when every counted leaf made it into the archive."""
        return self.completed == self.total
