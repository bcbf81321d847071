"""Recursive archive builder: selection -> one zip archive."""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Iterator, Optional, Sequence

from drivebridge.config import ClientConfig
from drivebridge.controller.base import ListingClient, context_for_folder
from drivebridge.errors import EmptySelectionError, LeafFetchFailedError
from drivebridge.models import ArchiveResult, DownloadProgress, FileEntry, SkippedLeaf

from .cancellation import CancellationToken
from .zip_writer import ZipWriter

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]

DEFAULT_LABEL = "download"


@dataclass(frozen=True)
class _TraversalContext:
    """Position of the walk: archive path prefix and ids of enclosing folders."""

    prefix: str = ""
    lineage: tuple[str, ...] = ()

    def descend(self, folder: FileEntry) -> "_TraversalContext":
        return _TraversalContext(
            prefix=self.path_for(folder),
            lineage=self.lineage + (folder.id,),
        )

    def path_for(self, entry: FileEntry) -> str:
        name = _safe_name(entry)
        return f"{self.prefix}/{name}" if self.prefix else name


@dataclass(frozen=True)
class _PlannedLeaf:
    entry: FileEntry
    path: str
    lineage: tuple[str, ...]


@dataclass
class _TraversalPlan:
    """Leaves in depth-first order, plus folders whose subtree had none."""

    leaves: list[_PlannedLeaf] = field(default_factory=list)
    empty_folders: list[str] = field(default_factory=list)

    def merge(self, other: "_TraversalPlan") -> None:
        self.leaves.extend(other.leaves)
        self.empty_folders.extend(other.empty_folders)


class _ArchiveJob:
    """State owned by a single build() call."""

    def __init__(
        self,
        total: int,
        compress_level: Optional[int],
        on_progress: Optional[ProgressCallback],
        cancel_token: CancellationToken,
    ) -> None:
        self.progress = DownloadProgress(total=total)
        self.writer = ZipWriter(compress_level)
        self.skipped: list[SkippedLeaf] = []
        self.on_progress = on_progress
        self.cancel_token = cancel_token

    def add(self, leaf: _PlannedLeaf, data: bytes) -> None:
        self.writer.write(leaf.path, data, leaf.entry.modified_time)
        completed = self.progress.advance()
        if self.on_progress is not None:
            self.on_progress(completed, self.progress.total)

    def skip(self, leaf: _PlannedLeaf, reason: str, exc: Optional[BaseException] = None) -> None:
        logger.warning("Skipping %s: %s", leaf.path, reason)
        self.skipped.append(
            SkippedLeaf(
                path=leaf.path,
                file_id=leaf.entry.id,
                reason=reason,
                error_type=exc.__class__.__name__ if exc is not None else None,
            )
        )


class ArchiveBuilder:
    """
    Build one zip archive from a selection of files and folders.

    Phase 1 walks the selection depth-first, listing every selected folder in
    full, and produces the ordered list of leaves with their archive paths.
    Phase 2 downloads the leaves in that order and writes them into the zip.

    Policy:
        - `total` counts every leaf found in phase 1 and never changes.
        - `completed` counts leaves actually written; a leaf whose download
          fails is skipped and recorded in `ArchiveResult.skipped`.
        - Any listing failure aborts the build (ListingFailedError); all
          listing happens in phase 1, before any download.
    """

    def __init__(
        self,
        client: ListingClient,
        *,
        drive_id: Optional[str] = None,
        config: Optional[ClientConfig] = None,
    ) -> None:
        self._client = client
        self._drive_id = drive_id
        self._config = config or ClientConfig()

    def build(
        self,
        selection: Sequence[FileEntry],
        label: str = DEFAULT_LABEL,
        *,
        on_progress: Optional[ProgressCallback] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> ArchiveResult:
        """
        Build the archive `<label>.zip` for `selection`.

        Raises:
            EmptySelectionError: nothing selected, no leaves found, or no leaf
                could be downloaded.
            ListingFailedError: a folder could not be listed.
            ArchiveCancelledError: `cancel_token` was cancelled.
            ArchiveAssemblyError: the zip could not be written.
        """
        if not selection:
            raise EmptySelectionError("Nothing selected")

        token = cancel_token or CancellationToken()
        filename = f"{_safe_label(label)}.zip"

        plan = self._plan(selection, _TraversalContext(), token)
        total = len(plan.leaves)
        logger.info(
            "Archive plan ready [archive=%s leaves=%d empty_folders=%d]",
            filename, total, len(plan.empty_folders),
        )
        if total == 0:
            raise EmptySelectionError(
                "Nothing to export: the selection contains no files",
                details={"empty_folders": list(plan.empty_folders)},
            )

        job = _ArchiveJob(total, self._config.compress_level, on_progress, token)
        try:
            self._materialize(plan, job)
            if job.progress.current == 0:
                raise EmptySelectionError(
                    "Nothing to export: no file could be downloaded",
                    details={"skipped": len(job.skipped)},
                )
            entries = job.writer.file_count
            data = job.writer.finish()
        except BaseException:
            job.writer.discard()
            raise

        logger.info(
            "Archive built [archive=%s files=%d/%d entries=%d skipped=%d bytes=%d]",
            filename, job.progress.current, total, entries, len(job.skipped), len(data),
        )
        return ArchiveResult(
            filename=filename,
            data=data,
            total=total,
            completed=job.progress.current,
            skipped=job.skipped,
            empty_folders=plan.empty_folders,
        )

    # ----------------------------
    # Phase 1: count
    # ----------------------------
    def _plan(
        self,
        entries: Sequence[FileEntry],
        ctx: _TraversalContext,
        token: CancellationToken,
    ) -> _TraversalPlan:
        plan = _TraversalPlan()
        for entry in entries:
            if not entry.is_folder:
                plan.leaves.append(_PlannedLeaf(entry, ctx.path_for(entry), ctx.lineage))
                continue

            if entry.id in ctx.lineage:
                logger.warning("Skipping folder cycle at %s", ctx.path_for(entry))
                continue

            token.raise_if_cancelled()
            children = self._client.list_all(context_for_folder(entry, self._drive_id))
            child_ctx = ctx.descend(entry)
            sub = self._plan(children, child_ctx, token)
            if not sub.leaves:
                plan.empty_folders.append(child_ctx.prefix)
            plan.merge(sub)
        return plan

    # ----------------------------
    # Phase 2: materialize
    # ----------------------------
    def _materialize(self, plan: _TraversalPlan, job: _ArchiveJob) -> None:
        workers = self._worker_count()
        if workers <= 1:
            for leaf in plan.leaves:
                job.cancel_token.raise_if_cancelled()
                self._fetch_and_add(leaf, job)
            return

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="drivebridge-dl") as pool:
            for batch in _batches_by_folder(plan.leaves):
                job.cancel_token.raise_if_cancelled()
                pending = [
                    (leaf, pool.submit(self._fetch, leaf, job.cancel_token)
                     if leaf.entry.can_download else None)
                    for leaf in batch
                ]
                try:
                    self._collect(pending, job)
                finally:
                    for _, fut in pending:
                        if fut is not None:
                            fut.cancel()

    def _collect(
        self,
        pending: list[tuple[_PlannedLeaf, Optional[Future]]],
        job: _ArchiveJob,
    ) -> None:
        # Writes follow plan order, not completion order.
        for leaf, fut in pending:
            if fut is None:
                job.skip(leaf, "not downloadable")
                continue
            try:
                data = fut.result()
            except LeafFetchFailedError as exc:
                job.skip(leaf, str(exc), exc)
                continue
            job.add(leaf, data)

    def _fetch_and_add(self, leaf: _PlannedLeaf, job: _ArchiveJob) -> None:
        if not leaf.entry.can_download:
            job.skip(leaf, "not downloadable")
            return
        try:
            data = self._client.download(leaf.entry)
        except LeafFetchFailedError as exc:
            job.skip(leaf, str(exc), exc)
            return
        job.add(leaf, data)

    def _fetch(self, leaf: _PlannedLeaf, token: CancellationToken) -> bytes:
        token.raise_if_cancelled()
        return self._client.download(leaf.entry)

    def _worker_count(self) -> int:
        workers = self._config.download_workers
        cap = getattr(self._client, "max_download_workers", None)
        if isinstance(cap, int) and cap >= 1:
            workers = min(workers, cap)
        return workers


def _batches_by_folder(leaves: list[_PlannedLeaf]) -> Iterator[list[_PlannedLeaf]]:
    """Group consecutive leaves that were listed from the same folder."""
    batch: list[_PlannedLeaf] = []
    for leaf in leaves:
        if batch and batch[-1].lineage != leaf.lineage:
            yield batch
            batch = []
        batch.append(leaf)
    if batch:
        yield batch


def _safe_name(entry: FileEntry) -> str:
    name = entry.name.replace("/", "_").replace("\\", "_").strip()
    if name in ("", ".", ".."):
        return entry.id or "_"
    return name


def _safe_label(label: Optional[str]) -> str:
    cleaned = (label or "").replace("/", "_").replace("\\", "_").strip()
    return cleaned or DEFAULT_LABEL
