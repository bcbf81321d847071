"""Runtime configuration for listing clients and the archive builder."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from drivebridge.errors import InvalidArgumentError

MAX_PAGE_SIZE: int = 100

_ENV_PREFIX = "DRIVEBRIDGE_"


@dataclass(frozen=True)
class ClientConfig:
    """
    Tunables shared by both providers.

    Attributes:
        page_size: Entries requested per listing call (1..100).
        max_retries: Retries for rate-limit, network and 5xx errors.
        initial_delay_sec: First backoff delay; doubled on every retry.
        timeout_sec: Per-request timeout for the HTTP transport.
        download_workers: Concurrent downloads within one folder (1 = sequential).
        compress_level: zlib level for archive entries (None = library default).
    """

    page_size: int = MAX_PAGE_SIZE
    max_retries: int = 3
    initial_delay_sec: float = 1.0
    timeout_sec: float = 60.0
    download_workers: int = 1
    compress_level: Optional[int] = None

    def __post_init__(self) -> None:
        if not 1 <= self.page_size <= MAX_PAGE_SIZE:
            raise InvalidArgumentError(
                f"page_size must be between 1 and {MAX_PAGE_SIZE}",
                details={"page_size": self.page_size},
            )
        if self.max_retries < 0:
            raise InvalidArgumentError("max_retries must be >= 0")
        if self.initial_delay_sec < 0:
            raise InvalidArgumentError("initial_delay_sec must be >= 0")
        if self.timeout_sec <= 0:
            raise InvalidArgumentError("timeout_sec must be > 0")
        if self.download_workers < 1:
            raise InvalidArgumentError("download_workers must be >= 1")
        if self.compress_level is not None and not 0 <= self.compress_level <= 9:
            raise InvalidArgumentError("compress_level must be between 0 and 9")

    @classmethod
    def from_env(cls) -> "ClientConfig":
        """Build a config from DRIVEBRIDGE_* environment variables."""
        defaults = cls()
        level = os.getenv(f"{_ENV_PREFIX}COMPRESS_LEVEL")
        try:
            return cls(
                page_size=int(os.getenv(f"{_ENV_PREFIX}PAGE_SIZE", defaults.page_size)),
                max_retries=int(os.getenv(f"{_ENV_PREFIX}MAX_RETRIES", defaults.max_retries)),
                initial_delay_sec=float(
                    os.getenv(f"{_ENV_PREFIX}INITIAL_DELAY_SEC", defaults.initial_delay_sec)
                ),
                timeout_sec=float(os.getenv(f"{_ENV_PREFIX}TIMEOUT_SEC", defaults.timeout_sec)),
                download_workers=int(
                    os.getenv(f"{_ENV_PREFIX}DOWNLOAD_WORKERS", defaults.download_workers)
                ),
                compress_level=int(level) if level else None,
            )
        except ValueError as exc:
            raise InvalidArgumentError(
                "Invalid DRIVEBRIDGE_* environment value",
                cause=exc,
            ) from exc
