"""Provider-native records as an explicit tagged union."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Union


class Provider(str, Enum):
    """Supported storage backends."""

    GOOGLE = "google"
    MICROSOFT = "microsoft"


@dataclass(frozen=True)
class GoogleRecord:
    """A Drive v3 `File` resource as returned by the API."""

    data: Mapping[str, Any] = field(default_factory=dict)

    @property
    def provider(self) -> Provider:
        return Provider.GOOGLE


@dataclass(frozen=True)
class MicrosoftRecord:
    """A Graph `driveItem` resource as returned by the API."""

    data: Mapping[str, Any] = field(default_factory=dict)

    @property
    def provider(self) -> Provider:
        return Provider.MICROSOFT


ProviderRecord = Union[GoogleRecord, MicrosoftRecord]
