"""Per-login session: provider, bearer token and configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from drivebridge.archive import ArchiveBuilder
from drivebridge.config import ClientConfig
from drivebridge.controller import GoogleDriveController, ListingClient, MicrosoftGraphController
from drivebridge.errors import AuthError, InvalidArgumentError
from drivebridge.models import Provider


@dataclass(frozen=True)
class Session:
    """
    Credentials for one signed-in user.

    Created after successful authentication and dropped on logout. Token
    refresh is the caller's responsibility: build a new Session with the new
    token.
    """

    provider: Provider
    access_token: str = field(repr=False)
    config: ClientConfig = field(default_factory=ClientConfig)

    def __post_init__(self) -> None:
        if not isinstance(self.provider, Provider):
            raise InvalidArgumentError(
                "provider must be a Provider",
                details={"provider": repr(self.provider)},
            )
        if not isinstance(self.access_token, str) or not self.access_token.strip():
            raise AuthError("access_token must be a non-empty string")

    def listing_client(self) -> ListingClient:
        """Build a new listing client for this session's provider."""
        if self.provider is Provider.GOOGLE:
            return GoogleDriveController(self.access_token, config=self.config)
        return MicrosoftGraphController(self.access_token, config=self.config)

    def archive_builder(
        self,
        client: ListingClient,
        *,
        drive_id: Optional[str] = None,
    ) -> ArchiveBuilder:
        return ArchiveBuilder(client, drive_id=drive_id, config=self.config)
