"""Per-request resolution of the catalog's storage settings."""

import logging
from dataclasses import dataclass
from typing import Optional

from videocatalog.core.config import Settings
from videocatalog.models.ingest import UploadPolicy
from videocatalog.vault.base import SecretResolver

logger = logging.getLogger(__name__)

DEFAULT_ALLOWED_EXTENSIONS = frozenset({".mp4"})


@dataclass(frozen=True)
class ResolvedCatalog:
    """Storage settings resolved for one request."""

    container_name: str
    connection_target: str
    max_upload_bytes: int
    allowed_extensions: frozenset[str] = DEFAULT_ALLOWED_EXTENSIONS

    def upload_policy(self) -> UploadPolicy:
        return UploadPolicy(
            max_upload_bytes=self.max_upload_bytes,
            allowed_extensions=self.allowed_extensions,
            container_name=self.container_name,
        )

    def __repr__(self) -> str:
        # connection_target is a secret
        return (
            f"ResolvedCatalog(container_name={self.container_name!r}, "
            f"max_upload_bytes={self.max_upload_bytes})"
        )


class CatalogConfig:
    """Resolves the container name and storage connection target via secrets.

    The secret *names* and the size limit come from static settings; the
    values are looked up on every ``resolve()`` so rotated secrets are
    picked up without a restart.
    """

    def __init__(
        self,
        resolver: SecretResolver,
        container_secret_name: Optional[str],
        connection_secret_name: Optional[str],
        max_file_size_mb: int,
        allowed_extensions: frozenset[str] = DEFAULT_ALLOWED_EXTENSIONS,
    ):
        self.resolver = resolver
        self.container_secret_name = container_secret_name
        self.connection_secret_name = connection_secret_name
        self.max_file_size_mb = max_file_size_mb
        self.allowed_extensions = allowed_extensions

    @classmethod
    def from_settings(cls, settings: Settings, resolver: SecretResolver) -> "CatalogConfig":
        return cls(
            resolver=resolver,
            container_secret_name=settings.CONTAINER_NAME_SECRET_NAME,
            connection_secret_name=settings.CONNECTION_STRING_SECRET_NAME,
            max_file_size_mb=settings.MAX_FILE_SIZE_MB,
            allowed_extensions=settings.allowed_extensions or DEFAULT_ALLOWED_EXTENSIONS,
        )

    @property
    def max_upload_bytes(self) -> int:
        return self.max_file_size_mb * 1024 * 1024

    async def resolve(self) -> Optional[ResolvedCatalog]:
        """Resolve both secrets.

        Returns:
            Resolved settings, or None if a secret name or value is missing

        Raises:
            SecretError: If the secret store lookup fails
        """
        if not self.container_secret_name or not self.connection_secret_name:
            logger.error(
                "Configuration is incomplete: container or connection secret name is missing."
            )
            return None

        container_name = (await self.resolver.resolve(self.container_secret_name) or "").strip()
        connection_target = (await self.resolver.resolve(self.connection_secret_name) or "").strip()

        if not container_name or not connection_target:
            logger.error(
                "Configuration is incomplete: container name or connection target is empty."
            )
            return None

        return ResolvedCatalog(
            container_name=container_name,
            connection_target=connection_target,
            max_upload_bytes=self.max_upload_bytes,
            allowed_extensions=self.allowed_extensions,
        )
