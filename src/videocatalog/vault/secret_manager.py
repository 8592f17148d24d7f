"""Google Secret Manager resolver."""

import logging
from typing import Optional

from google.api_core.exceptions import (
    GoogleAPIError,
    NotFound,
    PermissionDenied,
    Unauthenticated,
)
from google.auth.exceptions import GoogleAuthError
from google.cloud import secretmanager

from videocatalog.core.exceptions import (
    SecretNotFound,
    SecretUnauthorized,
    SecretUnavailable,
)
from videocatalog.vault.base import SecretResolver

logger = logging.getLogger(__name__)


class SecretManagerResolver(SecretResolver):
    """Resolve the latest version of secrets stored in Google Secret Manager."""

    def __init__(
        self,
        project_id: str,
        client: Optional[secretmanager.SecretManagerServiceAsyncClient] = None,
    ):
        """Initialize resolver.

        Args:
            project_id: GCP project that owns the secrets
            client: Optional pre-built async client, created lazily otherwise
        """
        self.project_id = project_id
        self._client = client

    def _get_client(self) -> secretmanager.SecretManagerServiceAsyncClient:
        """Lazy-load and cache the async client."""
        if self._client is None:
            self._client = secretmanager.SecretManagerServiceAsyncClient()
        return self._client

    def secret_version_path(self, name: str) -> str:
        return f"projects/{self.project_id}/secrets/{name}/versions/latest"

    async def resolve(self, name: str) -> str:
        logger.info("Attempting to retrieve secret", extra={"secret_name": name})

        try:
            client = self._get_client()
            response = await client.access_secret_version(
                name=self.secret_version_path(name)
            )
        except NotFound as e:
            logger.error("Secret not found", extra={"secret_name": name})
            raise SecretNotFound(name, f"Secret not found: {name}") from e
        except (PermissionDenied, Unauthenticated) as e:
            logger.error("Access denied to secret", extra={"secret_name": name})
            raise SecretUnauthorized(name, f"Access denied to secret: {name}") from e
        except (GoogleAPIError, GoogleAuthError) as e:
            logger.error(
                "Secret store unavailable",
                extra={"secret_name": name, "error": str(e)},
            )
            raise SecretUnavailable(name, f"Secret store unavailable: {e}") from e

        logger.info("Successfully retrieved secret", extra={"secret_name": name})
        return response.payload.data.decode("utf-8")

    def get_backend_name(self) -> str:
        return "secretmanager"
