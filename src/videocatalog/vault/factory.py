"""Secret resolver selection."""

from videocatalog.core.config import Settings
from videocatalog.vault.base import SecretResolver
from videocatalog.vault.env import EnvironmentSecretResolver
from videocatalog.vault.secret_manager import SecretManagerResolver


def get_secret_resolver(settings: Settings) -> SecretResolver:
    """Build the secret resolver named by SECRET_BACKEND.

    Raises:
        ValueError: If the backend is unknown or misconfigured
    """
    backend = settings.SECRET_BACKEND.strip().lower()

    if backend == "env":
        return EnvironmentSecretResolver()

    if backend == "secretmanager":
        if not settings.GCP_PROJECT_ID:
            raise ValueError("GCP_PROJECT_ID not configured")
        return SecretManagerResolver(project_id=settings.GCP_PROJECT_ID)

    raise ValueError(f"Unknown SECRET_BACKEND: {settings.SECRET_BACKEND}")
