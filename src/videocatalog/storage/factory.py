"""Object store selection from a connection target."""

from functools import lru_cache
from pathlib import Path

from google.cloud import storage

from videocatalog.core.config import settings
from videocatalog.storage.base import ObjectStore
from videocatalog.storage.gcs import GCSObjectStore
from videocatalog.storage.local import LocalObjectStore

GCS_SCHEME = "gs://"
FILE_SCHEME = "file://"


@lru_cache(maxsize=8)
def _gcs_client(project_id: str) -> storage.Client:
    """Shared GCS client per project, reused across requests."""
    return storage.Client(project=project_id or None)


def get_object_store(container_name: str, connection_target: str) -> ObjectStore:
    """Build the object store addressed by ``connection_target``.

    Supported targets are ``gs://<project>`` (project may be empty to use
    the default credentials' project) and ``file://<root directory>``.

    Raises:
        ValueError: If the target scheme is unsupported. The target itself
            is never included in the message.
    """
    target = connection_target.strip()

    if target.startswith(GCS_SCHEME):
        project_id = target[len(GCS_SCHEME):].strip("/")
        return GCSObjectStore(
            client=_gcs_client(project_id),
            container_name=container_name,
            chunk_size=settings.gcs_upload_chunk_bytes,
            timeout=settings.STORAGE_REQUEST_TIMEOUT,
        )

    if target.startswith(FILE_SCHEME):
        root = target[len(FILE_SCHEME):]
        if not root:
            raise ValueError("Local storage root not configured")
        return LocalObjectStore(root=Path(root), container_name=container_name)

    raise ValueError("Unsupported storage connection target")
