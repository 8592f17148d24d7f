"""Configuration management for the video catalog service."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
    )

    ENV: str = "local"
    SERVICE_NAME: str = "video-catalog"
    SERVICE_VERSION: str = "0.1.0"

    # GCP Configuration
    GCP_PROJECT_ID: str = ""

    # Secret Store Configuration
    SECRET_BACKEND: str = "env"  # "secretmanager" or "env"
    CONTAINER_NAME_SECRET_NAME: str = ""  # Secret holding the container (bucket) name
    CONNECTION_STRING_SECRET_NAME: str = ""  # Secret holding gs://<project> or file://<root>

    # Upload Constraints
    MAX_FILE_SIZE_MB: int = 200
    ALLOWED_UPLOAD_EXTENSIONS: str = ".mp4"  # Comma-separated, case-insensitive

    # Storage Transfer
    GCS_UPLOAD_CHUNK_MB: int = 8
    STORAGE_REQUEST_TIMEOUT: int = 300  # seconds per storage HTTP call

    @property
    def max_upload_bytes(self) -> int:
        """Convert MAX_FILE_SIZE_MB to bytes."""
        return self.MAX_FILE_SIZE_MB * 1024 * 1024

    @property
    def allowed_extensions(self) -> frozenset[str]:
        """Parse ALLOWED_UPLOAD_EXTENSIONS into a normalized set."""
        extensions = set()
        for ext in self.ALLOWED_UPLOAD_EXTENSIONS.split(","):
            ext = ext.strip().lower()
            if not ext:
                continue
            extensions.add(ext if ext.startswith(".") else f".{ext}")
        return frozenset(extensions)

    @property
    def gcs_upload_chunk_bytes(self) -> int:
        """Convert GCS_UPLOAD_CHUNK_MB to bytes (always a multiple of 256 KiB)."""
        return max(self.GCS_UPLOAD_CHUNK_MB, 1) * 1024 * 1024


# Singleton settings instance
settings = Settings()
