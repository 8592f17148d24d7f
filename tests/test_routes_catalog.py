"""Tests for the catalog list and upload routes."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from conftest import build_multipart, field_part, file_part
from videocatalog.api.dependencies import get_catalog_config, get_store_factory
from videocatalog.catalog.config import CatalogConfig
from videocatalog.core.exceptions import SecretUnavailable, WriteFailed
from videocatalog.main import app
from videocatalog.storage.base import ObjectStore, WriteSink
from videocatalog.vault.env import EnvironmentSecretResolver

URL = "/api/v1/videos"


@pytest.fixture
def secrets(storage_root):
    """Environment the secret resolver reads from."""
    return {
        "SECRET_VIDEO_CONTAINER": "videos",
        "SECRET_VIDEO_STORAGE": f"file://{storage_root}",
    }


@pytest.fixture
def catalog_config(secrets):
    return CatalogConfig(
        resolver=EnvironmentSecretResolver(environ=secrets),
        container_secret_name="video-container",
        connection_secret_name="video-storage",
        max_file_size_mb=1,
    )


@pytest.fixture
def client(catalog_config):
    """Create test client with the catalog config injected."""
    app.dependency_overrides[get_catalog_config] = lambda: catalog_config
    yield TestClient(app)
    app.dependency_overrides.clear()


def upload(client, filename, payload, content_type="video/mp4"):
    return client.post(URL, files={"file": (filename, payload, content_type)})


def test_list_empty_container(client):
    """Test listing an empty container."""
    response = client.get(URL)

    assert response.status_code == 200
    assert response.json() == []


def test_list_objects(client, storage_root):
    """Test listing returns every object with its size."""
    (storage_root / "videos" / "a.mp4").write_bytes(b"a" * 10)
    (storage_root / "videos" / "b.mp4").write_bytes(b"b" * 20)

    response = client.get(URL)

    assert response.status_code == 200
    entries = sorted(response.json(), key=lambda e: e["FileName"])
    assert entries == [
        {"FileName": "a.mp4", "FileSize": 10},
        {"FileName": "b.mp4", "FileSize": 20},
    ]


def test_list_missing_container(client, secrets):
    """Test listing when the container does not exist."""
    secrets["SECRET_VIDEO_CONTAINER"] = "missing"

    response = client.get(URL)

    assert response.status_code == 404
    assert response.text == "Storage container does not exist."


def test_list_configuration_missing(client, catalog_config):
    """Test listing without configured secret names."""
    catalog_config.container_secret_name = ""

    response = client.get(URL)

    assert response.status_code == 500
    assert response.text == "Configuration is not properly set up."


def test_list_empty_secret_value(client, secrets):
    """Test listing when a secret resolves to an empty value."""
    secrets["SECRET_VIDEO_STORAGE"] = ""

    response = client.get(URL)

    assert response.status_code == 500
    assert response.text == "Configuration is not properly set up."


def test_list_secret_store_failure(client, catalog_config):
    """Test that secret store failures become a 500 with the message."""
    catalog_config.resolver = MagicMock()
    catalog_config.resolver.resolve = AsyncMock(
        side_effect=SecretUnavailable("video-container", "Secret store unavailable: timeout")
    )

    response = client.get(URL)

    assert response.status_code == 500
    assert response.text.startswith("An error occurred while processing your request:")
    assert "timeout" in response.text


def test_list_unsupported_target_hides_secret(client, secrets):
    """Test that a bad connection target is never echoed back."""
    secrets["SECRET_VIDEO_STORAGE"] = "AccountKey=very-secret-key"

    response = client.get(URL)

    assert response.status_code == 500
    assert "very-secret-key" not in response.text


def test_upload_then_list(client):
    """Test the clip.mp4 scenario through HTTP."""
    payload = bytes(range(256)) * 4

    response = upload(client, "clip.mp4", payload)

    assert response.status_code == 200
    assert response.text == "File uploaded successfully."
    assert {"FileName": "clip.mp4", "FileSize": 1024} in client.get(URL).json()


def test_upload_raw_body_with_boundary_x(client, storage_root):
    """Test a hand-built body using boundary X."""
    data = build_multipart([field_part("title", b"Holiday"), file_part("clip.mp4", b"video")])

    response = client.post(
        URL, content=data, headers={"Content-Type": "multipart/form-data; boundary=X"}
    )

    assert response.status_code == 200
    assert (storage_root / "videos" / "clip.mp4").read_bytes() == b"video"


def test_upload_oversized(client, storage_root):
    """Test that uploads above the limit are rejected and not stored."""
    response = upload(client, "clip.mp4", b"a" * (1024 * 1024 + 1))

    assert response.status_code == 400
    assert response.text == "File size exceeds the 1MB limit."
    assert client.get(URL).json() == []


def test_upload_invalid_file_type(client):
    """Test that non-.mp4 files are rejected."""
    response = upload(client, "movie.avi", b"video", content_type="video/x-msvideo")

    assert response.status_code == 400
    assert response.text == "Invalid file. Only .mp4 files are allowed."
    assert client.get(URL).json() == []


def test_upload_not_multipart(client):
    """Test that non-multipart bodies are rejected."""
    response = client.post(URL, content=b"raw", headers={"Content-Type": "application/octet-stream"})

    assert response.status_code == 400
    assert response.text == "Invalid form content. Expecting 'multipart/form-data'."


def test_upload_missing_boundary(client):
    """Test that a multipart content type without boundary is rejected."""
    data = build_multipart([file_part("clip.mp4", b"video")])

    response = client.post(URL, content=data, headers={"Content-Type": "multipart/form-data"})

    assert response.status_code == 400
    assert response.text == "Missing boundary in Content-Type header."


def test_upload_without_file_section(client):
    """Test that a body with only plain fields is rejected."""
    data = build_multipart([field_part("title", b"Holiday")])

    response = client.post(
        URL, content=data, headers={"Content-Type": "multipart/form-data; boundary=X"}
    )

    assert response.status_code == 400
    assert response.text == "No valid file data in request."


def test_upload_malformed_body(client):
    """Test that an undecodable body is rejected."""
    response = client.post(
        URL, content=b"garbage", headers={"Content-Type": "multipart/form-data; boundary=X"}
    )

    assert response.status_code == 400
    assert response.text == "Malformed multipart body."


def test_upload_missing_container(client, secrets):
    """Test uploading into a container that does not exist."""
    secrets["SECRET_VIDEO_CONTAINER"] = "missing"

    response = upload(client, "clip.mp4", b"video")

    assert response.status_code == 404
    assert response.text == "Storage container does not exist."


def test_upload_configuration_missing(client, catalog_config):
    """Test uploading without configured secret names."""
    catalog_config.connection_secret_name = None

    response = upload(client, "clip.mp4", b"video")

    assert response.status_code == 500
    assert response.text == "Configuration is not properly set up."


def test_upload_storage_failure(client):
    """Test that sink failures become a 500."""
    store = MagicMock(spec=ObjectStore)
    store.container_exists = AsyncMock(return_value=True)
    sink = MagicMock(spec=WriteSink)
    sink.write = AsyncMock(side_effect=WriteFailed("quota exceeded"))
    store.open_write_sink = AsyncMock(return_value=sink)
    app.dependency_overrides[get_store_factory] = lambda: (lambda container, target: store)

    response = upload(client, "clip.mp4", b"video")

    assert response.status_code == 500
    assert response.text == "Failed to store file."
    sink.abort.assert_awaited_once()
