"""Tests for the local storage backend and store selection."""

from pathlib import Path
from unittest.mock import patch

import pytest

from videocatalog.core.exceptions import ContainerNotFound, StorageError
from videocatalog.storage.factory import get_object_store
from videocatalog.storage.gcs import GCSObjectStore
from videocatalog.storage.local import LocalObjectStore


class TestLocalObjectStore:
    """Tests for local storage backend."""

    @pytest.mark.asyncio
    async def test_container_exists(self, storage_root):
        """Test container detection."""
        assert await LocalObjectStore(storage_root, "videos").container_exists()
        assert not await LocalObjectStore(storage_root, "missing").container_exists()

    @pytest.mark.asyncio
    async def test_list_objects(self, local_store):
        """Test listing names and sizes, skipping in-progress uploads."""
        (local_store.container_path / "a.mp4").write_bytes(b"a" * 10)
        (local_store.container_path / "b.mp4").write_bytes(b"")
        (local_store.container_path / ".upload-abc123").write_bytes(b"pending")
        (local_store.container_path / "nested").mkdir()

        objects = {info.name: info.size async for info in local_store.list_objects()}

        assert objects == {"a.mp4": 10, "b.mp4": 0}

    @pytest.mark.asyncio
    async def test_list_objects_restartable(self, local_store):
        """Test that each call starts a fresh enumeration."""
        (local_store.container_path / "a.mp4").write_bytes(b"a")

        first = [info.name async for info in local_store.list_objects()]
        second = [info.name async for info in local_store.list_objects()]

        assert first == second == ["a.mp4"]

    @pytest.mark.asyncio
    async def test_list_missing_container(self, storage_root):
        """Test listing a container that does not exist."""
        store = LocalObjectStore(storage_root, "missing")

        with pytest.raises(ContainerNotFound):
            [info async for info in store.list_objects()]

    @pytest.mark.asyncio
    async def test_sink_commit_publishes_object(self, local_store):
        """Test that the object only appears after commit."""
        sink = await local_store.open_write_sink("clip.mp4")
        await sink.write(b"first-")
        await sink.write(b"second")

        assert not (local_store.container_path / "clip.mp4").exists()

        size = await sink.commit()

        assert size == 12
        assert (local_store.container_path / "clip.mp4").read_bytes() == b"first-second"
        assert sorted(p.name for p in local_store.container_path.iterdir()) == ["clip.mp4"]

    @pytest.mark.asyncio
    async def test_sink_commit_overwrites(self, local_store):
        """Test that committing replaces an existing object."""
        (local_store.container_path / "clip.mp4").write_bytes(b"old contents")

        sink = await local_store.open_write_sink("clip.mp4")
        await sink.write(b"new")
        await sink.commit()

        assert (local_store.container_path / "clip.mp4").read_bytes() == b"new"

    @pytest.mark.asyncio
    async def test_sink_abort_leaves_nothing(self, local_store):
        """Test that aborting removes the temp file and never publishes."""
        sink = await local_store.open_write_sink("clip.mp4")
        await sink.write(b"partial")

        await sink.abort()
        await sink.abort()

        assert list(local_store.container_path.iterdir()) == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", ["", ".", "..", "a/b.mp4", "a\\b.mp4", ".upload-x.mp4"])
    async def test_invalid_object_names(self, local_store, name):
        """Test that names escaping the flat container are refused."""
        with pytest.raises(StorageError):
            await local_store.open_write_sink(name)

    @pytest.mark.asyncio
    async def test_open_sink_missing_container(self, storage_root):
        """Test opening a sink in a container that does not exist."""
        store = LocalObjectStore(storage_root, "missing")

        with pytest.raises(ContainerNotFound):
            await store.open_write_sink("clip.mp4")

    def test_get_backend_name(self, local_store):
        """Test backend name."""
        assert local_store.get_backend_name() == "local"


class TestGetObjectStore:
    """Tests for connection target dispatch."""

    def test_file_target(self, tmp_path):
        """Test that file:// targets build a local store."""
        store = get_object_store("videos", f"file://{tmp_path}")

        assert isinstance(store, LocalObjectStore)
        assert store.container_path == Path(tmp_path) / "videos"

    def test_gs_target(self):
        """Test that gs:// targets build a GCS store for the project."""
        with patch("videocatalog.storage.factory.storage.Client") as mock_client:
            from videocatalog.storage.factory import _gcs_client

            _gcs_client.cache_clear()
            store = get_object_store("videos", "gs://my-project")

        assert isinstance(store, GCSObjectStore)
        mock_client.assert_called_once_with(project="my-project")
        mock_client.return_value.bucket.assert_called_once_with("videos")
        _gcs_client.cache_clear()

    def test_unsupported_target_hides_value(self):
        """Test that the error never echoes the connection target."""
        with pytest.raises(ValueError) as exc_info:
            get_object_store("videos", "DefaultEndpointsProtocol=https;AccountKey=s3cret")

        assert "s3cret" not in str(exc_info.value)

    def test_empty_file_root(self):
        """Test that file:// needs a root directory."""
        with pytest.raises(ValueError):
            get_object_store("videos", "file://")
