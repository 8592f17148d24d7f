"""Local filesystem object store."""

import asyncio
import logging
import os
import tempfile
from pathlib import Path
from typing import AsyncIterator, BinaryIO

from videocatalog.core.exceptions import ContainerNotFound, StorageError, WriteFailed
from videocatalog.storage.base import ObjectInfo, ObjectStore, WriteSink

logger = logging.getLogger(__name__)

TEMP_PREFIX = ".upload-"


class LocalFileSink(WriteSink):
    """Writes to a hidden temp file and renames it into place on commit."""

    def __init__(self, target_path: Path, temp_file: BinaryIO):
        self.target_path = target_path
        self._file = temp_file
        self._bytes_written = 0
        self._closed = False

    async def write(self, data: bytes) -> None:
        try:
            await asyncio.to_thread(self._file.write, data)
        except OSError as e:
            raise WriteFailed(f"Failed to write {self.target_path.name}: {e}", self._bytes_written) from e
        self._bytes_written += len(data)

    async def commit(self) -> int:
        try:
            await asyncio.to_thread(self._finish)
        except OSError as e:
            await self.abort()
            raise WriteFailed(f"Failed to commit {self.target_path.name}: {e}", self._bytes_written) from e

        logger.info(
            "Object committed",
            extra={"path": str(self.target_path), "size_bytes": self._bytes_written},
        )
        return self._bytes_written

    def _finish(self) -> None:
        self._file.flush()
        os.fsync(self._file.fileno())
        self._file.close()
        self._closed = True
        os.replace(self._file.name, self.target_path)

    async def abort(self) -> None:
        if not self._closed:
            self._file.close()
            self._closed = True
        Path(self._file.name).unlink(missing_ok=True)


class LocalObjectStore(ObjectStore):
    """Object store where each container is a directory under ``root``."""

    def __init__(self, root: Path, container_name: str):
        super().__init__(container_name)
        self.root = Path(root)

    @property
    def container_path(self) -> Path:
        return self.root / self.container_name

    async def container_exists(self) -> bool:
        return self.container_path.is_dir()

    async def list_objects(self) -> AsyncIterator[ObjectInfo]:
        if not self.container_path.is_dir():
            raise ContainerNotFound(f"Container does not exist: {self.container_name}")

        with os.scandir(self.container_path) as entries:
            for entry in entries:
                if entry.name.startswith(TEMP_PREFIX) or not entry.is_file():
                    continue
                yield ObjectInfo(name=entry.name, size=entry.stat().st_size)

    async def open_write_sink(
        self, object_name: str, content_type: str = "application/octet-stream"
    ) -> WriteSink:
        self._validate_object_name(object_name)
        if not self.container_path.is_dir():
            raise ContainerNotFound(f"Container does not exist: {self.container_name}")

        temp_file = tempfile.NamedTemporaryFile(
            dir=self.container_path, prefix=TEMP_PREFIX, delete=False
        )
        return LocalFileSink(self.container_path / object_name, temp_file)

    def get_backend_name(self) -> str:
        return "local"

    @staticmethod
    def _validate_object_name(object_name: str) -> None:
        """Reject names that would escape the flat container directory."""
        if (
            not object_name
            or object_name in (".", "..")
            or "/" in object_name
            or "\\" in object_name
            or "\x00" in object_name
            or object_name.startswith(TEMP_PREFIX)
        ):
            raise StorageError(f"Invalid object name: {object_name!r}")
