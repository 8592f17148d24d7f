"""Pytest configuration and shared fixtures."""

from typing import AsyncIterator, Iterable, Optional

import pytest

from videocatalog.models.ingest import UploadPolicy
from videocatalog.storage.local import LocalObjectStore

BOUNDARY = "X"
MB = 1024 * 1024


def _part_header(boundary: str, disposition: str, content_type: Optional[str]) -> bytes:
    header = f"--{boundary}\r\nContent-Disposition: {disposition}\r\n"
    if content_type:
        header += f"Content-Type: {content_type}\r\n"
    return (header + "\r\n").encode("utf-8")


def file_part(filename: str, body: bytes, field: str = "file", content_type: str = "video/mp4") -> tuple:
    return (f'form-data; name="{field}"; filename="{filename}"', body, content_type)


def field_part(name: str, value: bytes) -> tuple:
    return (f'form-data; name="{name}"', value, None)


def build_multipart(parts: Iterable[tuple], boundary: str = BOUNDARY) -> bytes:
    """Encode (disposition, body, content_type) parts as a multipart body."""
    body = bytearray()
    for disposition, content, content_type in parts:
        body += _part_header(boundary, disposition, content_type)
        body += content + b"\r\n"
    body += f"--{boundary}--\r\n".encode("utf-8")
    return bytes(body)


async def stream_bytes(data: bytes, chunk_size: int = 64 * 1024) -> AsyncIterator[bytes]:
    for start in range(0, len(data), chunk_size):
        yield data[start:start + chunk_size]


class CountingBody:
    """Large single-file body generated on the fly, counting chunks pulled."""

    def __init__(self, filename: str, size: int, chunk_size: int = MB, boundary: str = BOUNDARY):
        self.filename = filename
        self.size = size
        self.chunk_size = chunk_size
        self.boundary = boundary
        self.body_chunks_read = 0

    async def __aiter__(self) -> AsyncIterator[bytes]:
        disposition, _, content_type = file_part(self.filename, b"")
        yield _part_header(self.boundary, disposition, content_type)

        chunk = b"\x00" * self.chunk_size
        remaining = self.size
        while remaining > 0:
            self.body_chunks_read += 1
            piece = chunk if remaining >= self.chunk_size else chunk[:remaining]
            remaining -= len(piece)
            yield piece

        yield f"\r\n--{self.boundary}--\r\n".encode("utf-8")


@pytest.fixture
def policy():
    """Reference policy: .mp4 only, 200 MB limit."""
    return UploadPolicy(
        max_upload_bytes=200 * MB,
        allowed_extensions=frozenset({".mp4"}),
        container_name="videos",
    )


@pytest.fixture
def storage_root(tmp_path):
    """Local storage root with an existing "videos" container."""
    (tmp_path / "videos").mkdir()
    return tmp_path


@pytest.fixture
def local_store(storage_root):
    return LocalObjectStore(root=storage_root, container_name="videos")
