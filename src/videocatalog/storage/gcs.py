"""Google Cloud Storage object store."""

import asyncio
import logging
import re
from typing import AsyncIterator, Optional

import httpx
from google.api_core.exceptions import GoogleAPIError, NotFound
from google.auth.exceptions import GoogleAuthError
from google.cloud import storage

from videocatalog.core.exceptions import (
    ContainerNotFound,
    StorageUnavailable,
    WriteFailed,
)
from videocatalog.storage.base import ObjectInfo, ObjectStore, WriteSink

logger = logging.getLogger(__name__)

# Non-final resumable chunks must be a multiple of this size
RESUMABLE_CHUNK_ALIGNMENT = 256 * 1024

_RANGE_PATTERN = re.compile(r"bytes=0-(\d+)")


class GCSResumableSink(WriteSink):
    """Streams an object into a GCS resumable upload session.

    Bytes are buffered up to ``chunk_size`` and PUT to the session URI.
    GCS only creates the object when the final chunk carrying the total
    size is accepted, so an abandoned or cancelled session leaves nothing
    behind.
    """

    def __init__(
        self,
        session_url: str,
        object_name: str,
        chunk_size: int,
        timeout: float = 300,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if chunk_size <= 0 or chunk_size % RESUMABLE_CHUNK_ALIGNMENT:
            raise ValueError("chunk_size must be a positive multiple of 256 KiB")

        self.session_url = session_url
        self.object_name = object_name
        self.chunk_size = chunk_size
        self._http = httpx.AsyncClient(timeout=timeout, transport=transport)
        self._buffer = bytearray()
        self._offset = 0  # bytes persisted by GCS
        self._finished = False

    async def write(self, data: bytes) -> None:
        if self._finished:
            raise WriteFailed(f"Sink for {self.object_name} is closed", self._offset)

        self._buffer.extend(data)
        while len(self._buffer) >= self.chunk_size:
            await self._send_chunk()

    async def commit(self) -> int:
        if self._finished:
            raise WriteFailed(f"Sink for {self.object_name} is closed", self._offset)

        while len(self._buffer) > self.chunk_size:
            await self._send_chunk()

        total = self._offset + len(self._buffer)
        if self._buffer:
            content_range = f"bytes {self._offset}-{total - 1}/{total}"
        else:
            content_range = f"bytes */{total}"

        try:
            response = await self._http.put(
                self.session_url,
                content=bytes(self._buffer),
                headers={"Content-Range": content_range},
            )
        except httpx.HTTPError as e:
            await self.abort()
            raise WriteFailed(f"Failed to finalize {self.object_name}: {e}", self._offset) from e

        if response.status_code not in (200, 201):
            await self.abort()
            raise WriteFailed(
                f"Failed to finalize {self.object_name}: HTTP {response.status_code}",
                self._offset,
            )

        self._offset = total
        self._buffer.clear()
        self._finished = True
        await self._http.aclose()

        logger.info(
            "Object committed to GCS",
            extra={"object_name": self.object_name, "size_bytes": total},
        )
        return total

    async def abort(self) -> None:
        if self._finished:
            return
        self._finished = True
        self._buffer.clear()

        try:
            # GCS answers a cancelled session with 499
            await self._http.delete(self.session_url, headers={"Content-Length": "0"})
        except httpx.HTTPError as e:
            logger.warning(
                "Failed to cancel resumable upload session",
                extra={"object_name": self.object_name, "error": str(e)},
            )
        finally:
            await self._http.aclose()

        logger.info("Resumable upload cancelled", extra={"object_name": self.object_name})

    async def _send_chunk(self) -> None:
        """PUT one non-final chunk and keep whatever GCS did not persist."""
        chunk = bytes(self._buffer[: self.chunk_size])
        end = self._offset + len(chunk) - 1

        try:
            response = await self._http.put(
                self.session_url,
                content=chunk,
                headers={"Content-Range": f"bytes {self._offset}-{end}/*"},
            )
        except httpx.HTTPError as e:
            raise WriteFailed(f"Failed to upload {self.object_name}: {e}", self._offset) from e

        if response.status_code != 308:
            raise WriteFailed(
                f"Failed to upload {self.object_name}: HTTP {response.status_code}",
                self._offset,
            )

        persisted = self._offset
        match = _RANGE_PATTERN.fullmatch(response.headers.get("Range", ""))
        if match:
            persisted = int(match.group(1)) + 1

        if persisted <= self._offset and len(chunk) > 0:
            raise WriteFailed(f"GCS made no progress uploading {self.object_name}", self._offset)

        del self._buffer[: persisted - self._offset]
        self._offset = persisted


class GCSObjectStore(ObjectStore):
    """Object store backed by a single GCS bucket."""

    def __init__(
        self,
        client: storage.Client,
        container_name: str,
        chunk_size: int = 8 * 1024 * 1024,
        timeout: float = 300,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(container_name)
        self.client = client
        self.bucket = client.bucket(container_name)
        self.chunk_size = chunk_size
        self.timeout = timeout
        self._transport = transport

    async def container_exists(self) -> bool:
        try:
            return await asyncio.to_thread(self.bucket.exists)
        except (GoogleAPIError, GoogleAuthError) as e:
            logger.error(
                "Failed to check bucket existence",
                extra={"bucket": self.container_name, "error": str(e)},
            )
            raise StorageUnavailable(f"Storage unavailable: {e}") from e

    async def list_objects(self) -> AsyncIterator[ObjectInfo]:
        pages = self.client.list_blobs(self.container_name).pages

        while True:
            try:
                # Each page is one blocking HTTP call
                page = await asyncio.to_thread(next, pages, None)
            except NotFound as e:
                raise ContainerNotFound(f"Container does not exist: {self.container_name}") from e
            except (GoogleAPIError, GoogleAuthError) as e:
                logger.error(
                    "Failed to list bucket",
                    extra={"bucket": self.container_name, "error": str(e)},
                )
                raise StorageUnavailable(f"Storage unavailable: {e}") from e

            if page is None:
                return
            for blob in page:
                yield ObjectInfo(name=blob.name, size=blob.size)

    async def open_write_sink(
        self, object_name: str, content_type: str = "application/octet-stream"
    ) -> WriteSink:
        blob = self.bucket.blob(object_name)

        try:
            session_url = await asyncio.to_thread(
                blob.create_resumable_upload_session,
                content_type=content_type,
                timeout=self.timeout,
            )
        except NotFound as e:
            raise ContainerNotFound(f"Container does not exist: {self.container_name}") from e
        except (GoogleAPIError, GoogleAuthError) as e:
            logger.error(
                "Failed to open resumable upload session",
                extra={"bucket": self.container_name, "object_name": object_name, "error": str(e)},
            )
            raise StorageUnavailable(f"Storage unavailable: {e}") from e

        logger.info(
            "Resumable upload session opened",
            extra={"bucket": self.container_name, "object_name": object_name},
        )
        return GCSResumableSink(
            session_url=session_url,
            object_name=object_name,
            chunk_size=self.chunk_size,
            timeout=self.timeout,
            transport=self._transport,
        )

    def get_backend_name(self) -> str:
        return "gcs"
