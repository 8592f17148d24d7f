"""Streaming upload ingestion.

Decodes a multipart body section by section, enforces the size limit on
every chunk as it arrives, validates the file type of the first
file-bearing section and streams that section straight into an object
store sink. Every terminal state is returned as an ``IngestOutcome``.
"""

import asyncio
import logging
from typing import AsyncIterable, Optional

from starlette.requests import ClientDisconnect

from videocatalog.core.exceptions import (
    IncompleteBodyError,
    MultipartFormatError,
    StorageError,
)
from videocatalog.core.logging import object_name_context
from videocatalog.ingest.multipart import MultipartReader, UploadSection
from videocatalog.models.ingest import IngestOutcome, UploadPolicy
from videocatalog.storage.base import ObjectStore, WriteSink

logger = logging.getLogger(__name__)

MISSING_BOUNDARY = "missing boundary"
MALFORMED_BODY = "malformed multipart body"
SIZE_EXCEEDED = "size exceeds limit"
INVALID_FILE_TYPE = "invalid file type"
UPLOAD_ABORTED = "upload aborted"

VIDEO_CONTENT_TYPE = "video/mp4"


class _SizeLimitExceeded(Exception):
    pass


async def ingest_upload(
    body: AsyncIterable[bytes],
    boundary: Optional[str],
    policy: UploadPolicy,
    store: ObjectStore,
) -> IngestOutcome:
    """Ingest the first file section of a multipart body into ``store``.

    Args:
        body: Forward-only request body stream
        boundary: Boundary token from the Content-Type header
        policy: Size and file type constraints for this request
        store: Store scoped to the target container

    Returns:
        Exactly one outcome. Only task cancellation propagates.
    """
    if not boundary:
        logger.warning("Upload rejected: missing multipart boundary")
        return IngestOutcome.rejected_format(MISSING_BOUNDARY)

    reader = MultipartReader(body, boundary)

    try:
        async for section in reader:
            if not section.is_file:
                logger.debug(
                    "Skipping form field",
                    extra={"field_name": section.field_name},
                )
                await _drain_guarded(section, policy)
                continue

            return await _ingest_file_section(section, policy, store)

    except _SizeLimitExceeded:
        return IngestOutcome.rejected_policy(SIZE_EXCEEDED)
    except IncompleteBodyError:
        logger.warning("Upload aborted: body ended inside a section")
        return IngestOutcome.storage_failure(UPLOAD_ABORTED)
    except MultipartFormatError as e:
        logger.warning("Upload rejected: %s", e)
        return IngestOutcome.rejected_format(MALFORMED_BODY)
    except ClientDisconnect:
        logger.warning("Upload aborted: client disconnected")
        return IngestOutcome.storage_failure(UPLOAD_ABORTED)
    except Exception as e:
        logger.error(f"Unexpected error during ingestion: {e}", exc_info=True)
        return IngestOutcome.storage_failure(str(e))

    logger.info("Upload contained no file section")
    return IngestOutcome.no_content()


async def _drain_guarded(section: UploadSection, policy: UploadPolicy) -> None:
    async for _ in section.chunks():
        if section.bytes_read > policy.max_upload_bytes:
            raise _SizeLimitExceeded()


async def _ingest_file_section(
    section: UploadSection, policy: UploadPolicy, store: ObjectStore
) -> IngestOutcome:
    """Validate one file section and stream it into a sink.

    Size, body and disconnect errors raised while streaming abort the sink
    before propagating to ``ingest_upload``.
    """
    object_name = section.file_name
    token = object_name_context.set(object_name)
    try:
        if not policy.accepts(object_name):
            logger.warning(
                "Upload rejected: invalid file type",
                extra={"file_name": object_name},
            )
            return IngestOutcome.rejected_format(INVALID_FILE_TYPE)

        try:
            sink = await store.open_write_sink(object_name, content_type=VIDEO_CONTENT_TYPE)
        except StorageError as e:
            logger.error(f"Failed to open write sink: {e}", extra={"file_name": object_name})
            return IngestOutcome.storage_failure(str(e))

        try:
            await _stream_into_sink(section, sink, policy)
        except StorageError as e:
            await sink.abort()
            logger.error(
                f"Failed to store file: {e}",
                extra={"file_name": object_name, "bytes_read": section.bytes_read},
            )
            return IngestOutcome.storage_failure(str(e))
        except (Exception, asyncio.CancelledError):
            await sink.abort()
            raise

        try:
            size_bytes = await sink.commit()
        except StorageError as e:
            logger.error(f"Failed to commit file: {e}", extra={"file_name": object_name})
            return IngestOutcome.storage_failure(str(e))

        logger.info(
            "Upload committed",
            extra={
                "file_name": object_name,
                "container": policy.container_name,
                "size_bytes": size_bytes,
            },
        )
        return IngestOutcome.committed(object_name, size_bytes)
    finally:
        object_name_context.reset(token)


async def _stream_into_sink(
    section: UploadSection, sink: WriteSink, policy: UploadPolicy
) -> None:
    async for chunk in section.chunks():
        if section.bytes_read > policy.max_upload_bytes:
            logger.warning(
                "Upload rejected: size limit exceeded",
                extra={
                    "file_name": section.file_name,
                    "bytes_read": section.bytes_read,
                    "max_upload_bytes": policy.max_upload_bytes,
                },
            )
            raise _SizeLimitExceeded()
        await sink.write(chunk)
