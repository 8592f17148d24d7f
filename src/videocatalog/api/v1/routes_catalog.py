"""Video catalog API routes."""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse

from videocatalog.api.dependencies import StoreFactory, get_catalog_config, get_store_factory
from videocatalog.catalog.config import CatalogConfig
from videocatalog.catalog.listing import list_catalog
from videocatalog.ingest.multipart import parse_boundary
from videocatalog.ingest.pipeline import (
    INVALID_FILE_TYPE,
    MISSING_BOUNDARY,
    ingest_upload,
)
from videocatalog.models.catalog import CatalogEntry
from videocatalog.models.ingest import IngestOutcome, IngestStatus, UploadPolicy

router = APIRouter(prefix="/api/v1", tags=["catalog"])
logger = logging.getLogger(__name__)

CONFIGURATION_MISSING = "Configuration is not properly set up."
CONTAINER_MISSING = "Storage container does not exist."
INVALID_CONTENT_TYPE = "Invalid form content. Expecting 'multipart/form-data'."
UPLOAD_SUCCEEDED = "File uploaded successfully."


def _text(status_code: int, message: str) -> PlainTextResponse:
    return PlainTextResponse(message, status_code=status_code)


def _unexpected(e: Exception) -> PlainTextResponse:
    return _text(500, f"An error occurred while processing your request: {e}")


@router.get("/videos", response_model=list[CatalogEntry])
async def list_videos(
    catalog_config: CatalogConfig = Depends(get_catalog_config),
    store_factory: StoreFactory = Depends(get_store_factory),
):
    """List stored videos with their sizes."""
    logger.info("Listing files.")

    try:
        catalog = await catalog_config.resolve()
        if catalog is None:
            return _text(500, CONFIGURATION_MISSING)

        store = store_factory(catalog.container_name, catalog.connection_target)

        if not await store.container_exists():
            logger.warning(
                "Storage container does not exist",
                extra={"container": catalog.container_name},
            )
            return _text(404, CONTAINER_MISSING)

        entries = await list_catalog(store)

    except Exception as e:
        logger.error(f"An error occurred while listing files: {e}", exc_info=True)
        return _unexpected(e)

    logger.info("Listed files", extra={"count": len(entries)})
    return entries


@router.post("/videos", response_class=PlainTextResponse)
async def upload_video(
    request: Request,
    catalog_config: CatalogConfig = Depends(get_catalog_config),
    store_factory: StoreFactory = Depends(get_store_factory),
) -> PlainTextResponse:
    """Stream a multipart video upload into the catalog."""
    logger.info("Processing upload request.")

    try:
        catalog = await catalog_config.resolve()
        if catalog is None:
            return _text(500, CONFIGURATION_MISSING)

        store = store_factory(catalog.container_name, catalog.connection_target)

        if not await store.container_exists():
            logger.error(
                "Storage container does not exist",
                extra={"container": catalog.container_name},
            )
            return _text(404, CONTAINER_MISSING)

    except Exception as e:
        logger.error(f"Failed to prepare upload target: {e}", exc_info=True)
        return _unexpected(e)

    content_type = request.headers.get("content-type")
    if not content_type or "multipart/form-data" not in content_type.lower():
        return _text(400, INVALID_CONTENT_TYPE)

    policy = catalog.upload_policy()
    outcome = await ingest_upload(
        request.stream(), parse_boundary(content_type), policy, store
    )
    return _outcome_response(outcome, policy)


def _outcome_response(outcome: IngestOutcome, policy: UploadPolicy) -> PlainTextResponse:
    """Map an ingestion outcome to a plain-text response."""
    if outcome.status == IngestStatus.COMMITTED:
        return _text(200, UPLOAD_SUCCEEDED)

    if outcome.status == IngestStatus.REJECTED_POLICY:
        return _text(400, f"File size exceeds the {policy.max_upload_mb}MB limit.")

    if outcome.status == IngestStatus.REJECTED_FORMAT:
        if outcome.reason == MISSING_BOUNDARY:
            return _text(400, "Missing boundary in Content-Type header.")
        if outcome.reason == INVALID_FILE_TYPE:
            allowed = ", ".join(sorted(policy.allowed_extensions))
            return _text(400, f"Invalid file. Only {allowed} files are allowed.")
        return _text(400, "Malformed multipart body.")

    if outcome.status == IngestStatus.NO_CONTENT:
        return _text(400, "No valid file data in request.")

    return _text(500, "Failed to store file.")
