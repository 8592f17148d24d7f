"""Streaming multipart upload ingestion."""

from videocatalog.ingest.multipart import MultipartReader, UploadSection, parse_boundary
from videocatalog.ingest.pipeline import ingest_upload

__all__ = ["MultipartReader", "UploadSection", "ingest_upload", "parse_boundary"]
