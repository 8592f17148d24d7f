"""Catalog data models."""

from pydantic import BaseModel, ConfigDict, Field


class CatalogEntry(BaseModel):
    """One stored video as reported by the listing endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    file_name: str = Field(alias="FileName")
    file_size: int = Field(default=0, ge=0, alias="FileSize")
