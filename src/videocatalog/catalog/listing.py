"""Catalog listing."""

from videocatalog.models.catalog import CatalogEntry
from videocatalog.storage.base import ObjectStore


async def list_catalog(store: ObjectStore) -> list[CatalogEntry]:
    """Report every object in the store's container, in store order."""
    return [
        CatalogEntry(file_name=info.name, file_size=info.size or 0)
        async for info in store.list_objects()
    ]
