"""FastAPI dependencies for catalog routes."""

from functools import lru_cache
from typing import Callable

from videocatalog.catalog.config import CatalogConfig
from videocatalog.core.config import settings
from videocatalog.storage.base import ObjectStore
from videocatalog.storage.factory import get_object_store
from videocatalog.vault.factory import get_secret_resolver

StoreFactory = Callable[[str, str], ObjectStore]


@lru_cache(maxsize=1)
def get_catalog_config() -> CatalogConfig:
    """Process-wide catalog config built from static settings."""
    return CatalogConfig.from_settings(settings, get_secret_resolver(settings))


def get_store_factory() -> StoreFactory:
    """Factory that binds a container and connection target to a store."""
    return get_object_store
