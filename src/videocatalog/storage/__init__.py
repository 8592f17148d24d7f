"""Object store backends for the video catalog."""

from videocatalog.storage.base import ObjectInfo, ObjectStore, WriteSink
from videocatalog.storage.factory import get_object_store

__all__ = ["ObjectInfo", "ObjectStore", "WriteSink", "get_object_store"]
