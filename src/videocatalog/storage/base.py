"""Abstract object store interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import AsyncIterator, Optional


@dataclass(frozen=True)
class ObjectInfo:
    """Name and size of a stored object."""

    name: str
    size: Optional[int] = None


class WriteSink(ABC):
    """Destination for one object's bytes.

    Nothing is visible in the store until ``commit`` succeeds. After
    ``abort`` or a failed ``commit`` the object is absent (or unchanged if
    it existed before).
    """

    @abstractmethod
    async def write(self, data: bytes) -> None:
        """Append a chunk to the pending object."""
        pass

    @abstractmethod
    async def commit(self) -> int:
        """Publish the object and return its size in bytes.

        Raises:
            WriteFailed: If the object could not be published
        """
        pass

    @abstractmethod
    async def abort(self) -> None:
        """Discard the pending object. Safe to call more than once."""
        pass


class ObjectStore(ABC):
    """Abstract base class for container-scoped object stores."""

    def __init__(self, container_name: str):
        self.container_name = container_name

    @abstractmethod
    async def container_exists(self) -> bool:
        """Check whether the container exists."""
        pass

    @abstractmethod
    def list_objects(self) -> AsyncIterator[ObjectInfo]:
        """Enumerate objects in the container.

        Each call starts a new, single-pass enumeration. Order is not
        guaranteed.

        Raises:
            ContainerNotFound: If the container does not exist
            StorageUnavailable: If the store cannot be reached
        """
        pass

    @abstractmethod
    async def open_write_sink(
        self, object_name: str, content_type: str = "application/octet-stream"
    ) -> WriteSink:
        """Open a sink that replaces ``object_name`` on commit.

        Raises:
            StorageError: If the sink cannot be opened
        """
        pass

    @abstractmethod
    def get_backend_name(self) -> str:
        """Return backend identifier."""
        pass
