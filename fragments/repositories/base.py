"""Storage backend contract shared by every metadata and blob store."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional


class MetadataStore(ABC):
    """
    Serialized fragment metadata keyed by (owner_id, fragment_id).
    """

    @abstractmethod
    def put(self, owner_id: str, fragment_id: str, metadata: str) -> None:
        ...

    @abstractmethod
    def get(self, owner_id: str, fragment_id: str) -> Optional[str]:
        ...

    @abstractmethod
    def query(self, owner_id: str) -> List[str]:
        """
        Return every serialized metadata record stored for ``owner_id``.
        """
        ...

    @abstractmethod
    def delete(self, owner_id: str, fragment_id: str) -> None:
        ...


class BlobStore(ABC):
    """
    Raw fragment payloads keyed by (owner_id, fragment_id).
    """

    @abstractmethod
    def put(self, owner_id: str, fragment_id: str, data: bytes) -> None:
        ...

    @abstractmethod
    def get(self, owner_id: str, fragment_id: str) -> Optional[bytes]:
        ...

    @abstractmethod
    def delete(self, owner_id: str, fragment_id: str) -> None:
        ...


@dataclass(frozen=True)
class StorageBackend:
    """
    The metadata and blob stores a fragment is persisted to.

    The two stores share only the (owner_id, fragment_id) key; nothing links
    them transactionally.
    """
    name: str
    metadata: MetadataStore
    blobs: BlobStore
