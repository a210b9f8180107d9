"""In-process ephemeral stores used for development and tests."""

from typing import Dict, Generic, List, Optional, TypeVar

from common.logging_config import get_logger
from fragments.exceptions import BackendError
from fragments.repositories.base import BlobStore, MetadataStore

logger = get_logger(__name__)

V = TypeVar("V")


def _validate_keys(operation: str, owner_id: str, fragment_id: Optional[str] = None) -> None:
    if not isinstance(owner_id, str) or not owner_id:
        raise BackendError("owner_id must be a non-empty string", operation=operation)
    if fragment_id is not None and (not isinstance(fragment_id, str) or not fragment_id):
        raise BackendError(
            "fragment_id must be a non-empty string",
            operation=operation,
            owner_id=owner_id,
        )


class MemoryDB(Generic[V]):
    """
    Two-level key/value dictionary: owner_id -> fragment_id -> value.

    Iteration order within an owner follows insertion order.
    """

    def __init__(self):
        self._db: Dict[str, Dict[str, V]] = {}

    def put(self, owner_id: str, fragment_id: str, value: V) -> None:
        _validate_keys("put", owner_id, fragment_id)
        self._db.setdefault(owner_id, {})[fragment_id] = value

    def get(self, owner_id: str, fragment_id: str) -> Optional[V]:
        _validate_keys("get", owner_id, fragment_id)
        return self._db.get(owner_id, {}).get(fragment_id)

    def query(self, owner_id: str) -> List[V]:
        _validate_keys("query", owner_id)
        return list(self._db.get(owner_id, {}).values())

    def delete(self, owner_id: str, fragment_id: str) -> None:
        _validate_keys("delete", owner_id, fragment_id)
        owner_entries = self._db.get(owner_id)
        if owner_entries is None:
            return
        owner_entries.pop(fragment_id, None)
        if not owner_entries:
            del self._db[owner_id]


class MemoryMetadataStore(MetadataStore):
    def __init__(self):
        self._db: MemoryDB[str] = MemoryDB()

    def put(self, owner_id: str, fragment_id: str, metadata: str) -> None:
        if not isinstance(metadata, str):
            raise BackendError(
                "metadata must be serialized before storing",
                operation="put_metadata",
                owner_id=owner_id,
                fragment_id=fragment_id,
            )
        self._db.put(owner_id, fragment_id, metadata)

    def get(self, owner_id: str, fragment_id: str) -> Optional[str]:
        return self._db.get(owner_id, fragment_id)

    def query(self, owner_id: str) -> List[str]:
        return self._db.query(owner_id)

    def delete(self, owner_id: str, fragment_id: str) -> None:
        self._db.delete(owner_id, fragment_id)


class MemoryBlobStore(BlobStore):
    def __init__(self):
        self._db: MemoryDB[bytes] = MemoryDB()

    def put(self, owner_id: str, fragment_id: str, data: bytes) -> None:
        # Copy so later mutation of a caller's bytearray is not visible here.
        self._db.put(owner_id, fragment_id, bytes(data))
        logger.debug(f"Stored {len(data)} bytes in memory [owner_id={owner_id}] [fragment_id={fragment_id}]")

    def get(self, owner_id: str, fragment_id: str) -> Optional[bytes]:
        return self._db.get(owner_id, fragment_id)

    def delete(self, owner_id: str, fragment_id: str) -> None:
        self._db.delete(owner_id, fragment_id)
