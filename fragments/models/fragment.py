"""Fragment entity: identity, type validation and lifecycle."""

import json
from typing import Any, Dict, List, Optional, Union

from common.logging_config import get_logger
from fragments.exceptions import (
    BackendError,
    FragmentNotFoundError,
    UnsupportedMediaTypeError,
    ValidationError,
)
from fragments.formats import is_supported_type, is_text_type, reachable_formats
from fragments.media_type import media_type_of
from fragments.repositories.base import StorageBackend
from fragments.utils import generate_uuid, get_current_timestamp

logger = get_logger(__name__)


class Fragment:
    """
    A stored content object: metadata in the backend's metadata store, payload
    in its blob store, both under (owner_id, id).

    ``id``, ``owner_id``, ``type`` and ``created`` never change after
    construction. ``size`` and ``updated`` change only through ``set_data``
    and ``save``.
    """

    def __init__(
        self,
        owner_id: Optional[str] = None,
        type: Optional[str] = None,
        id: Optional[str] = None,
        created: Optional[str] = None,
        updated: Optional[str] = None,
        size: Any = 0,
        backend: Optional[StorageBackend] = None,
    ):
        logger.debug(f"Initializing fragment [fragment_id={id}] [owner_id={owner_id}] type={type} size={size}")

        if not owner_id:
            raise ValidationError("fragment owner_id is required")

        if not type:
            raise ValidationError("fragment type is required")

        # integral floats (e.g. 3.0 from a JSON client) are normalized to int
        if isinstance(size, float) and size.is_integer():
            size = int(size)

        if isinstance(size, bool) or not isinstance(size, int):
            raise ValidationError(f"fragment size must be an integer, got {size!r}")

        if size < 0:
            raise ValidationError(f"fragment size cannot be negative, got {size}")

        if not self.is_supported_type(type):
            logger.warning(f"Fragment creation rejected: unsupported type {type}")
            raise UnsupportedMediaTypeError(f"unsupported fragment type: {type}")

        self._id = id or generate_uuid()
        self._owner_id = owner_id
        self._type = type
        self._created = created or get_current_timestamp()
        self.updated = updated or self._created
        self.size = size
        self._backend = backend

    @property
    def id(self) -> str:
        return self._id

    @property
    def owner_id(self) -> str:
        return self._owner_id

    @property
    def type(self) -> str:
        return self._type

    @property
    def created(self) -> str:
        return self._created

    @property
    def backend(self) -> StorageBackend:
        if self._backend is None:
            raise BackendError(
                "fragment is not bound to a storage backend",
                owner_id=self._owner_id,
                fragment_id=self._id,
            )
        return self._backend

    @classmethod
    def from_dict(cls, data: Dict[str, Any], backend: Optional[StorageBackend] = None) -> "Fragment":
        return cls(
            owner_id=data.get("ownerId"),
            type=data.get("type"),
            id=data.get("id"),
            created=data.get("created"),
            updated=data.get("updated"),
            size=data.get("size", 0),
            backend=backend,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "ownerId": self.owner_id,
            "created": self.created,
            "updated": self.updated,
            "type": self.type,
            "size": self.size,
        }

    def serialize(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def deserialize(
        cls,
        serialized: str,
        backend: Optional[StorageBackend] = None,
        owner_id: Optional[str] = None,
        fragment_id: Optional[str] = None,
    ) -> "Fragment":
        """
        Rebuild a fragment from its stored metadata.

        Raises:
            BackendError: If the record is not valid JSON, not an object, or
                does not describe a valid fragment
        """
        corrupt = BackendError(
            "stored fragment metadata is corrupt",
            operation="deserialize",
            owner_id=owner_id,
            fragment_id=fragment_id,
        )

        try:
            data = json.loads(serialized)
        except (TypeError, json.JSONDecodeError) as e:
            raise corrupt from e

        if not isinstance(data, dict):
            logger.error(f"Stored metadata is not an object [owner_id={owner_id}] [fragment_id={fragment_id}]")
            raise corrupt

        try:
            return cls.from_dict(data, backend=backend)
        except ValidationError as e:
            logger.error(f"Stored metadata is invalid [owner_id={owner_id}] [fragment_id={fragment_id}]: {e}")
            raise corrupt from e

    @classmethod
    def find_all_for_owner(
        cls,
        backend: StorageBackend,
        owner_id: str,
        expand: bool = False,
    ) -> Union[List[str], List["Fragment"]]:
        """
        List an owner's fragments.

        Args:
            backend: Storage backend to read from
            owner_id: Owner partition key
            expand: Return hydrated fragments instead of ids

        Returns:
            Fragment ids, or Fragment instances when ``expand`` is set. Empty
            when the owner has none.
        """
        logger.debug(f"Fetching fragments by owner [owner_id={owner_id}] expand={expand}")

        fragments = [
            cls.deserialize(record, backend=backend, owner_id=owner_id)
            for record in backend.metadata.query(owner_id)
        ]

        if not fragments:
            logger.info(f"No fragments found for owner [owner_id={owner_id}]")

        if expand:
            return fragments
        return [fragment.id for fragment in fragments]

    @classmethod
    def find_by_id(cls, backend: StorageBackend, owner_id: str, fragment_id: str) -> "Fragment":
        """
        Load a fragment's metadata.

        Raises:
            FragmentNotFoundError: If ``owner_id`` has no fragment ``fragment_id``
        """
        logger.debug(f"Fetching fragment [owner_id={owner_id}] [fragment_id={fragment_id}]")

        serialized = backend.metadata.get(owner_id, fragment_id)
        if serialized is None:
            logger.warning(f"Fragment not found [owner_id={owner_id}] [fragment_id={fragment_id}]")
            raise FragmentNotFoundError(f"Fragment {fragment_id} not found")

        return cls.deserialize(serialized, backend=backend, owner_id=owner_id, fragment_id=fragment_id)

    @staticmethod
    def delete(backend: StorageBackend, owner_id: str, fragment_id: str) -> None:
        """
        Remove a fragment's metadata and then its data.

        The two removals are independent; if the second fails the first is
        not undone.

        Raises:
            BackendError: If either removal fails
        """
        logger.debug(f"Deleting fragment [owner_id={owner_id}] [fragment_id={fragment_id}]")

        try:
            backend.metadata.delete(owner_id, fragment_id)
            backend.blobs.delete(owner_id, fragment_id)
        except Exception as e:
            logger.error(
                f"Error deleting fragment [owner_id={owner_id}] [fragment_id={fragment_id}]: {e}",
                exc_info=True,
            )
            raise BackendError(
                "unable to delete fragment",
                operation="delete",
                owner_id=owner_id,
                fragment_id=fragment_id,
            ) from e

        logger.info(f"Fragment deleted [owner_id={owner_id}] [fragment_id={fragment_id}]")

    def save(self) -> None:
        """
        Persist the current metadata, refreshing ``updated``.
        """
        self.updated = get_current_timestamp()
        self.backend.metadata.put(self.owner_id, self.id, self.serialize())

    def get_data(self) -> bytes:
        """
        Read this fragment's payload.

        Raises:
            FragmentNotFoundError: If metadata exists but the payload does not
        """
        data = self.backend.blobs.get(self.owner_id, self.id)
        if data is None:
            logger.warning(f"Fragment data missing for existing metadata [owner_id={self.owner_id}] [fragment_id={self.id}]")
            raise FragmentNotFoundError(f"Fragment {self.id} has no data")
        return data

    def set_data(self, data: bytes) -> None:
        """
        Replace this fragment's payload.

        The payload is written before the refreshed metadata, so a failure in
        between leaves the previous metadata pointing at the new payload.

        Raises:
            ValidationError: If ``data`` is not a bytes buffer
        """
        if not isinstance(data, (bytes, bytearray)):
            raise ValidationError("Cannot set data - data must be a bytes buffer")

        data = bytes(data)
        logger.debug(f"Setting fragment data [owner_id={self.owner_id}] [fragment_id={self.id}] size={len(data)}")

        self.size = len(data)
        self.updated = get_current_timestamp()
        self.backend.blobs.put(self.owner_id, self.id, data)
        self.save()

    @property
    def mime_type(self) -> Optional[str]:
        """
        The type without parameters: "text/html; charset=utf-8" -> "text/html".

        None if ``type`` cannot be parsed.
        """
        mime_type = media_type_of(self.type)
        if mime_type is None:
            logger.error(f"Failed to parse fragment type {self.type!r} [fragment_id={self.id}]")
        return mime_type

    @property
    def is_text(self) -> bool:
        return is_text_type(self.mime_type)

    @property
    def formats(self) -> List[str]:
        mime_type = self.mime_type
        if mime_type is None:
            return []
        return reachable_formats(mime_type)

    @staticmethod
    def is_supported_type(value: Optional[str]) -> bool:
        return is_supported_type(value)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Fragment):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return f"Fragment(id={self.id!r}, owner_id={self.owner_id!r}, type={self.type!r}, size={self.size})"
