"""Stores fragment payloads as files on local disk."""

from pathlib import Path
from typing import Optional
from urllib.parse import quote

from common.logging_config import get_logger
from fragments.exceptions import BackendError
from fragments.repositories.base import BlobStore

logger = get_logger(__name__)


class FilesystemBlobStore(BlobStore):
    """
    One file per fragment at ``<root>/<owner_id>/<fragment_id>.bin``.

    Key components are percent-encoded so an opaque owner or fragment id can
    never escape the storage root.
    """

    def __init__(self, root: str):
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)
        logger.info(f"Filesystem blob store initialized at {self.root}")

    @staticmethod
    def _encode(component: str) -> str:
        # "." and ".." are valid ids but must not act as path segments
        return quote(component, safe="").replace(".", "%2E")

    def get_blob_path(self, owner_id: str, fragment_id: str) -> Path:
        return self.root / self._encode(owner_id) / f"{self._encode(fragment_id)}.bin"

    def put(self, owner_id: str, fragment_id: str, data: bytes) -> None:
        filepath = self.get_blob_path(owner_id, fragment_id)
        try:
            filepath.parent.mkdir(parents=True, exist_ok=True)
            filepath.write_bytes(data)
        except OSError as e:
            logger.error(f"Failed to write blob {filepath}: {e}", exc_info=True)
            raise BackendError(
                "unable to write fragment data",
                operation="put_data",
                owner_id=owner_id,
                fragment_id=fragment_id,
            ) from e

    def get(self, owner_id: str, fragment_id: str) -> Optional[bytes]:
        filepath = self.get_blob_path(owner_id, fragment_id)
        try:
            return filepath.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.error(f"Failed to read blob {filepath}: {e}", exc_info=True)
            raise BackendError(
                "unable to read fragment data",
                operation="get_data",
                owner_id=owner_id,
                fragment_id=fragment_id,
            ) from e

    def delete(self, owner_id: str, fragment_id: str) -> None:
        filepath = self.get_blob_path(owner_id, fragment_id)
        try:
            filepath.unlink(missing_ok=True)
        except OSError as e:
            logger.error(f"Failed to delete blob {filepath}: {e}", exc_info=True)
            raise BackendError(
                "unable to delete fragment data",
                operation="delete_data",
                owner_id=owner_id,
                fragment_id=fragment_id,
            ) from e
