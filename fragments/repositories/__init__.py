"""Storage backends for fragment metadata and data."""

from typing import Optional

from fragments import config
from fragments.exceptions import ConfigurationError
from fragments.repositories.base import BlobStore, MetadataStore, StorageBackend
from fragments.repositories.filesystem_blobs import FilesystemBlobStore
from fragments.repositories.memory import MemoryBlobStore, MemoryDB, MemoryMetadataStore
from fragments.repositories.s3_blobs import S3BlobStore
from fragments.repositories.sqlite_metadata import SqliteMetadataStore


def create_backend(
    name: Optional[str] = None,
    database_path: Optional[str] = None,
    blob_path: Optional[str] = None,
    s3_bucket: Optional[str] = None,
) -> StorageBackend:
    """
    Build the storage backend selected by configuration.

    Args:
        name: "memory", "sqlite" or "s3". Defaults to FRAGMENTS_BACKEND
        database_path: SQLite metadata path for the persistent backends
        blob_path: Blob directory for the "sqlite" backend
        s3_bucket: Bucket name for the "s3" backend

    Raises:
        ConfigurationError: For an unknown backend name or a missing S3 bucket
    """
    name = (name or config.FRAGMENTS_BACKEND).lower()

    if name == "memory":
        return StorageBackend(name, MemoryMetadataStore(), MemoryBlobStore())

    if name == "sqlite":
        return StorageBackend(
            name,
            SqliteMetadataStore(database_path or config.DATABASE_PATH),
            FilesystemBlobStore(blob_path or config.BLOB_STORAGE_PATH),
        )

    if name == "s3":
        bucket = s3_bucket or config.S3_BUCKET_NAME
        if not bucket:
            raise ConfigurationError("FRAGMENTS_S3_BUCKET is required for the s3 backend")
        return StorageBackend(
            name,
            SqliteMetadataStore(database_path or config.DATABASE_PATH),
            S3BlobStore(
                bucket,
                region_name=config.AWS_REGION,
                endpoint_url=config.S3_ENDPOINT_URL,
            ),
        )

    raise ConfigurationError(f"Unknown storage backend: {name}")


__all__ = [
    "BlobStore",
    "MetadataStore",
    "StorageBackend",
    "MemoryDB",
    "MemoryMetadataStore",
    "MemoryBlobStore",
    "SqliteMetadataStore",
    "FilesystemBlobStore",
    "S3BlobStore",
    "create_backend",
]
