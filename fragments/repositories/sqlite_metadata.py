"""SQLite-backed fragment metadata store."""

import sqlite3
from typing import List, Optional

from common.logging_config import get_logger
from fragments.database import get_db_connection, init_database
from fragments.exceptions import BackendError
from fragments.repositories.base import MetadataStore

logger = get_logger(__name__)


class SqliteMetadataStore(MetadataStore):
    def __init__(self, database_path: str):
        self.database_path = database_path
        init_database(database_path)
        logger.info(f"SQLite metadata store initialized at {database_path}")

    def put(self, owner_id: str, fragment_id: str, metadata: str) -> None:
        try:
            with get_db_connection(self.database_path) as conn:
                cursor = conn.cursor()
                cursor.execute(
                    """
                    INSERT INTO fragments (owner_id, fragment_id, metadata)
                    VALUES (?, ?, ?)
                    ON CONFLICT(owner_id, fragment_id) DO UPDATE SET metadata = excluded.metadata
                    """,
                    (owner_id, fragment_id, metadata)
                )
                conn.commit()
        except sqlite3.Error as e:
            logger.error(f"Failed to write metadata [fragment_id={fragment_id}]: {e}", exc_info=True)
            raise BackendError(
                "unable to write fragment metadata",
                operation="put_metadata",
                owner_id=owner_id,
                fragment_id=fragment_id,
            ) from e

    def get(self, owner_id: str, fragment_id: str) -> Optional[str]:
        try:
            with get_db_connection(self.database_path) as conn:
                cursor = conn.cursor()
                cursor.execute(
                    "SELECT metadata FROM fragments WHERE owner_id = ? AND fragment_id = ?",
                    (owner_id, fragment_id)
                )
                row = cursor.fetchone()
        except sqlite3.Error as e:
            logger.error(f"Failed to read metadata [fragment_id={fragment_id}]: {e}", exc_info=True)
            raise BackendError(
                "unable to read fragment metadata",
                operation="get_metadata",
                owner_id=owner_id,
                fragment_id=fragment_id,
            ) from e

        if row is None:
            return None
        return row["metadata"]

    def query(self, owner_id: str) -> List[str]:
        try:
            with get_db_connection(self.database_path) as conn:
                cursor = conn.cursor()
                cursor.execute(
                    "SELECT metadata FROM fragments WHERE owner_id = ? ORDER BY rowid",
                    (owner_id,)
                )
                rows = cursor.fetchall()
        except sqlite3.Error as e:
            logger.error(f"Failed to list metadata: {e}", exc_info=True)
            raise BackendError(
                "unable to list fragment metadata",
                operation="query_metadata",
                owner_id=owner_id,
            ) from e

        return [row["metadata"] for row in rows]

    def delete(self, owner_id: str, fragment_id: str) -> None:
        try:
            with get_db_connection(self.database_path) as conn:
                cursor = conn.cursor()
                cursor.execute(
                    "DELETE FROM fragments WHERE owner_id = ? AND fragment_id = ?",
                    (owner_id, fragment_id)
                )
                conn.commit()
        except sqlite3.Error as e:
            logger.error(f"Failed to delete metadata [fragment_id={fragment_id}]: {e}", exc_info=True)
            raise BackendError(
                "unable to delete fragment metadata",
                operation="delete_metadata",
                owner_id=owner_id,
                fragment_id=fragment_id,
            ) from e
