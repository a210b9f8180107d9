"""Utility helper functions for the Fragments service."""

import uuid
from datetime import datetime, timezone


def generate_uuid() -> str:
    """
    Generate a new UUID4 string.

    Returns:
        UUID4 string
    """
    return str(uuid.uuid4())


def get_current_timestamp() -> str:
    """
    Get the current UTC time as an ISO-8601 string.

    Returns:
        Timestamp with millisecond precision and a "Z" suffix,
        e.g. "2024-01-01T12:00:00.000Z"
    """
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")
