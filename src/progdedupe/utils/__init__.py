"""Common utility functions for progdedupe."""

from progdedupe.utils.hashing import calculate_bytes_sha256, format_sha256
from progdedupe.utils.timestamps import get_iso_timestamp

__all__ = [
    "get_iso_timestamp",
    "calculate_bytes_sha256",
    "format_sha256",
]
