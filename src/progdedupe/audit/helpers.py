"""Helper utilities for audit logging.

For timestamp and hashing utilities, see progdedupe.utils.
"""

import importlib.metadata
import secrets
from datetime import UTC, datetime

__all__ = [
    "generate_session_id",
    "get_package_version",
]


def generate_session_id() -> str:
    """Generate unique session identifier.

    Returns
    -------
    str
        Session ID in format: ISO8601_timestamp__random_suffix.
    """
    timestamp = datetime.now(UTC).isoformat().replace("+00:00", "Z")
    suffix = secrets.token_hex(4)
    return f"{timestamp}__{suffix}"


def get_package_version() -> str:
    """Get progdedupe package version.

    Returns
    -------
    str
        Package version or "unknown".
    """
    try:
        return importlib.metadata.version("progdedupe")
    except importlib.metadata.PackageNotFoundError:
        return "unknown"
