"""Fresh identifier minting.

Imported records that must not collide with an existing record receive a
``<prefix>-<epoch milliseconds>`` id. When the timestamp is already taken
(two mints in the same millisecond, or a record imported from another
document minted at the same instant) a counter suffix is appended.
"""

import time
from collections.abc import Collection

__all__ = ["mint_id", "now_ms"]


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return time.time_ns() // 1_000_000


def mint_id(prefix: str, existing: Collection[str], timestamp_ms: int | None = None) -> str:
    """Mint an id distinct from every id in ``existing``.

    Parameters
    ----------
    prefix : str
        Collection prefix (``"fac"``, ``"CID"``, ``"lib"``).
    existing : Collection[str]
        Ids already in use.
    timestamp_ms : int | None, optional
        Timestamp to use; defaults to :func:`now_ms`.

    Returns
    -------
    str
        ``"<prefix>-<ms>"`` or ``"<prefix>-<ms>-<n>"`` with the smallest
        ``n >= 1`` that is free.

    Examples
    --------
    >>> mint_id("lib", {"lib-100"}, timestamp_ms=100)
    'lib-100-1'
    """
    stamp = now_ms() if timestamp_ms is None else timestamp_ms
    candidate = f"{prefix}-{stamp}"
    counter = 0
    while candidate in existing:
        counter += 1
        candidate = f"{prefix}-{stamp}-{counter}"
    return candidate
