"""Audit logging subsystem for progdedupe.

Main Components
---------------
- AuditLogger: JSONL event logger
- generate_session_id: session identifiers for log correlation
"""

from progdedupe.audit.helpers import generate_session_id, get_package_version
from progdedupe.audit.logger import AuditLogger
from progdedupe.audit.models import EventType, LogEvent
from progdedupe.utils import get_iso_timestamp

__all__ = [
    "AuditLogger",
    "EventType",
    "LogEvent",
    "generate_session_id",
    "get_package_version",
    "get_iso_timestamp",
]
