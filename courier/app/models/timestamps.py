"""
Timestamp helpers shared by the models and lifecycles.
"""

from datetime import datetime, timezone
from typing import Optional, Union


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_aware(value: Union[datetime, str, None]) -> Optional[datetime]:
    """
    Normalise a timestamp to aware UTC.

    Accepts ISO-8601 strings (including a trailing ``Z``) and naive datetimes,
    which SQLite hands back for timezone-aware columns; both are read as UTC.
    Values carrying another offset are converted to UTC before storage.
    """
    if value is None:
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
