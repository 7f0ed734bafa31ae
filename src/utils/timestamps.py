"""Timestamp helpers shared by the HTTP routes, error payloads and room roster."""

from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def utc_timestamp(moment: Optional[datetime] = None) -> str:
    """
    Format a moment as ISO-8601 UTC with millisecond precision, e.g. ``2024-01-01T12:00:00.000Z``.

    Args:
        moment: Time to format; now when None. Aware values are converted to UTC.
    """
    moment = utc_now() if moment is None else moment.astimezone(timezone.utc)
    return moment.strftime('%Y-%m-%dT%H:%M:%S.') + f"{moment.microsecond // 1000:03d}Z"
