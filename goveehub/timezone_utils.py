"""
Timezone utilities.

Device timestamps arrive from several transports; everything is stored and
compared as timezone-aware UTC so that staleness checks never mix naive and
aware datetimes.
"""

import pytz
from datetime import datetime
from typing import Optional
import logging

log = logging.getLogger(__name__)

UTC = pytz.UTC


def now_utc() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


def to_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Normalize a datetime to aware UTC.

    Naive datetimes are assumed to already be in UTC; aware datetimes are
    converted.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return UTC.localize(dt)
    return dt.astimezone(UTC)
