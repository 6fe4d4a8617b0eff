"""
Datetime utility functions.
Court timestamps are stored as epoch milliseconds (UTC).
"""

from datetime import datetime
from typing import Optional
import pytz


def utcnow() -> datetime:
    """
    Get current UTC datetime using pytz.UTC.

    Returns:
        Current UTC datetime with pytz timezone information
    """
    return datetime.now(pytz.UTC)


def epoch_millis(moment: Optional[datetime] = None) -> int:
    """
    Convert a datetime to integer milliseconds since the Unix epoch.

    Args:
        moment: Timezone-aware datetime. Defaults to the current UTC time.
                Naive datetimes are treated as UTC.

    Returns:
        Milliseconds since 1970-01-01T00:00:00Z
    """
    if moment is None:
        moment = utcnow()
    elif moment.tzinfo is None:
        moment = pytz.UTC.localize(moment)
    return int(moment.timestamp() * 1000)
