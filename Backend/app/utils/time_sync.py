# Backend/app/utils/time_sync.py
"""
Server time utilities
"""
from datetime import datetime, timezone

def utc_now():
    """
    Current UTC time as a naive datetime (microsecond precision)

    Queue ordering relies on the microseconds, so this is used instead of the
    database's now(), which is frozen for the whole transaction.

    Returns:
        datetime: naive UTC timestamp
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)
