"""Time Utilities for UTC management"""

from datetime import date, datetime, timezone


def get_utc_now() -> datetime:
    """
    Naive UTC datetime, matching the TIMESTAMP WITHOUT TIME ZONE columns.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def get_utc_today() -> date:
    """Current UTC calendar date (default school registration date)"""
    return get_utc_now().date()
