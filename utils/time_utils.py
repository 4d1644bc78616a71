"""
utils/time_utils.py

Purpose: Time and expiry helpers

- Epoch-millisecond timestamps used in stored documents
- Session expiry calculations
"""

import time
from datetime import datetime, timedelta


def now_ms() -> int:
    """
    Current time as epoch milliseconds (createdAt, lastLogin, bannedAt).
    """
    return int(time.time() * 1000)


def session_expiry(ttl_days: int) -> datetime:
    """
    Absolute expiry for a new session (TTL index field).
    """
    return datetime.utcnow() + timedelta(days=ttl_days)


def is_older_than(started_at: datetime, minutes: int) -> bool:
    """
    Checks if something started more than ``minutes`` ago.
    """
    if not started_at:
        return True
    return datetime.utcnow() - started_at > timedelta(minutes=minutes)
