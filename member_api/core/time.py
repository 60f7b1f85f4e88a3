"""Time helpers.

DB timestamps are kept naive (no tzinfo) but always in UTC so SQLite and
PostgreSQL rows compare the same way.
"""

from __future__ import annotations

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Naive UTC datetime (tzinfo stripped)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
