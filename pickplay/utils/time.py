"""Time helpers for UTC timestamps and reporting windows."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def window_start(days: int, now: datetime | None = None) -> datetime:
    """Return the start of a trailing ``days``-long window ending at ``now``.

    Audit timestamps are stored in UTC, so the boundary is computed in UTC too.
    """
    return (now or utcnow()) - timedelta(days=days)
