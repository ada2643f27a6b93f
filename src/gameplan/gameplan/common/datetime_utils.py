from __future__ import annotations

from datetime import datetime, timezone


def date_key(moment: datetime) -> str:
    """Calendar key (YYYY-MM-DD) used by attendance and streak state."""
    return moment.date().isoformat()


def now_utc() -> datetime:
    """Current UTC time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(timezone.utc)
