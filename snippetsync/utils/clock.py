# snippetsync/utils/clock.py

from datetime import datetime, timezone


class SystemClock:
    """Wall clock returning timezone-aware UTC datetimes."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)
