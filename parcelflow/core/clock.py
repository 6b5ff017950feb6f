"""Clock abstraction so timestamps can be pinned in tests"""

from datetime import datetime, timezone
from typing import Protocol, runtime_checkable


@runtime_checkable
class ClockProtocol(Protocol):
    """Source of the current time"""

    def now(self) -> datetime:
        """Return the current timezone-aware time"""
        ...


class SystemClock:
    """Wall clock in UTC"""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)
