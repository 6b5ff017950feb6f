"""
Common/Shared Fixtures

Base factories and generators used across multiple services.
"""
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional


def make_user_id() -> str:
    """Generate a unique user ID"""
    return f"usr_test_{uuid.uuid4().hex[:12]}"


def make_admin_id() -> str:
    """Generate a unique administrator ID"""
    return f"adm_test_{uuid.uuid4().hex[:12]}"


def make_courier_id() -> str:
    """Generate a unique delivery person ID"""
    return f"crr_test_{uuid.uuid4().hex[:12]}"


def make_timestamp(offset_minutes: int = 0) -> datetime:
    """Fixed UTC timestamp, optionally shifted"""
    return datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc) + timedelta(minutes=offset_minutes)


class FixedClock:
    """Clock that only moves when told to"""

    def __init__(self, start: Optional[datetime] = None):
        self.current = start or make_timestamp()

    def now(self) -> datetime:
        return self.current

    def advance(self, minutes: int = 1) -> datetime:
        self.current = self.current + timedelta(minutes=minutes)
        return self.current


class TickingClock(FixedClock):
    """Clock that advances one minute on every read"""

    def now(self) -> datetime:
        return self.advance(1)
