"""
타임존 유틸리티

원장은 모든 시각을 UTC aware datetime으로 다룬다.
SQLite는 tzinfo를 보존하지 않으므로 조회한 값은 ensure_utc로 정규화한다.
"""

from datetime import datetime, timedelta, timezone
from typing import Callable

Clock = Callable[[], datetime]

ONE_DAY = timedelta(days=1)


def utc_now() -> datetime:
    """현재 UTC 시간을 반환합니다."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """naive datetime은 UTC로 간주하고, aware datetime은 UTC로 변환합니다."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def whole_days_between(start: datetime, end: datetime) -> int:
    """start 부터 end 까지 경과한 완전한 일수 (음수면 0)"""
    delta = ensure_utc(end) - ensure_utc(start)
    if delta <= timedelta(0):
        return 0
    return delta // ONE_DAY
