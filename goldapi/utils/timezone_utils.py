"""
타임존 유틸리티

인도 표준시(IST) 기준 시간 처리를 위한 유틸리티 함수들.
비즈니스 날짜(상환 기간, 만기일, 금 시세 일자)는 모두 IST 기준으로 판단합니다.
"""

from datetime import date, datetime, time, timezone, timedelta
from typing import Optional, Tuple

# 인도 표준시 (IST = UTC+5:30)
IST = timezone(timedelta(hours=5, minutes=30))


def get_ist_now() -> datetime:
    """현재 IST 시간을 반환합니다."""
    return datetime.now(IST)


def get_ist_today() -> date:
    """현재 IST 날짜를 반환합니다."""
    return get_ist_now().date()


def to_ist(dt: datetime) -> datetime:
    """다른 타임존의 datetime을 IST로 변환합니다 (naive 는 UTC로 간주)."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(IST)


def ist_day_range(
    start_date: Optional[date], end_date: Optional[date]
) -> Tuple[Optional[datetime], Optional[datetime]]:
    """IST 일자 범위를 [start 00:00, end+1 00:00) 경계로 변환 (UTC datetime 반환)"""
    start = (
        datetime.combine(start_date, time.min, tzinfo=IST).astimezone(timezone.utc)
        if start_date
        else None
    )
    end = (
        datetime.combine(end_date + timedelta(days=1), time.min, tzinfo=IST).astimezone(
            timezone.utc
        )
        if end_date
        else None
    )
    return start, end
