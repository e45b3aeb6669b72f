"""
날짜 계산 유틸리티
"""

import calendar
from datetime import date


def add_months(start: date, months: int) -> date:
    """시작일에 개월 수를 더한 날짜 (말일 초과 시 해당 월 말일로 보정)"""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(start.day, last_day))
