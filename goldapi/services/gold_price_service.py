"""
금 시세 서비스

시세 등록은 세 단계로 나뉩니다.

1. 기존 시세 논리 삭제 + 새 시세 삽입 (커밋)
2. 삭제된 시세를 기준으로 지급된 보너스 거래 무효화 (별도 커밋)
3. 전일 시세가 있으면 BonusService 로 보너스 지급 (실패해도 시세는 유지)
"""

import logging
import math
from datetime import date, timedelta
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from goldapi.core.exceptions import (
    BaseAPIException,
    ConflictError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from goldapi.repositories.gold_price_repository import GoldPriceRepository
from goldapi.schemas.gold_price import (
    GoldPriceHistoryResponse,
    GoldPriceListResponse,
    GoldPriceResponse,
    GoldPriceSetResult,
    PriceExtreme,
    PriceHistoryPoint,
    PriceHistoryStatistics,
)
from goldapi.services.bonus_service import BonusService
from goldapi.utils.timezone_utils import get_ist_today

logger = logging.getLogger(__name__)

TRADING_DAYS_PER_YEAR = 252


class GoldPriceService:
    def __init__(self, db: Session):
        self.db = db
        self.gold_price_repo = GoldPriceRepository(db)
        self.bonus_service = BonusService(db)

    # ------------------------------------------------------------------
    # 시세 등록
    # ------------------------------------------------------------------
    def set_gold_price(self, price_date: date, price_per_gram) -> GoldPriceSetResult:
        """일별 시세 등록 (같은 날짜 시세가 있으면 대체)

        Args:
            price_date: 시세 일자
            price_per_gram: 그램당 가격 (> 0)

        Returns:
            GoldPriceSetResult: 새 시세, 대체된 시세 ID, 무효화 건수, 보너스 결과
        """
        price_value = Decimal(str(price_per_gram))
        if price_value <= 0:
            raise ValidationError(
                "Price per gram must be greater than zero",
                details={"price_per_gram": "must be > 0"},
            )

        new_price, existing_price_id = self._replace_price(price_date, price_value)

        reversed_count = 0
        if existing_price_id is not None:
            reversed_count = self._reverse_replaced_price(existing_price_id)

        bonus = None
        bonus_error = None
        previous_day_price = self.gold_price_repo.get_active_by_date(
            price_date - timedelta(days=1)
        )
        if previous_day_price is not None:
            try:
                bonus = self.bonus_service.calculate_and_add_bonus_points(
                    new_price, previous_day_price
                )
            except BaseAPIException as e:
                bonus_error = e.message
                logger.error(
                    f"Bonus calculation failed for gold price {new_price.id} ({price_date}): {e.message}"
                )
        else:
            logger.info(f"No gold price for {price_date - timedelta(days=1)}, skipping bonus")

        return GoldPriceSetResult(
            price=GoldPriceResponse.model_validate(new_price),
            replaced_price_id=existing_price_id,
            reversed_transactions=reversed_count,
            bonus=bonus,
            bonus_error=bonus_error,
        )

    def _replace_price(self, price_date: date, price_value: Decimal):
        """1단계: 기존 시세 논리 삭제 후 새 시세 삽입"""
        try:
            existing = self.gold_price_repo.get_active_by_date(price_date, for_update=True)
            existing_price_id = None
            if existing is not None:
                existing_price_id = existing.id
                self.gold_price_repo.mark_deleted(existing)

            new_price = self.gold_price_repo.add(
                commit=False, date=price_date, price_per_gram=price_value
            )
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"Concurrent gold price update for {price_date}: {str(e)}")
            raise ConflictError(f"Gold price for {price_date} was updated concurrently")
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to set gold price for {price_date}: {str(e)}")
            raise PersistenceError(f"Failed to set gold price: {str(e)}")

        if existing_price_id is not None:
            logger.info(
                f"Gold price {existing_price_id} for {price_date} replaced by {new_price.id}"
            )
        else:
            logger.info(f"Gold price {new_price.id} recorded for {price_date}: {price_value}")
        return new_price, existing_price_id

    def _reverse_replaced_price(self, price_id: int) -> int:
        """2단계: 대체된 시세 기준 보너스 무효화 (별도 트랜잭션)"""
        try:
            count = self.bonus_service.reverse_price_bonus(price_id)
            self.db.commit()
            return count
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to reverse bonus for gold price {price_id}: {str(e)}")
            raise PersistenceError(f"Failed to reverse bonus transactions: {str(e)}")

    def delete_gold_price(self, price_id: int) -> int:
        """시세 논리 삭제 + 해당 시세 기준 보너스 무효화

        Returns:
            int: 무효화된 거래 수
        """
        price = self.gold_price_repo.get_model(price_id)
        if price is None:
            raise NotFoundError(f"Gold price {price_id} not found")

        try:
            self.gold_price_repo.mark_deleted(price)
            count = self.bonus_service.reverse_price_bonus(price_id)
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to delete gold price {price_id}: {str(e)}")
            raise PersistenceError(f"Failed to delete gold price: {str(e)}")

        logger.info(f"Gold price {price_id} deleted, {count} bonus transactions reversed")
        return count

    # ------------------------------------------------------------------
    # 조회
    # ------------------------------------------------------------------
    def get_current_price(self) -> GoldPriceResponse:
        price = self.gold_price_repo.get_latest()
        if price is None:
            raise NotFoundError("No gold price available")
        return GoldPriceResponse.model_validate(price)

    def get_price_by_date(self, price_date: date) -> GoldPriceResponse:
        price = self.gold_price_repo.get_active_by_date(price_date)
        if price is None:
            raise NotFoundError(f"Gold price for {price_date} not found")
        return GoldPriceResponse.model_validate(price)

    def list_gold_prices(self, limit: int = 50, offset: int = 0) -> GoldPriceListResponse:
        if limit > 100:
            limit = 100
        prices, total = self.gold_price_repo.list_paginated(limit=limit, offset=offset)
        return GoldPriceListResponse(
            prices=prices,
            total_count=total,
            has_next=offset + len(prices) < total,
            limit=limit,
            offset=offset,
        )

    def get_price_history(self, days: int = 30) -> GoldPriceHistoryResponse:
        """최근 N일 시세 추이 (빈 날짜는 선형 보간)"""
        if days < 1 or days > 365:
            raise ValidationError("days must be between 1 and 365", details={"days": days})

        end = get_ist_today()
        start = end - timedelta(days=days - 1)
        prices = self.gold_price_repo.list_between(start, end)
        known: Dict[date, float] = {p.date: float(p.price_per_gram) for p in prices}

        history = build_price_history(start, end, known)
        statistics = calculate_statistics(history) if history else None
        return GoldPriceHistoryResponse(history=history, statistics=statistics)


def _interpolate(
    day: date,
    previous: Optional[PriceHistoryPoint],
    next_day: Optional[date],
    next_price: Optional[float],
) -> Optional[float]:
    if previous is not None and next_day is not None:
        span = (next_day - previous.date).days
        ratio = (day - previous.date).days / span
        return round(previous.price_per_gram + (next_price - previous.price_per_gram) * ratio, 2)
    if previous is not None:
        return previous.price_per_gram
    if next_day is not None:
        return next_price
    return None


def build_price_history(
    start: date, end: date, known: Dict[date, float]
) -> List[PriceHistoryPoint]:
    known_days = sorted(known)
    history: List[PriceHistoryPoint] = []

    day = start
    while day <= end:
        previous = history[-1] if history else None
        if day in known:
            price = known[day]
            interpolated = False
        else:
            next_day = next((d for d in known_days if d > day), None)
            price = _interpolate(
                day, previous, next_day, known[next_day] if next_day else None
            )
            interpolated = True

        if price is not None:
            if previous is None:
                change = 0.0
                change_percentage = 0.0
            else:
                change = round(price - previous.price_per_gram, 2)
                change_percentage = (
                    round(change / previous.price_per_gram * 100, 2)
                    if previous.price_per_gram
                    else 0.0
                )

            if change > 0:
                trend = "INCREASE"
            elif change < 0:
                trend = "DECREASE"
            else:
                trend = "NO_CHANGE"

            history.append(
                PriceHistoryPoint(
                    date=day,
                    price_per_gram=price,
                    trend=trend,
                    change=change,
                    change_percentage=change_percentage,
                    is_interpolated=interpolated,
                )
            )
        day += timedelta(days=1)

    return history


def _moving_average(values: List[float], window: int) -> Optional[float]:
    if len(values) < window:
        return None
    return round(sum(values[-window:]) / window, 2)


def calculate_statistics(history: List[PriceHistoryPoint]) -> PriceHistoryStatistics:
    prices = [point.price_per_gram for point in history]
    count = len(prices)

    lowest = min(history, key=lambda p: p.price_per_gram)
    highest = max(history, key=lambda p: p.price_per_gram)

    average = round(sum(prices) / count, 2)
    variance = sum((p - average) ** 2 for p in prices) / count

    ordered = sorted(prices)
    middle = count // 2
    median = ordered[middle] if count % 2 else (ordered[middle - 1] + ordered[middle]) / 2

    returns = [
        (prices[i] - prices[i - 1]) / prices[i - 1]
        for i in range(1, count)
        if prices[i - 1]
    ]
    if len(returns) > 1:
        volatility = math.sqrt(sum(r * r for r in returns) / (len(returns) - 1)) * math.sqrt(
            TRADING_DAYS_PER_YEAR
        )
    else:
        volatility = 0.0

    overall_change = round(prices[-1] - prices[0], 2)
    overall_change_percentage = (
        round(overall_change / prices[0] * 100, 2) if prices[0] else 0.0
    )

    trend_counts = {"INCREASE": 0, "DECREASE": 0, "NO_CHANGE": 0}
    for point in history:
        trend_counts[point.trend] += 1
    dominant_trend = max(trend_counts, key=lambda t: trend_counts[t])

    return PriceHistoryStatistics(
        total_days=count,
        current_price=prices[-1],
        lowest=PriceExtreme(price=lowest.price_per_gram, date=lowest.date),
        highest=PriceExtreme(price=highest.price_per_gram, date=highest.date),
        average_price=average,
        median_price=round(median, 2),
        standard_deviation=round(math.sqrt(variance), 2),
        volatility=round(volatility, 4),
        overall_change=overall_change,
        overall_change_percentage=overall_change_percentage,
        increase_days=trend_counts["INCREASE"],
        decrease_days=trend_counts["DECREASE"],
        no_change_days=trend_counts["NO_CHANGE"],
        dominant_trend=dominant_trend,
        moving_average_7d=_moving_average(prices, 7),
        moving_average_30d=_moving_average(prices, 30),
        interpolated_days=sum(1 for point in history if point.is_interpolated),
    )
