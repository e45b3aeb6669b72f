"""
관리자 대시보드 / 기간 분석 서비스

- 대시보드: 전체 기간 집계
- 분석: [start_date, end_date] (IST 일자) 기간의 거래/상환 요청/신규 가입 집계
  가입자 수, 상품 수, 포인트/적립 금 잔액은 기간과 무관한 현재 값입니다.

모든 집계는 논리 삭제된 행을 제외합니다.
"""

import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from goldapi.core.exceptions import ValidationError
from goldapi.models.redemption import RedemptionStatus, RedemptionType
from goldapi.models.transaction import TransactionType
from goldapi.models.user_scheme import UserSchemeStatus
from goldapi.repositories.gold_price_repository import GoldPriceRepository
from goldapi.repositories.redemption_repository import RedemptionRepository
from goldapi.repositories.scheme_repository import SchemeRepository
from goldapi.repositories.transaction_repository import TransactionRepository
from goldapi.repositories.user_repository import UserRepository
from goldapi.repositories.user_scheme_repository import UserSchemeRepository
from goldapi.schemas.dashboard import (
    DashboardStats,
    GoldStats,
    RedemptionStats,
    TransactionStats,
    UserSchemeStats,
    UserStats,
)
from goldapi.utils.timezone_utils import get_ist_today, ist_day_range

logger = logging.getLogger(__name__)

DEFAULT_ANALYTICS_DAYS = 30


class DashboardService:
    def __init__(self, db: Session):
        self.db = db
        self.user_repo = UserRepository(db)
        self.scheme_repo = SchemeRepository(db)
        self.user_scheme_repo = UserSchemeRepository(db)
        self.transaction_repo = TransactionRepository(db)
        self.redemption_repo = RedemptionRepository(db)
        self.gold_price_repo = GoldPriceRepository(db)

    def get_dashboard_stats(self) -> DashboardStats:
        return self._collect(None, None)

    def get_analytics(
        self, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> DashboardStats:
        """기간 분석 - 생략 시 오늘(IST) 기준 최근 30일"""
        end_date = end_date or get_ist_today()
        start_date = start_date or end_date - timedelta(days=DEFAULT_ANALYTICS_DAYS - 1)
        if start_date > end_date:
            raise ValidationError(
                "start_date must be on or before end_date",
                details={"start_date": str(start_date), "end_date": str(end_date)},
            )
        logger.info(f"Building analytics for {start_date} ~ {end_date}")
        return self._collect(start_date, end_date)

    def _collect(
        self, start_date: Optional[date], end_date: Optional[date]
    ) -> DashboardStats:
        start, end = ist_day_range(start_date, end_date)

        active_users, inactive_users = self.user_repo.count_by_active()

        by_status = {status.value: 0 for status in UserSchemeStatus}
        by_status.update(self.user_scheme_repo.count_by_status(start_date, end_date))
        available_points, accrued_gold = self.user_scheme_repo.active_balances()

        latest_price = self.gold_price_repo.get_latest()

        redemption_by_status = {status.value: 0 for status in RedemptionStatus}
        redemption_by_status.update(self.redemption_repo.count_grouped("status", start, end))
        redemption_by_type = {request_type.value: 0 for request_type in RedemptionType}
        redemption_by_type.update(self.redemption_repo.count_grouped("type", start, end))

        return DashboardStats(
            period_start=start_date,
            period_end=end_date,
            user_stats=UserStats(
                total_users=active_users + inactive_users,
                active_users=active_users,
                inactive_users=inactive_users,
            ),
            total_schemes=self.scheme_repo.count(),
            user_scheme_stats=UserSchemeStats(
                total_user_schemes=sum(by_status.values()),
                by_status=by_status,
                available_points=available_points,
                accrued_gold_grams=float(accrued_gold),
            ),
            transaction_stats=self._transaction_stats(start, end),
            gold_stats=GoldStats(
                current_price=float(latest_price.price_per_gram) if latest_price else 0.0,
                last_updated=latest_price.date if latest_price else None,
            ),
            redemption_stats=RedemptionStats(
                total_requests=sum(redemption_by_status.values()),
                by_status=redemption_by_status,
                by_type=redemption_by_type,
                total_points_redeemed=self.redemption_repo.sum_approved_bonus_points(
                    start, end
                ),
            ),
        )

    def _transaction_stats(self, start, end) -> TransactionStats:
        stats = self.transaction_repo.stats_by_type(start, end)
        empty = {"count": 0, "amount": Decimal("0"), "gold_grams": Decimal("0"), "points": 0}
        deposit = stats.get(TransactionType.DEPOSIT.value, empty)
        withdrawal = stats.get(TransactionType.WITHDRAWAL.value, empty)

        by_type = {transaction_type: 0 for transaction_type in TransactionType.values()}
        by_type.update({key: row["count"] for key, row in stats.items()})

        return TransactionStats(
            total_transactions=sum(row["count"] for row in stats.values()),
            total_deposits=float(deposit["amount"]),
            total_withdrawals=float(withdrawal["amount"]),
            net_amount=float(deposit["amount"] - withdrawal["amount"]),
            net_gold_grams=float(deposit["gold_grams"] - withdrawal["gold_grams"]),
            total_points=sum(row["points"] for row in stats.values()),
            by_type=by_type,
        )
