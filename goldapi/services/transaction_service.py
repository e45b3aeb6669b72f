"""
거래 원장 서비스

post_transaction 은 순수 삽입만 수행합니다. 가입(UserScheme)의 포인트 캐시는 건드리지 않으므로,
호출자가 같은 DB 트랜잭션 안에서 캐시를 함께 갱신해야 합니다.
"""

import csv
import io
import logging
from collections import OrderedDict
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from goldapi.core.exceptions import BaseAPIException, NotFoundError, ValidationError
from goldapi.models.transaction import TransactionType
from goldapi.repositories.transaction_repository import TransactionRepository
from goldapi.repositories.user_scheme_repository import UserSchemeRepository
from goldapi.schemas.transaction import (
    TransactionListResponse,
    TransactionResponse,
    TransactionSummary,
)
from goldapi.utils.timezone_utils import get_ist_today, ist_day_range, to_ist

logger = logging.getLogger(__name__)

CSV_HEADER = [
    "Transaction ID",
    "Date",
    "Type",
    "Amount",
    "Gold Grams",
    "Points",
    "User Name",
    "Scheme Name",
    "User Scheme ID",
]


def _signed_movement(transaction_type: str, value: Decimal) -> Decimal:
    """입금은 +, 출금은 -, 그 외 유형은 금액/그램에 반영하지 않음"""
    if transaction_type == TransactionType.DEPOSIT.value:
        return value
    if transaction_type == TransactionType.WITHDRAWAL.value:
        return -value
    return Decimal("0")


class TransactionService:
    def __init__(self, db: Session):
        self.db = db
        self.transaction_repo = TransactionRepository(db)
        self.user_scheme_repo = UserSchemeRepository(db)

    def post_transaction(
        self,
        user_scheme_id: int,
        transaction_type: str,
        amount: Decimal = Decimal("0"),
        gold_grams: Decimal = Decimal("0"),
        points: int = 0,
        price_ref_id: Optional[int] = None,
        redemption_request_id: Optional[int] = None,
        description: Optional[str] = None,
        commit: bool = False,
    ) -> TransactionResponse:
        """거래 기록 (잔액 캐시는 변경하지 않음)

        Args:
            user_scheme_id: 가입 ID
            transaction_type: 거래 유형 (TransactionType 값)
            amount: 금액 (INR)
            gold_grams: 금 그램
            points: 포인트 변동량 (차감은 음수)
            price_ref_id: 보너스 산정 기준 시세 ID
            redemption_request_id: 연관 상환 요청 ID
            description: 설명
            commit: True면 즉시 커밋, 기본은 호출자 트랜잭션에 포함 (flush)

        Returns:
            TransactionResponse: 생성된 거래
        """
        if transaction_type not in TransactionType.values():
            raise ValidationError(
                f"Invalid transaction type: {transaction_type}",
                details={"transaction_type": f"must be one of {TransactionType.values()}"},
            )

        transaction = self.transaction_repo.create(
            commit=commit,
            user_scheme_id=user_scheme_id,
            transaction_type=transaction_type,
            amount=Decimal(str(amount)),
            gold_grams=Decimal(str(gold_grams)),
            points=int(points),
            price_ref_id=price_ref_id,
            redemption_request_id=redemption_request_id,
            description=description,
        )
        logger.debug(
            f"Posted {transaction_type} transaction for user scheme {user_scheme_id} (points={points})"
        )
        return transaction

    def get_summary(self, user_scheme_id: int) -> TransactionSummary:
        """가입 단위 거래 요약 - 삭제되지 않은 거래를 유형별로 누적"""
        if self.user_scheme_repo.get_model(user_scheme_id) is None:
            raise NotFoundError(f"User scheme {user_scheme_id} not found")

        total_amount = Decimal("0")
        total_gold = Decimal("0")
        total_points = 0
        count_by_type: Dict[str, int] = {}

        transactions = self.transaction_repo.find_by_user_scheme(user_scheme_id)
        for transaction in transactions:
            kind = transaction.transaction_type
            count_by_type[kind] = count_by_type.get(kind, 0) + 1
            total_amount += _signed_movement(kind, Decimal(transaction.amount or 0))
            total_gold += _signed_movement(kind, Decimal(transaction.gold_grams or 0))
            if kind == TransactionType.POINTS.value:
                total_points += transaction.points or 0

        return TransactionSummary(
            user_scheme_id=user_scheme_id,
            total_amount=float(total_amount),
            total_gold_grams=float(total_gold),
            total_points=total_points,
            transaction_count=len(transactions),
            count_by_type=count_by_type,
        )

    def list_transactions(
        self,
        user_scheme_id: Optional[int] = None,
        user_id: Optional[int] = None,
        transaction_type: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> TransactionListResponse:
        if limit > 100:
            limit = 100
        if transaction_type and transaction_type not in TransactionType.values():
            raise ValidationError(f"Invalid transaction type: {transaction_type}")

        try:
            transactions, total = self.transaction_repo.list_filtered(
                user_scheme_id=user_scheme_id,
                user_id=user_id,
                transaction_type=transaction_type,
                limit=limit,
                offset=offset,
            )
        except Exception as e:
            logger.error(f"Failed to list transactions: {str(e)}")
            raise ValidationError(f"Failed to retrieve transactions: {str(e)}")

        return TransactionListResponse(
            transactions=transactions,
            total_count=total,
            has_next=offset + len(transactions) < total,
            limit=limit,
            offset=offset,
        )

    # ------------------------------------------------------------------
    # CSV 내보내기
    # ------------------------------------------------------------------
    def export_transactions_csv(
        self,
        user_id: Optional[int] = None,
        user_scheme_id: Optional[int] = None,
        transaction_type: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Tuple[str, str]:
        """거래 내역 CSV 생성

        Returns:
            (filename, csv 본문)
        """
        if transaction_type and transaction_type not in TransactionType.values():
            raise ValidationError(f"Invalid transaction type: {transaction_type}")
        if start_date and end_date and start_date > end_date:
            raise ValidationError(
                "start_date must be on or before end_date",
                details={"start_date": "after end_date"},
            )

        start, end = ist_day_range(start_date, end_date)

        try:
            rows = self.transaction_repo.list_for_export(
                user_id=user_id,
                user_scheme_id=user_scheme_id,
                transaction_type=transaction_type,
                start=start,
                end=end,
            )
        except BaseAPIException:
            raise
        except Exception as e:
            logger.error(f"Failed to export transactions: {str(e)}")
            raise ValidationError(f"Failed to export transactions: {str(e)}")

        content = self._render_csv(rows)
        filename = f"transactions-{get_ist_today().isoformat()}.csv"
        logger.info(f"Exported {len(rows)} transactions to {filename}")
        return filename, content

    def _render_csv(self, rows: List[Dict[str, Any]]) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(CSV_HEADER)

        overall = self._empty_totals()
        by_scheme: "OrderedDict[int, Dict[str, Any]]" = OrderedDict()

        for row in rows:
            transaction = row["transaction"]
            created = transaction.created_at
            writer.writerow(
                [
                    transaction.id,
                    to_ist(created).date().isoformat() if created else "",
                    transaction.transaction_type,
                    f"{Decimal(transaction.amount or 0):.2f}",
                    f"{Decimal(transaction.gold_grams or 0):.4f}",
                    transaction.points,
                    row["user_name"],
                    row["scheme_name"],
                    transaction.user_scheme_id,
                ]
            )

            scheme_totals = by_scheme.setdefault(
                transaction.user_scheme_id,
                dict(self._empty_totals(), scheme_name=row["scheme_name"]),
            )
            for totals in (overall, scheme_totals):
                self._accumulate(totals, transaction)

        writer.writerow([])
        writer.writerow(["SUMMARY"])
        writer.writerow(["Overall Summary"])
        writer.writerow(["Total Transactions", overall["count"]])
        writer.writerow(["Deposits", overall["deposits"]])
        writer.writerow(["Withdrawals", overall["withdrawals"]])
        writer.writerow(["Points Transactions", overall["points_count"]])
        writer.writerow(["Total Amount", f"{overall['amount']:.2f}"])
        writer.writerow(["Total Gold Grams", f"{overall['gold']:.4f}"])
        writer.writerow(["Total Points", overall["points"]])

        writer.writerow([])
        writer.writerow(["SCHEME-WISE SUMMARY"])
        for scheme_totals in by_scheme.values():
            writer.writerow([f"Scheme: {scheme_totals['scheme_name']}"])
            writer.writerow(["Total Transactions", scheme_totals["count"]])
            writer.writerow(["Total Amount", f"{scheme_totals['amount']:.2f}"])
            writer.writerow(["Total Gold Grams", f"{scheme_totals['gold']:.4f}"])
            writer.writerow(["Total Points", scheme_totals["points"]])
            writer.writerow([])

        return buffer.getvalue()

    @staticmethod
    def _empty_totals() -> Dict[str, Any]:
        return {
            "count": 0,
            "deposits": 0,
            "withdrawals": 0,
            "points_count": 0,
            "amount": Decimal("0"),
            "gold": Decimal("0"),
            "points": 0,
        }

    @staticmethod
    def _accumulate(totals: Dict[str, Any], transaction) -> None:
        kind = transaction.transaction_type
        totals["count"] += 1
        if kind == TransactionType.DEPOSIT.value:
            totals["deposits"] += 1
        elif kind == TransactionType.WITHDRAWAL.value:
            totals["withdrawals"] += 1
        elif kind == TransactionType.POINTS.value:
            totals["points_count"] += 1
        totals["amount"] += _signed_movement(kind, Decimal(transaction.amount or 0))
        totals["gold"] += _signed_movement(kind, Decimal(transaction.gold_grams or 0))
        totals["points"] += transaction.points or 0
