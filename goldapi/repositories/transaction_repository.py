from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import desc, func
from sqlalchemy.orm import Session

from goldapi.models.scheme import Scheme as SchemeModel
from goldapi.models.transaction import Transaction as TransactionModel, TransactionType
from goldapi.models.user import User as UserModel
from goldapi.models.user_scheme import UserScheme as UserSchemeModel
from goldapi.repositories.base import BaseRepository
from goldapi.schemas.transaction import TransactionResponse


class TransactionRepository(BaseRepository[TransactionModel, TransactionResponse]):
    """거래 원장 리포지토리 - 삽입과 논리 삭제만 수행"""

    def __init__(self, db: Session):
        super().__init__(TransactionModel, TransactionResponse, db)

    def find_points_by_price_ref(self, price_id: int) -> List[TransactionModel]:
        """해당 시세를 기준으로 지급된 (삭제되지 않은) points 거래"""
        return (
            self._query()
            .filter(
                TransactionModel.price_ref_id == price_id,
                TransactionModel.transaction_type == TransactionType.POINTS.value,
            )
            .order_by(TransactionModel.id)
            .all()
        )

    def find_by_redemption_request(self, request_id: int) -> List[TransactionModel]:
        return (
            self._query()
            .filter(TransactionModel.redemption_request_id == request_id)
            .all()
        )

    def find_by_user_scheme(self, user_scheme_id: int) -> List[TransactionModel]:
        return (
            self._query()
            .filter(TransactionModel.user_scheme_id == user_scheme_id)
            .order_by(TransactionModel.id)
            .all()
        )

    def sum_points(self, user_scheme_id: int) -> int:
        """삭제되지 않은 거래의 points 합계 (원장 기준 잔액)"""
        total = (
            self._query()
            .with_entities(func.coalesce(func.sum(TransactionModel.points), 0))
            .filter(TransactionModel.user_scheme_id == user_scheme_id)
            .scalar()
        )
        return int(total or 0)

    def mark_deleted(self, transactions: List[TransactionModel]) -> None:
        for transaction in transactions:
            transaction.is_deleted = True
        self.db.flush()

    def list_filtered(
        self,
        user_scheme_id: Optional[int] = None,
        user_id: Optional[int] = None,
        transaction_type: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Tuple[List[TransactionResponse], int]:
        query = self._query()
        if user_scheme_id is not None:
            query = query.filter(TransactionModel.user_scheme_id == user_scheme_id)
        if user_id is not None:
            query = query.join(
                UserSchemeModel, UserSchemeModel.id == TransactionModel.user_scheme_id
            ).filter(UserSchemeModel.user_id == user_id)
        if transaction_type:
            query = query.filter(TransactionModel.transaction_type == transaction_type)

        total = query.count()
        rows = (
            query.order_by(desc(TransactionModel.created_at), desc(TransactionModel.id))
            .offset(offset)
            .limit(limit)
            .all()
        )
        return self._to_schemas(rows), total

    def list_for_export(
        self,
        user_id: Optional[int] = None,
        user_scheme_id: Optional[int] = None,
        transaction_type: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[Dict[str, Any]]:
        """CSV 내보내기용 행 (사용자/상품 이름 포함, 최신순)"""
        query = (
            self.db.query(
                TransactionModel,
                UserModel.name.label("user_name"),
                SchemeModel.name.label("scheme_name"),
            )
            .join(UserSchemeModel, UserSchemeModel.id == TransactionModel.user_scheme_id)
            .join(UserModel, UserModel.id == UserSchemeModel.user_id)
            .join(SchemeModel, SchemeModel.id == UserSchemeModel.scheme_id)
            .filter(TransactionModel.is_deleted.is_(False))
        )
        if user_id is not None:
            query = query.filter(UserSchemeModel.user_id == user_id)
        if user_scheme_id is not None:
            query = query.filter(TransactionModel.user_scheme_id == user_scheme_id)
        if transaction_type:
            query = query.filter(TransactionModel.transaction_type == transaction_type)
        if start is not None:
            query = query.filter(TransactionModel.created_at >= start)
        if end is not None:
            query = query.filter(TransactionModel.created_at < end)

        rows = query.order_by(desc(TransactionModel.created_at), desc(TransactionModel.id)).all()
        return [
            {
                "transaction": transaction,
                "user_name": user_name,
                "scheme_name": scheme_name,
            }
            for transaction, user_name, scheme_name in rows
        ]

    def stats_by_type(
        self, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> Dict[str, Dict[str, Any]]:
        """유형별 (건수, 금액, 금 그램, points) 합계 - created_at 은 [start, end)"""
        query = self._query().with_entities(
            TransactionModel.transaction_type,
            func.count(TransactionModel.id),
            func.coalesce(func.sum(TransactionModel.amount), 0),
            func.coalesce(func.sum(TransactionModel.gold_grams), 0),
            func.coalesce(func.sum(TransactionModel.points), 0),
        )
        if start is not None:
            query = query.filter(TransactionModel.created_at >= start)
        if end is not None:
            query = query.filter(TransactionModel.created_at < end)

        return {
            transaction_type: {
                "count": count,
                "amount": Decimal(str(amount or 0)),
                "gold_grams": Decimal(str(gold_grams or 0)),
                "points": int(points or 0),
            }
            for transaction_type, count, amount, gold_grams, points in query.group_by(
                TransactionModel.transaction_type
            ).all()
        }
