"""
사용자 상품 가입(UserScheme) 리포지토리

포인트 캐시 컬럼(available_points, total_points)의 증감은 모두 이 리포지토리의
헬퍼를 통해 수행합니다. 호출자는 같은 DB 트랜잭션 안에서 거래 원장 기록을 함께 남겨야 합니다.
"""

from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from goldapi.models.user_scheme import UserScheme as UserSchemeModel, UserSchemeStatus
from goldapi.repositories.base import BaseRepository
from goldapi.schemas.user_scheme import UserSchemeResponse


class UserSchemeRepository(BaseRepository[UserSchemeModel, UserSchemeResponse]):
    def __init__(self, db: Session):
        super().__init__(UserSchemeModel, UserSchemeResponse, db)

    def get_for_update(self, user_scheme_id: int) -> Optional[UserSchemeModel]:
        """행 잠금 조회 (PostgreSQL FOR UPDATE, SQLite는 무시)"""
        return (
            self._query()
            .filter(UserSchemeModel.id == user_scheme_id)
            .with_for_update(of=UserSchemeModel)
            .first()
        )

    def find_active(self) -> List[UserSchemeModel]:
        """ACTIVE 가입 전체 (상품 정보 포함)"""
        return (
            self._query()
            .options(joinedload(UserSchemeModel.scheme))
            .filter(UserSchemeModel.status == UserSchemeStatus.ACTIVE.value)
            .order_by(UserSchemeModel.id)
            .all()
        )

    def find_active_ids(self) -> List[int]:
        rows = (
            self._query()
            .with_entities(UserSchemeModel.id)
            .filter(UserSchemeModel.status == UserSchemeStatus.ACTIVE.value)
            .order_by(UserSchemeModel.id)
            .all()
        )
        return [row[0] for row in rows]

    def find_matured(self, today: date) -> List[UserSchemeModel]:
        """만기일이 지난 ACTIVE 가입"""
        return (
            self._query()
            .options(joinedload(UserSchemeModel.scheme))
            .filter(
                UserSchemeModel.status == UserSchemeStatus.ACTIVE.value,
                UserSchemeModel.end_date <= today,
            )
            .order_by(UserSchemeModel.id)
            .all()
        )

    def find_by_user(self, user_id: int) -> List[UserSchemeResponse]:
        rows = (
            self._query()
            .filter(UserSchemeModel.user_id == user_id)
            .order_by(UserSchemeModel.start_date.desc(), UserSchemeModel.id.desc())
            .all()
        )
        return self._to_schemas(rows)

    def has_active_enrollment(self, user_id: int, scheme_id: int) -> bool:
        return self.exists(
            {
                "user_id": user_id,
                "scheme_id": scheme_id,
                "status": UserSchemeStatus.ACTIVE.value,
            }
        )

    def add_points(self, user_scheme: UserSchemeModel, points: int) -> None:
        """적립: available/total 동시 증가"""
        user_scheme.available_points = (user_scheme.available_points or 0) + points
        user_scheme.total_points = (user_scheme.total_points or 0) + points
        self.db.flush()

    def reverse_points(self, user_scheme: UserSchemeModel, points: int) -> None:
        """적립 취소: available/total 동시 감소 (0 미만 불가)"""
        user_scheme.available_points = max(0, (user_scheme.available_points or 0) - points)
        user_scheme.total_points = max(0, (user_scheme.total_points or 0) - points)
        self.db.flush()

    def deduct_available(self, user_scheme: UserSchemeModel, points: int) -> None:
        """사용: available 만 감소 (total 은 누적 지표)"""
        user_scheme.available_points = (user_scheme.available_points or 0) - points
        self.db.flush()

    def count_by_status(
        self, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> Dict[str, int]:
        """상태별 가입 수 (start_date 기준 기간 필터)"""
        query = self._query().with_entities(
            UserSchemeModel.status, func.count(UserSchemeModel.id)
        )
        if start_date is not None:
            query = query.filter(UserSchemeModel.start_date >= start_date)
        if end_date is not None:
            query = query.filter(UserSchemeModel.start_date <= end_date)
        return {status: count for status, count in query.group_by(UserSchemeModel.status).all()}

    def active_balances(self) -> Tuple[int, Decimal]:
        """ACTIVE 가입의 (available_points 합계, accrued_gold 합계)"""
        points, gold = (
            self._query()
            .with_entities(
                func.coalesce(func.sum(UserSchemeModel.available_points), 0),
                func.coalesce(func.sum(UserSchemeModel.accrued_gold), 0),
            )
            .filter(UserSchemeModel.status == UserSchemeStatus.ACTIVE.value)
            .one()
        )
        return int(points or 0), Decimal(str(gold or 0))
