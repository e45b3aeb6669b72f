from datetime import datetime
from typing import Dict, List, Optional, Tuple

from sqlalchemy import desc, func
from sqlalchemy.orm import Session

from goldapi.models.redemption import (
    RedemptionRequest as RedemptionRequestModel,
    RedemptionStatus,
    RedemptionType,
)
from goldapi.models.user_scheme import UserScheme as UserSchemeModel
from goldapi.repositories.base import BaseRepository
from goldapi.schemas.redemption import RedemptionRequestResponse


class RedemptionRepository(
    BaseRepository[RedemptionRequestModel, RedemptionRequestResponse]
):
    def __init__(self, db: Session):
        super().__init__(RedemptionRequestModel, RedemptionRequestResponse, db)

    def get_for_update(self, request_id: int) -> Optional[RedemptionRequestModel]:
        return (
            self._query()
            .filter(RedemptionRequestModel.id == request_id)
            .with_for_update()
            .first()
        )

    def find_pending_bonus(self, user_scheme_id: int) -> Optional[RedemptionRequestModel]:
        """해당 가입의 처리 대기중인 BONUS 요청"""
        return (
            self._query()
            .filter(
                RedemptionRequestModel.user_scheme_id == user_scheme_id,
                RedemptionRequestModel.type == RedemptionType.BONUS.value,
                RedemptionRequestModel.status == RedemptionStatus.PENDING.value,
            )
            .first()
        )

    def count_pending(self, user_scheme_id: int) -> int:
        """유형 무관 PENDING 요청 수"""
        return self.count(
            {
                "user_scheme_id": user_scheme_id,
                "status": RedemptionStatus.PENDING.value,
            }
        )

    def maturity_exists(self, user_scheme_id: int) -> bool:
        return self.exists(
            {
                "user_scheme_id": user_scheme_id,
                "type": RedemptionType.MATURITY.value,
            }
        )

    def list_filtered(
        self,
        status: Optional[str] = None,
        request_type: Optional[str] = None,
        user_id: Optional[int] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Tuple[List[RedemptionRequestResponse], int]:
        query = self._query()
        if status:
            query = query.filter(RedemptionRequestModel.status == status)
        if request_type:
            query = query.filter(RedemptionRequestModel.type == request_type)
        if user_id is not None:
            query = query.join(
                UserSchemeModel,
                UserSchemeModel.id == RedemptionRequestModel.user_scheme_id,
            ).filter(UserSchemeModel.user_id == user_id)

        total = query.count()
        rows = (
            query.order_by(
                desc(RedemptionRequestModel.created_at), desc(RedemptionRequestModel.id)
            )
            .offset(offset)
            .limit(limit)
            .all()
        )
        return self._to_schemas(rows), total

    def count_grouped(
        self,
        column: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Dict[str, int]:
        """status 또는 type 별 요청 수 - created_at 은 [start, end)"""
        group_column = getattr(RedemptionRequestModel, column)
        query = self._query().with_entities(
            group_column, func.count(RedemptionRequestModel.id)
        )
        query = self._in_period(query, start, end)
        return {key: count for key, count in query.group_by(group_column).all()}

    def sum_approved_bonus_points(
        self, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> int:
        query = (
            self._query()
            .with_entities(func.coalesce(func.sum(RedemptionRequestModel.points), 0))
            .filter(
                RedemptionRequestModel.type == RedemptionType.BONUS.value,
                RedemptionRequestModel.status == RedemptionStatus.APPROVED.value,
            )
        )
        return int(self._in_period(query, start, end).scalar() or 0)

    def _in_period(self, query, start: Optional[datetime], end: Optional[datetime]):
        if start is not None:
            query = query.filter(RedemptionRequestModel.created_at >= start)
        if end is not None:
            query = query.filter(RedemptionRequestModel.created_at < end)
        return query
