from typing import List, Optional, Tuple

from sqlalchemy import desc
from sqlalchemy.orm import Session

from goldapi.models.referral import Referral as ReferralModel
from goldapi.repositories.base import BaseRepository
from goldapi.schemas.referral import ReferralResponse


class ReferralRepository(BaseRepository[ReferralModel, ReferralResponse]):
    def __init__(self, db: Session):
        super().__init__(ReferralModel, ReferralResponse, db)

    def list_filtered(
        self,
        user_id: Optional[int] = None,
        status: Optional[str] = None,
        is_addressed: Optional[bool] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Tuple[List[ReferralResponse], int]:
        query = self._query()
        if user_id is not None:
            query = query.filter(ReferralModel.user_id == user_id)
        if status:
            query = query.filter(ReferralModel.status == status)
        if is_addressed is not None:
            query = query.filter(ReferralModel.is_addressed.is_(is_addressed))

        total = query.count()
        rows = (
            query.order_by(desc(ReferralModel.created_at), desc(ReferralModel.id))
            .offset(offset)
            .limit(limit)
            .all()
        )
        return self._to_schemas(rows), total
