from typing import List, Optional, Tuple

from sqlalchemy import desc
from sqlalchemy.orm import Session

from goldapi.models.scheme_request import SchemeRequest as SchemeRequestModel
from goldapi.repositories.base import BaseRepository
from goldapi.schemas.scheme_request import SchemeRequestResponse


class SchemeRequestRepository(BaseRepository[SchemeRequestModel, SchemeRequestResponse]):
    def __init__(self, db: Session):
        super().__init__(SchemeRequestModel, SchemeRequestResponse, db)

    def list_filtered(
        self,
        user_id: Optional[int] = None,
        is_addressed: Optional[bool] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Tuple[List[SchemeRequestResponse], int]:
        query = self._query()
        if user_id is not None:
            query = query.filter(SchemeRequestModel.user_id == user_id)
        if is_addressed is not None:
            query = query.filter(SchemeRequestModel.is_addressed.is_(is_addressed))

        total = query.count()
        rows = (
            query.order_by(desc(SchemeRequestModel.created_at), desc(SchemeRequestModel.id))
            .offset(offset)
            .limit(limit)
            .all()
        )
        return self._to_schemas(rows), total
