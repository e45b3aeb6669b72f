from typing import List, Optional

from sqlalchemy.orm import Session

from goldapi.models.scheme import Scheme as SchemeModel
from goldapi.repositories.base import BaseRepository
from goldapi.schemas.scheme import SchemeResponse


class SchemeRepository(BaseRepository[SchemeModel, SchemeResponse]):
    def __init__(self, db: Session):
        super().__init__(SchemeModel, SchemeResponse, db)

    def get_by_name(self, name: str) -> Optional[SchemeResponse]:
        return self.get_by_field("name", name)

    def list_schemes(self) -> List[SchemeResponse]:
        return self.find_all(order_by="duration_months")
