from datetime import date
from typing import List, Optional, Tuple

from sqlalchemy import desc
from sqlalchemy.orm import Session

from goldapi.models.gold_price import GoldPrice as GoldPriceModel
from goldapi.repositories.base import BaseRepository
from goldapi.schemas.gold_price import GoldPriceResponse


class GoldPriceRepository(BaseRepository[GoldPriceModel, GoldPriceResponse]):
    def __init__(self, db: Session):
        super().__init__(GoldPriceModel, GoldPriceResponse, db)

    def get_active_by_date(
        self, price_date: date, for_update: bool = False
    ) -> Optional[GoldPriceModel]:
        """해당 일자의 삭제되지 않은 시세 (최대 1건)"""
        query = self._query().filter(GoldPriceModel.date == price_date)
        if for_update:
            query = query.with_for_update()
        return query.first()

    def get_latest(self) -> Optional[GoldPriceModel]:
        """가장 최근 일자의 삭제되지 않은 시세"""
        return (
            self._query()
            .order_by(desc(GoldPriceModel.date), desc(GoldPriceModel.id))
            .first()
        )

    def list_paginated(
        self, limit: int = 50, offset: int = 0
    ) -> Tuple[List[GoldPriceResponse], int]:
        query = self._query()
        total = query.count()
        rows = (
            query.order_by(desc(GoldPriceModel.date))
            .offset(offset)
            .limit(limit)
            .all()
        )
        return self._to_schemas(rows), total

    def list_between(self, start: date, end: date) -> List[GoldPriceModel]:
        """기간 내 시세 (일자 오름차순)"""
        return (
            self._query()
            .filter(GoldPriceModel.date >= start, GoldPriceModel.date <= end)
            .order_by(GoldPriceModel.date)
            .all()
        )

    def mark_deleted(self, price: GoldPriceModel) -> None:
        price.is_deleted = True
        self.db.flush()
