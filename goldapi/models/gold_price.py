from datetime import date as date_type
from decimal import Decimal

from sqlalchemy import Date, Index, Numeric, text
from sqlalchemy.orm import Mapped, mapped_column

from goldapi.models.base import BaseModel, BigIntPK, SoftDeleteMixin


class GoldPrice(BaseModel, SoftDeleteMixin):
    """일별 금 시세 (그램당 가격)

    같은 날짜에 삭제되지 않은 행은 최대 1개 - partial unique index로 보장.
    """

    __tablename__ = "gold_prices"
    __table_args__ = (
        Index(
            "uq_gold_prices_date_active",
            "date",
            unique=True,
            postgresql_where=text("NOT is_deleted"),
            sqlite_where=text("NOT is_deleted"),
        ),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    date: Mapped[date_type] = mapped_column(Date, nullable=False, index=True)
    price_per_gram: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)

    def __repr__(self):
        return f"<GoldPrice(id={self.id}, date={self.date}, price={self.price_per_gram}, deleted={self.is_deleted})>"
