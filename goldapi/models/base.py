from sqlalchemy import BigInteger, Boolean, Column, DateTime, Integer, false, func
from sqlalchemy.orm import declarative_base, declared_attr

Base = declarative_base()

# SQLite는 INTEGER PRIMARY KEY만 자동 증가하므로 변형 타입 사용
BigIntPK = BigInteger().with_variant(Integer, "sqlite")


class TimestampMixin:
    """타임스탬프 필드를 위한 믹스인"""

    @declared_attr
    def created_at(cls):
        return Column(DateTime(timezone=True), server_default=func.now())

    @declared_attr
    def updated_at(cls):
        return Column(
            DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
        )


class SoftDeleteMixin:
    """논리 삭제 플래그 믹스인 - 파이프라인은 행을 물리 삭제하지 않음"""

    @declared_attr
    def is_deleted(cls):
        return Column(Boolean, default=False, server_default=false(), nullable=False)


class BaseModel(Base, TimestampMixin):
    """모든 모델의 베이스 클래스"""

    __abstract__ = True

    def dict(self):
        """모델을 딕셔너리로 변환"""
        return {
            column.name: getattr(self, column.name) for column in self.__table__.columns
        }
