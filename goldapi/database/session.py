from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.orm import Session

from goldapi.database.connection import SessionLocal


def get_db() -> Iterator[Session]:
    """요청 단위 세션 - 커밋은 서비스 계층이 명시적으로 수행"""
    db = SessionLocal()
    try:
        yield db
    except Exception:
        if db.in_transaction():
            db.rollback()
        raise
    finally:
        db.close()


@contextmanager
def get_db_context() -> Iterator[Session]:
    """스케줄러/스크립트용 세션 컨텍스트 (정상 종료 시 커밋, 예외 시 롤백)"""
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
