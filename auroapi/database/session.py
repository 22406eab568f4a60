from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.orm import Session

from auroapi.database.connection import Database


def session_scope(database: Database) -> Iterator[Session]:
    db = database.session()
    try:
        yield db
    except Exception:
        if db.in_transaction():
            db.rollback()
        raise
    finally:
        db.close()


@contextmanager
def get_db_context(database: Database):
    """컨텍스트 매니저를 사용한 데이터베이스 세션 관리"""
    db = database.session()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
