import sys
import os

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from auroapi.config import get_settings
from auroapi.database.connection import Database


def init_db():
    """데이터베이스 초기화 (테이블 생성)"""
    settings = get_settings()
    database = Database(settings)
    try:
        database.create_tables()
        print(f"Database initialized successfully: {settings.DATABASE_URL}")
    except Exception as e:
        print(f"Database initialization failed: {str(e)}")
        raise
    finally:
        database.dispose()


if __name__ == "__main__":
    init_db()
