import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from auroapi.config import Settings
from auroapi.models.base import Base

logger = logging.getLogger(__name__)


class Database:
    """엔진과 세션 팩토리를 소유하는 데이터베이스 핸들

    애플리케이션 시작 시 생성되고 종료 시 dispose 된다.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        url = settings.DATABASE_URL
        if settings.is_sqlite:
            engine_kwargs = {"connect_args": {"check_same_thread": False}}
            # in-memory DB는 커넥션마다 새 DB가 생기므로 단일 커넥션을 공유
            if url in ("sqlite://", "sqlite:///:memory:"):
                engine_kwargs["poolclass"] = StaticPool
        else:
            engine_kwargs = {
                "pool_size": settings.DB_POOL_SIZE,
                "max_overflow": settings.DB_MAX_OVERFLOW,
                "pool_pre_ping": True,  # 연결 유효성 검사
                "pool_recycle": 3600,  # 1시간마다 연결 재생성
            }

        self.engine = create_engine(url, echo=settings.DEBUG and not settings.is_sqlite, **engine_kwargs)

        # Use expire_on_commit=False to avoid DetachedInstanceError when accessing
        # attributes after commit within the same request scope.
        self.session_factory = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=self.engine,
            expire_on_commit=False,
        )

    def create_tables(self) -> None:
        Base.metadata.create_all(bind=self.engine)
        logger.info("Database tables ensured")

    def session(self) -> Session:
        return self.session_factory()

    def dispose(self) -> None:
        self.engine.dispose()
        logger.info("Database engine disposed")
