from typing import Iterator

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from auroapi.config import Settings
from auroapi.database.session import session_scope
from auroapi.services.auth_service import AuthService
from auroapi.services.ledger_service import LedgerService


def get_settings_dep(request: Request) -> Settings:
    return request.app.container.config.config()


def get_db(request: Request) -> Iterator[Session]:
    """요청 단위 세션 - 컨테이너가 소유한 Database 에서 생성"""
    database = request.app.container.repositories.database()
    yield from session_scope(database)


def get_ledger_service(
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings_dep),
) -> LedgerService:
    lock = request.app.container.repositories.ledger_lock()
    return LedgerService(db=db, settings=settings, lock=lock)


def get_auth_service(
    ledger: LedgerService = Depends(get_ledger_service),
    settings: Settings = Depends(get_settings_dep),
) -> AuthService:
    return AuthService(ledger=ledger, settings=settings)
