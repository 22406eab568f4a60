import sys
import threading
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Ensure project root is on path for `auroapi` imports
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from auroapi.config import Settings
from auroapi.database.connection import Database
from auroapi.models.account import AccountRole
from auroapi.services.ledger_service import LedgerService


class FrozenClock:
    """테스트용 수동 시계"""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def settings():
    return Settings(DATABASE_URL="sqlite://", SECRET_KEY="test-secret", _env_file=None)


@pytest.fixture
def database(settings):
    database = Database(settings)
    database.create_tables()
    yield database
    database.dispose()


@pytest.fixture
def db(database):
    session = database.session()
    yield session
    session.close()


@pytest.fixture
def clock():
    return FrozenClock(datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def ledger(db, settings, clock):
    return LedgerService(db, settings, threading.RLock(), clock=clock)


@pytest.fixture
def admin(ledger, db):
    """추천 코드 4개가 발급된 관리자 계정"""
    account = ledger.register(
        name="Auro Administrator",
        email="admin@auro.com",
        password="admin123",
        role=AccountRole.ADMIN,
    )
    ledger.referral_service.issue_codes(ledger.account_repo.get(account.id))
    db.commit()
    return ledger.get_account(account.id)


@pytest.fixture
def user(ledger):
    return ledger.register(name="Rahim", email="rahim@example.com", password="secret1")


def fund_gold(ledger, account_id, grams):
    """BUY 요청 후 승인하여 금 잔액을 채운다"""
    tx = ledger.submit_buy(account_id, grams)
    return ledger.approve(tx.id)


@pytest.fixture
def fund(ledger):
    return lambda account_id, grams: fund_gold(ledger, account_id, grams)
