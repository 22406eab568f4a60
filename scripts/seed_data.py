"""
초기 데이터 시드 스크립트
관리자 계정, 채굴 패키지, 결제 수단, 시세 이력, 시스템 설정을 생성한다.
이미 존재하는 데이터는 건너뛴다.
"""

import sys
import os

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import threading
from datetime import timedelta
from decimal import Decimal

from auroapi.config import get_settings
from auroapi.database.connection import Database
from auroapi.database.session import get_db_context
from auroapi.models.account import AccountRole
from auroapi.models.mining import MiningPackage
from auroapi.models.price import PriceHistoryPoint
from auroapi.models.system import PaymentMethod
from auroapi.repositories.account_repository import AccountRepository
from auroapi.services.ledger_service import LedgerService
from auroapi.utils.timezone_utils import utc_now

DEFAULT_PACKAGES = [
    ("Starter Rig", Decimal("1000"), Decimal("5")),
    ("Advanced Operation", Decimal("10000"), Decimal("70")),
    ("Industrial Complex", Decimal("100000"), Decimal("900")),
]

DEFAULT_PAYMENT_METHODS = [
    (
        "bank",
        "Bank Transfer",
        "Bank: City Bank\nAccount: 123456789\nName: Auro Gold Ltd.\nRef: Your User ID",
    ),
    (
        "bkash",
        "Bkash / Nagad",
        "Send Money to: 01700000000 (Personal)\nReference: Your User ID",
    ),
]

# 오늘까지 최근 6일
DEFAULT_HISTORY = [
    Decimal("12100.00"),
    Decimal("12250.00"),
    Decimal("12200.00"),
    Decimal("12800.00"),
    Decimal("13100.00"),
    Decimal("13500.00"),
]


def seed_admin(database: Database):
    """관리자 계정 시드 - 추천 코드도 함께 발급"""
    settings = database.settings
    db = database.session()
    try:
        if AccountRepository(db).get_by_email(settings.ADMIN_EMAIL) is not None:
            print(f"⏭️  관리자 계정이 이미 존재합니다: {settings.ADMIN_EMAIL}")
            return

        ledger = LedgerService(db, settings, threading.RLock())
        admin = ledger.register(
            name=settings.ADMIN_NAME,
            email=settings.ADMIN_EMAIL,
            password=settings.ADMIN_PASSWORD,
            role=AccountRole.ADMIN,
        )
        account = ledger.account_repo.get(admin.id)
        codes = ledger.referral_service.issue_codes(account)
        db.commit()
        print(f"✅ 관리자 계정 생성 완료: {admin.email}")
        print(f"🎟️  추천 코드: {', '.join(c.code for c in codes)}")
    finally:
        db.close()


def seed_reference_data(database: Database):
    """채굴 패키지 / 결제 수단 / 시세 이력 시드"""
    with get_db_context(database) as db:
        if db.query(MiningPackage).count() == 0:
            for name, cost, daily_profit in DEFAULT_PACKAGES:
                db.add(MiningPackage(name=name, cost=cost, daily_profit=daily_profit))
            print(f"✅ 채굴 패키지 {len(DEFAULT_PACKAGES)}개 생성")

        for method_id, name, details in DEFAULT_PAYMENT_METHODS:
            if db.get(PaymentMethod, method_id) is None:
                db.add(PaymentMethod(id=method_id, name=name, details=details))
                print(f"✅ 결제 수단 생성: {method_id}")

        if db.query(PriceHistoryPoint).count() == 0:
            today = utc_now().date()
            for offset, price in enumerate(reversed(DEFAULT_HISTORY)):
                db.add(PriceHistoryPoint(recorded_on=today - timedelta(days=offset), price=price))
            print(f"✅ 시세 이력 {len(DEFAULT_HISTORY)}건 생성")


def seed_system_config(database: Database):
    """시세/시스템 설정 기본 행 생성"""
    db = database.session()
    try:
        ledger = LedgerService(db, database.settings, threading.RLock())
        quote = ledger.get_quote()
        config = ledger.get_system_config()
        print(f"✅ 현재 시세: 매수 {quote.buy} / 매도 {quote.sell}")
        print(f"✅ 추천 수수료율: {config.referral_commission_rate}")
    finally:
        db.close()


if __name__ == "__main__":
    database = Database(get_settings())
    try:
        database.create_tables()
        seed_admin(database)
        seed_reference_data(database)
        seed_system_config(database)
    finally:
        database.dispose()
