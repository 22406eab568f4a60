import threading
from decimal import Decimal

import pytest
from dependency_injector import providers
from fastapi.testclient import TestClient

from auroapi.main import app
from auroapi.models.account import AccountRole
from auroapi.models.system import PaymentMethod
from auroapi.services.ledger_service import LedgerService


class FakeInsightService:
    async def generate(self, quote, history):
        return f"Gold at ৳{quote.buy} with {len(history)} history points."


@pytest.fixture
def client(database, settings):
    container = app.container  # type: ignore
    container.config.config.override(providers.Object(settings))
    container.repositories.database.override(providers.Object(database))
    container.services.market_insight_service.override(providers.Object(FakeInsightService()))

    session = database.session()
    try:
        ledger = LedgerService(session, settings, threading.RLock())
        admin = ledger.register(
            name="Auro Administrator", email="admin@auro.com", password="admin123", role=AccountRole.ADMIN
        )
        ledger.referral_service.issue_codes(ledger.account_repo.get(admin.id))
        session.add(PaymentMethod(id="bank", name="Bank Transfer", details="City Bank"))
        session.commit()
    finally:
        session.close()

    yield TestClient(app)

    container.config.config.reset_override()
    container.repositories.database.reset_override()
    container.services.market_insight_service.reset_override()


def _login(client, email, password):
    res = client.post("/api/v1/auth/login", json={"email": email, "password": password})
    assert res.status_code == 200
    return {"Authorization": f"Bearer {res.json()['data']['token']['access_token']}"}


@pytest.fixture
def admin_headers(client):
    return _login(client, "admin@auro.com", "admin123")


@pytest.fixture
def user_headers(client):
    res = client.post(
        "/api/v1/auth/register",
        json={"name": "Rahim", "email": "rahim@example.com", "password": "secret1"},
    )
    assert res.status_code == 201
    token = res.json()["data"]["token"]["access_token"]
    return {"Authorization": f"Bearer {token}"}


def test_health(client):
    res = client.get("/health")
    assert res.status_code == 200
    assert res.json() == {"status": "healthy", "database": "ok"}


def test_me_requires_token(client):
    res = client.get("/api/v1/accounts/me")
    assert res.status_code == 401
    assert res.json()["success"] is False


def test_login_with_wrong_password(client):
    res = client.post("/api/v1/auth/login", json={"email": "admin@auro.com", "password": "wrong"})
    assert res.status_code == 401
    assert res.json()["error"]["code"] == "AUTH_001"


def test_register_with_referral_code(client, admin_headers):
    codes = client.get("/api/v1/referrals/codes", headers=admin_headers).json()["data"]["codes"]

    res = client.post(
        "/api/v1/auth/register",
        json={
            "name": "Karim",
            "email": "karim@example.com",
            "password": "secret1",
            "referral_code": codes[0]["code"].lower(),
        },
    )
    assert res.status_code == 201

    again = client.post(
        "/api/v1/auth/register",
        json={
            "name": "Late",
            "email": "late@example.com",
            "password": "secret1",
            "referral_code": codes[0]["code"],
        },
    )
    assert again.status_code == 400
    assert again.json()["error"]["code"] == "REFERRAL_001"


def test_buy_approve_flow(client, admin_headers, user_headers):
    res = client.post(
        "/api/v1/transactions/buy",
        json={"grams": "2", "payment_method_ref": "bank", "proof_ref": "receipt-1"},
        headers=user_headers,
    )
    assert res.status_code == 201
    tx = res.json()["data"]["transaction"]
    assert tx["status"] == "PENDING"
    assert tx["payment_method_ref"] == "Bank Transfer"
    assert Decimal(tx["amount_fiat"]) == Decimal("27000")

    forbidden = client.post(f"/api/v1/transactions/{tx['id']}/approve", headers=user_headers)
    assert forbidden.status_code == 403

    approved = client.post(f"/api/v1/transactions/{tx['id']}/approve", headers=admin_headers)
    assert approved.status_code == 200
    assert approved.json()["data"]["transaction"]["status"] == "COMPLETED"

    again = client.post(f"/api/v1/transactions/{tx['id']}/approve", headers=admin_headers)
    assert again.status_code == 409

    me = client.get("/api/v1/accounts/me", headers=user_headers).json()["data"]["account"]
    assert Decimal(me["balance_gold"]) == Decimal("2")

    listing = client.get("/api/v1/transactions", headers=user_headers).json()["data"]
    assert listing["total_count"] == 1


def test_sell_below_minimum(client, user_headers):
    res = client.post("/api/v1/transactions/sell", json={"grams": "0.01"}, headers=user_headers)
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "SELL_001"


def test_price_endpoints(client, admin_headers, user_headers):
    assert client.get("/api/v1/price").json()["data"]["quote"]["trend"] == "STABLE"

    denied = client.put("/api/v1/price", json={"buy": "14000", "sell": "13000"}, headers=user_headers)
    assert denied.status_code == 403

    res = client.put("/api/v1/price", json={"buy": "14000", "sell": "13000"}, headers=admin_headers)
    assert res.status_code == 200
    assert res.json()["data"]["quote"]["trend"] == "UP"

    history = client.get("/api/v1/price/history").json()["data"]["history"]
    assert len(history) == 1

    insight = client.get("/api/v1/price/insights").json()["data"]
    assert insight["commentary"] == "Gold at ৳14000.00 with 1 history points."


class RecordingLock:
    """잠금을 획득한 스레드를 기록하는 RLock 래퍼"""

    def __init__(self):
        self._lock = threading.RLock()
        self.holders = []

    def __enter__(self):
        self._lock.acquire()
        self.holders.append(threading.get_ident())
        return self

    def __exit__(self, *exc):
        self._lock.release()
        return False


class ThreadRecordingInsightService(FakeInsightService):
    def __init__(self):
        self.loop_thread = None

    async def generate(self, quote, history):
        self.loop_thread = threading.get_ident()
        return await super().generate(quote, history)


def test_insights_reads_ledger_off_event_loop(client):
    """인사이트 조회 시 원장 잠금은 이벤트 루프 스레드에서 잡히지 않는다"""
    container = app.container  # type: ignore
    lock = RecordingLock()
    insight_service = ThreadRecordingInsightService()
    container.repositories.ledger_lock.override(providers.Object(lock))
    container.services.market_insight_service.override(providers.Object(insight_service))
    try:
        res = client.get("/api/v1/price/insights")
    finally:
        container.repositories.ledger_lock.reset_override()

    assert res.status_code == 200
    assert lock.holders
    assert insight_service.loop_thread is not None
    assert insight_service.loop_thread not in lock.holders


def test_invalid_price_rejected(client, admin_headers):
    res = client.put("/api/v1/price", json={"buy": "0", "sell": "13000"}, headers=admin_headers)
    assert res.status_code == 422
    assert res.json()["error"]["code"] == "PRICE_001"

    oversized = client.put("/api/v1/price", json={"buy": "1e30", "sell": "1e30"}, headers=admin_headers)
    assert oversized.status_code == 422
    assert oversized.json()["error"]["code"] == "PRICE_001"


def test_mining_and_system_endpoints(client, admin_headers, user_headers):
    res = client.put(
        "/api/v1/mining/packages",
        json={"name": "Starter Rig", "cost": "1000", "daily_profit": "5"},
        headers=admin_headers,
    )
    assert res.status_code == 200
    package_id = res.json()["data"]["package"]["id"]

    packages = client.get("/api/v1/mining/packages").json()["data"]["packages"]
    assert [p["name"] for p in packages] == ["Starter Rig"]

    no_gold = client.post("/api/v1/mining/activate", json={"package_id": package_id}, headers=user_headers)
    assert no_gold.status_code == 400
    assert no_gold.json()["error"]["code"] == "BALANCE_001"

    subscriptions = client.get("/api/v1/mining/subscriptions", headers=user_headers).json()["data"]
    assert subscriptions["subscriptions"] == []

    rate = client.put("/api/v1/system/referral-rate", json={"rate": "0.1"}, headers=admin_headers)
    assert Decimal(rate.json()["data"]["config"]["referral_commission_rate"]) == Decimal("0.1")

    method = client.put(
        "/api/v1/system/payment-methods/bank", json={"details": "Account: 42"}, headers=admin_headers
    )
    assert method.json()["data"]["payment_method"]["details"] == "Account: 42"

    accounts = client.get("/api/v1/accounts", headers=admin_headers).json()["data"]["accounts"]
    assert {a["email"] for a in accounts} == {"admin@auro.com", "rahim@example.com"}


def test_referral_activation_endpoint(client, user_headers):
    res = client.post(
        "/api/v1/referrals/activation", json={"proof_ref": "receipt-9"}, headers=user_headers
    )
    assert res.status_code == 201
    assert res.json()["data"]["transaction"]["type"] == "ACTIVATION"

    again = client.post(
        "/api/v1/referrals/activation", json={"proof_ref": "receipt-10"}, headers=user_headers
    )
    assert again.status_code == 409
    assert again.json()["error"]["code"] == "REFERRAL_003"


def test_transaction_detail_is_owner_only(client, admin_headers, user_headers):
    tx = client.post("/api/v1/transactions/buy", json={"grams": "1"}, headers=user_headers).json()["data"]["transaction"]

    assert client.get(f"/api/v1/transactions/{tx['id']}", headers=user_headers).status_code == 200
    assert client.get(f"/api/v1/transactions/{tx['id']}", headers=admin_headers).status_code == 200

    other = client.post(
        "/api/v1/auth/register",
        json={"name": "Other", "email": "other@example.com", "password": "secret1"},
    ).json()["data"]["token"]["access_token"]
    res = client.get(f"/api/v1/transactions/{tx['id']}", headers={"Authorization": f"Bearer {other}"})
    assert res.status_code == 404


def test_admin_listing_with_overridden_admin(client):
    from auroapi.core import auth_middleware
    from auroapi.schemas.account import Account as AccountSchema

    def _stub_admin():
        return AccountSchema(
            id=1,
            name="Stub Admin",
            email="stub@example.com",
            role=AccountRole.ADMIN,
            balance_fiat=Decimal("0"),
            balance_gold=Decimal("0"),
            locked_gold=Decimal("0"),
            available_gold=Decimal("0"),
            referral_status="INACTIVE",
        )

    app.dependency_overrides[auth_middleware.require_admin] = _stub_admin
    try:
        res = client.get("/api/v1/transactions/all")
    finally:
        app.dependency_overrides.pop(auth_middleware.require_admin, None)

    assert res.status_code == 200
    assert res.json()["data"] == {"transactions": [], "total_count": 0}
