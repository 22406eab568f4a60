import threading
from decimal import Decimal

import pytest

from auroapi.core.exceptions import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from auroapi.models.transaction import TransactionStatus


class TestAccounts:
    def test_register_and_authenticate(self, ledger):
        account = ledger.register(name="Rahim", email="Rahim@Example.com", password="secret1")

        assert account.email == "rahim@example.com"
        assert account.balance_gold == Decimal("0")
        assert ledger.authenticate("rahim@example.com", "secret1").id == account.id

    def test_wrong_password(self, ledger, user):
        with pytest.raises(AuthenticationError):
            ledger.authenticate(user.email, "nope")
        with pytest.raises(AuthenticationError):
            ledger.authenticate("missing@example.com", "secret1")

    def test_duplicate_email(self, ledger, user):
        with pytest.raises(ConflictError):
            ledger.register(name="Again", email="RAHIM@example.com", password="secret1")

    def test_unknown_account(self, ledger):
        with pytest.raises(NotFoundError):
            ledger.get_account(404)


class TestAtomicity:
    """실패한 변경은 어떤 상태도 남기지 않는다"""

    def test_failed_approval_rolls_back(self, ledger, admin, monkeypatch):
        _, codes = ledger.list_referral_codes(admin.id)
        referee = ledger.register(
            name="Karim", email="karim@example.com", password="secret1", referral_code=codes[0].code
        )
        tx = ledger.submit_buy(referee.id, 2)

        def boom(*args, **kwargs):
            raise RuntimeError("commission store unavailable")

        monkeypatch.setattr(ledger.referral_service, "apply_purchase_commission", boom)
        with pytest.raises(RuntimeError):
            ledger.approve(tx.id)
        monkeypatch.undo()

        # 금 지급과 상태 전이 모두 취소됨
        assert ledger.get_account(referee.id).balance_gold == Decimal("0")
        transactions, _ = ledger.list_transactions(referee.id)
        assert transactions[0].status == TransactionStatus.PENDING

        ledger.approve(tx.id)
        assert ledger.get_account(referee.id).balance_gold == Decimal("2")

    def test_mutations_wait_for_shared_lock(self, ledger):
        """다른 작업이 잠금을 보유하는 동안 원장 변경은 대기한다"""
        release = threading.Event()
        acquired = threading.Event()
        results = []

        def holder():
            with ledger.lock:
                acquired.set()
                release.wait(timeout=5)

        holder_thread = threading.Thread(target=holder)
        holder_thread.start()
        acquired.wait(timeout=5)

        worker = threading.Thread(target=lambda: results.append(ledger.set_quote(14000, 13000)))
        worker.start()
        worker.join(timeout=0.2)
        assert worker.is_alive()
        assert results == []

        release.set()
        holder_thread.join()
        worker.join(timeout=5)
        assert results[0].buy == Decimal("14000.00")


class TestSystemConfig:
    def test_payment_method_update(self, ledger, db):
        from auroapi.models.system import PaymentMethod

        db.add(PaymentMethod(id="bank", name="Bank Transfer", details="City Bank"))
        db.commit()

        updated = ledger.update_payment_method("bank", "City Bank\nAccount: 987")
        assert updated.details == "City Bank\nAccount: 987"
        assert [m.id for m in ledger.list_payment_methods()] == ["bank"]

    def test_unknown_payment_method(self, ledger):
        with pytest.raises(NotFoundError):
            ledger.update_payment_method("paypal", "nope")

    @pytest.mark.parametrize("rate", ["1e30", "Infinity", "abc", "1.5", "-0.1"])
    def test_referral_rate_rejects_invalid_values(self, ledger, rate):
        before = ledger.get_system_config().referral_commission_rate

        with pytest.raises(ValidationError):
            ledger.set_referral_commission_rate(rate)

        assert ledger.get_system_config().referral_commission_rate == before
