import re
from decimal import Decimal

import pytest

from auroapi.core.exceptions import (
    ActivationPendingError,
    AlreadyActiveError,
    InvalidReferralCodeError,
    ValidationError,
)
from auroapi.models.account import ReferralStatus
from auroapi.models.transaction import TransactionStatus, TransactionType

CODE_PATTERN = re.compile(r"^REF-[0-9A-F]{6}-0[1-4]$")


def _first_code(ledger, account_id):
    _, codes = ledger.list_referral_codes(account_id)
    return codes[0].code


class TestReferralSignup:
    def test_admin_seed_has_four_codes(self, ledger, admin):
        status, codes = ledger.list_referral_codes(admin.id)

        assert status == ReferralStatus.ACTIVE
        assert len(codes) == 4
        assert all(CODE_PATTERN.match(c.code) for c in codes)
        assert len({c.code.rsplit("-", 1)[0] for c in codes}) == 1

    def test_end_to_end_signup_and_commission(self, ledger, admin):
        """가입 보너스 -> 매수 승인 -> 추천 수수료"""
        code = _first_code(ledger, admin.id)

        referee = ledger.register(
            name="Karim", email="karim@example.com", password="secret1", referral_code=code
        )
        assert referee.referred_by_id == admin.id
        # 50 / 13500 = 0.0037037037... -> 내림
        assert ledger.get_account(admin.id).balance_gold == Decimal("0.00370370")

        tx = ledger.submit_buy(referee.id, 2)
        assert ledger.get_account(admin.id).balance_gold == Decimal("0.00370370")

        ledger.approve(tx.id)
        # 27000 x 0.05 = 1350 BDT -> 1350 / 13500 = 0.1g
        assert ledger.get_account(admin.id).balance_gold == Decimal("0.10370370")
        assert ledger.get_account(referee.id).balance_gold == Decimal("2")

    def test_code_is_single_use(self, ledger, admin):
        code = _first_code(ledger, admin.id)
        ledger.register(name="A", email="a@example.com", password="secret1", referral_code=code)

        with pytest.raises(InvalidReferralCodeError):
            ledger.register(name="B", email="b@example.com", password="secret1", referral_code=code)

        _, codes = ledger.list_referral_codes(admin.id)
        assert sum(1 for c in codes if c.is_used) == 1

    def test_invalid_code_fails_whole_registration(self, ledger, admin):
        with pytest.raises(InvalidReferralCodeError):
            ledger.register(
                name="Ghost", email="ghost@example.com", password="secret1", referral_code="REF-NOPE-01"
            )

        assert ledger.account_repo.get_by_email("ghost@example.com") is None
        assert ledger.get_account(admin.id).balance_gold == Decimal("0")

    def test_commission_uses_rate_and_price_at_approval(self, ledger, admin):
        code = _first_code(ledger, admin.id)
        referee = ledger.register(
            name="Karim", email="karim@example.com", password="secret1", referral_code=code
        )
        tx = ledger.submit_buy(referee.id, 1)  # 13500 BDT

        ledger.set_referral_commission_rate("0.10")
        ledger.set_quote(15000, 14000)
        ledger.approve(tx.id)

        # 13500 x 0.10 = 1350 BDT -> 1350 / 15000 = 0.09g (+ 가입 보너스)
        assert ledger.get_account(admin.id).balance_gold == Decimal("0.09370370")

    def test_no_commission_without_referrer(self, ledger, admin, user):
        tx = ledger.submit_buy(user.id, 1)
        ledger.approve(tx.id)

        assert ledger.get_account(admin.id).balance_gold == Decimal("0")

    @pytest.mark.parametrize("rate", ["-0.01", "1.5"])
    def test_commission_rate_bounds(self, ledger, rate):
        with pytest.raises(ValidationError):
            ledger.set_referral_commission_rate(rate)
        assert ledger.get_system_config().referral_commission_rate == Decimal("0.05")


class TestActivation:
    """INACTIVE -> PENDING -> ACTIVE | INACTIVE"""

    def test_activation_lifecycle(self, ledger, user):
        tx = ledger.request_activation(user.id, "proof-001")

        assert tx.type == TransactionType.ACTIVATION
        assert tx.amount_fiat == Decimal("500.00")
        assert tx.amount_gold is None
        assert ledger.get_account(user.id).referral_status == ReferralStatus.PENDING

        with pytest.raises(ActivationPendingError):
            ledger.request_activation(user.id, "proof-002")

        ledger.approve(tx.id)
        status, codes = ledger.list_referral_codes(user.id)
        assert status == ReferralStatus.ACTIVE
        assert len(codes) == 4
        assert all(CODE_PATTERN.match(c.code) for c in codes)

        with pytest.raises(AlreadyActiveError):
            ledger.request_activation(user.id, "proof-003")

    def test_rejected_activation_can_retry(self, ledger, user):
        tx = ledger.request_activation(user.id, "proof-001")
        rejected = ledger.reject(tx.id)

        assert rejected.status == TransactionStatus.REJECTED
        assert ledger.get_account(user.id).referral_status == ReferralStatus.INACTIVE
        assert ledger.list_referral_codes(user.id)[1] == []

        ledger.request_activation(user.id, "proof-002")
        assert ledger.get_account(user.id).referral_status == ReferralStatus.PENDING

    def test_activation_does_not_touch_balances(self, ledger, user, fund):
        fund(user.id, 1)
        tx = ledger.request_activation(user.id, "proof-001")
        ledger.approve(tx.id)

        account = ledger.get_account(user.id)
        assert account.balance_gold == Decimal("1")
        assert account.balance_fiat == Decimal("0")


def test_referral_scenario_at_new_buy_price(ledger, admin):
    code = _first_code(ledger, admin.id)
    referee = ledger.register(
        name="Karim", email="karim@example.com", password="secret1", referral_code=code
    )
    bonus = ledger.get_account(admin.id).balance_gold
    assert bonus == Decimal("0.00370370")  # 50 / 13500

    ledger.set_quote(16000, 15000)
    tx = ledger.submit_buy(referee.id, 1)
    ledger.approve(tx.id)

    assert ledger.get_account(referee.id).balance_gold == Decimal("1")
    # 16000 x 0.05 / 16000 = 0.05g
    assert ledger.get_account(admin.id).balance_gold == bonus + Decimal("0.05")
