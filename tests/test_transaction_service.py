from decimal import Decimal

import pytest

from auroapi.core.exceptions import (
    BelowMinimumSellError,
    InsufficientAvailableGoldError,
    InvalidAmountError,
    InvalidStateTransitionError,
    NotFoundError,
)
from auroapi.models.system import PaymentMethod
from auroapi.models.transaction import TransactionStatus, TransactionType


class TestBuy:
    """BUY 요청 - 승인 전까지 잔액 불변"""

    def test_buy_is_deferred_until_approval(self, ledger, user):
        tx = ledger.submit_buy(user.id, "2")

        assert tx.type == TransactionType.BUY
        assert tx.status == TransactionStatus.PENDING
        assert tx.price_per_gram == Decimal("13500.00")
        assert tx.amount_fiat == Decimal("27000.00")
        assert tx.account_name == "Rahim"
        assert ledger.get_account(user.id).balance_gold == Decimal("0")

        approved = ledger.approve(tx.id)

        assert approved.status == TransactionStatus.COMPLETED
        assert approved.decided_at is not None
        assert ledger.get_account(user.id).balance_gold == Decimal("2")

    def test_buy_snapshots_price_at_request(self, ledger, user):
        tx = ledger.submit_buy(user.id, 1)
        ledger.set_quote(20000, 19000)

        assert ledger.approve(tx.id).price_per_gram == Decimal("13500.00")

    def test_rejected_buy_changes_nothing(self, ledger, user):
        tx = ledger.submit_buy(user.id, 1)

        assert ledger.reject(tx.id).status == TransactionStatus.REJECTED
        assert ledger.get_account(user.id).balance_gold == Decimal("0")

    def test_payment_method_name_is_recorded(self, ledger, db, user):
        db.add(PaymentMethod(id="bkash", name="Bkash / Nagad", details="01700000000"))
        db.commit()

        assert ledger.submit_buy(user.id, 1, payment_method_ref="bkash").payment_method_ref == "Bkash / Nagad"
        assert ledger.submit_buy(user.id, 1).payment_method_ref == "External"

    @pytest.mark.parametrize("grams", [0, -1, "abc"])
    def test_invalid_amount(self, ledger, user, grams):
        with pytest.raises(InvalidAmountError):
            ledger.submit_buy(user.id, grams)


class TestSell:
    """SELL 요청 - 즉시 차감, 거절 시 환불"""

    def test_first_sell_minimum(self, ledger, user, fund):
        fund(user.id, 2)

        with pytest.raises(BelowMinimumSellError) as exc_info:
            ledger.submit_sell(user.id, "0.04")
        assert exc_info.value.minimum == Decimal("0.05")

        tx = ledger.submit_sell(user.id, "0.05")
        assert tx.amount_fiat == Decimal("640.00")
        assert tx.price_per_gram == Decimal("12800.00")

    def test_standard_minimum_after_first_sell(self, ledger, user, fund):
        fund(user.id, 5)
        ledger.submit_sell(user.id, "0.05")

        with pytest.raises(BelowMinimumSellError) as exc_info:
            ledger.submit_sell(user.id, "0.5")
        assert exc_info.value.minimum == Decimal("1.00")

        ledger.submit_sell(user.id, "1")

    def test_rejected_sell_does_not_count_as_prior(self, ledger, user, fund):
        fund(user.id, 2)
        tx = ledger.submit_sell(user.id, "0.05")
        ledger.reject(tx.id)

        # 첫 매도 최소 수량이 다시 적용된다
        ledger.submit_sell(user.id, "0.05")

    def test_sell_debits_immediately_and_refunds_on_reject(self, ledger, user, fund):
        fund(user.id, 2)

        tx = ledger.submit_sell(user.id, "0.5")
        assert ledger.get_account(user.id).balance_gold == Decimal("1.5")

        ledger.reject(tx.id)
        assert ledger.get_account(user.id).balance_gold == Decimal("2")
        assert ledger.get_account(user.id).balance_fiat == Decimal("0")

    def test_approved_sell_credits_fiat(self, ledger, user, fund):
        fund(user.id, 2)

        tx = ledger.submit_sell(user.id, "0.5")
        ledger.approve(tx.id)

        account = ledger.get_account(user.id)
        assert account.balance_gold == Decimal("1.5")
        assert account.balance_fiat == Decimal("6400.00")

    def test_cannot_sell_more_than_available(self, ledger, user, fund):
        fund(user.id, 1)

        with pytest.raises(InsufficientAvailableGoldError):
            ledger.submit_sell(user.id, "1.5")
        assert ledger.get_account(user.id).balance_gold == Decimal("1")


class TestDecision:
    def test_decided_transaction_is_terminal(self, ledger, user):
        tx = ledger.submit_buy(user.id, 1)
        ledger.approve(tx.id)

        with pytest.raises(InvalidStateTransitionError):
            ledger.approve(tx.id)
        with pytest.raises(InvalidStateTransitionError):
            ledger.reject(tx.id)
        assert ledger.get_account(user.id).balance_gold == Decimal("1")

    def test_unknown_transaction(self, ledger):
        with pytest.raises(NotFoundError):
            ledger.approve(9999)

    def test_list_transactions_newest_first(self, ledger, user, admin, clock):
        first = ledger.submit_buy(user.id, 1)
        clock.advance(minutes=5)
        second = ledger.submit_buy(user.id, 2)
        ledger.submit_buy(admin.id, 3)

        mine, total = ledger.list_transactions(user.id)
        assert [t.id for t in mine] == [second.id, first.id]
        assert total == 2

        _, everything = ledger.list_transactions(None)
        assert everything == 3

    def test_get_transaction(self, ledger, user):
        tx = ledger.submit_buy(user.id, 1)

        assert ledger.get_transaction(tx.id).amount_gold == Decimal("1")
        with pytest.raises(NotFoundError):
            ledger.get_transaction(tx.id + 100)
