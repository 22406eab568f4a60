"""
거래 원장 서비스 - BUY / SELL / ACTIVATION 요청과 승인 상태 머신

상태 전이: PENDING -> COMPLETED | REJECTED (종결, 이후 불변)

BUY 와 SELL 의 비대칭은 의도된 업무 규칙이다.
- BUY: 입금 확인 전이므로 승인 시점에 금을 지급한다.
- SELL: 동일한 금을 여러 매도 요청에 중복 사용하지 못하도록 요청 시점에 즉시 차감한다.
"""

import logging
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from auroapi.config import Settings
from auroapi.core.exceptions import (
    BelowMinimumSellError,
    InsufficientAvailableGoldError,
    InvalidAmountError,
    InvalidStateTransitionError,
    NotFoundError,
)
from auroapi.models.account import Account
from auroapi.models.transaction import Transaction, TransactionStatus, TransactionType
from auroapi.repositories.account_repository import AccountRepository
from auroapi.repositories.system_repository import SystemRepository
from auroapi.repositories.transaction_repository import TransactionRepository
from auroapi.services.price_service import PriceService
from auroapi.services.referral_service import ReferralService
from auroapi.utils.money import Number, quantize_fiat, quantize_grams, to_decimal
from auroapi.utils.timezone_utils import Clock, utc_now

logger = logging.getLogger(__name__)

EXTERNAL_PAYMENT_METHOD = "External"


class TransactionService:
    """거래 요청 생성 및 관리자 승인/거절 처리"""

    def __init__(
        self,
        db: Session,
        settings: Settings,
        price_service: PriceService,
        referral_service: ReferralService,
        clock: Clock = utc_now,
    ):
        self.db = db
        self.settings = settings
        self.price_service = price_service
        self.referral_service = referral_service
        self.clock = clock
        self.tx_repo = TransactionRepository(db)
        self.account_repo = AccountRepository(db)
        self.system_repo = SystemRepository(db)

    @staticmethod
    def _positive_grams(grams: Number) -> Decimal:
        try:
            value = quantize_grams(to_decimal(grams))
        except (ArithmeticError, ValueError, TypeError):
            raise InvalidAmountError(details={"grams": str(grams)})
        if value <= 0:
            raise InvalidAmountError(details={"grams": str(grams)})
        return value

    def submit_buy(
        self,
        account: Account,
        grams: Number,
        payment_method_ref: Optional[str] = None,
        proof_ref: Optional[str] = None,
    ) -> Transaction:
        """금 매수 요청 - 현재 매수가를 스냅샷하고 PENDING 거래 생성 (잔액 변화 없음)"""
        amount_gold = self._positive_grams(grams)
        price_per_gram = self.price_service.buy_price()

        payment_method = (
            self.system_repo.get_payment_method(payment_method_ref)
            if payment_method_ref
            else None
        )

        tx = Transaction(
            account_id=account.id,
            account_name=account.name,
            type=TransactionType.BUY,
            status=TransactionStatus.PENDING,
            amount_gold=amount_gold,
            amount_fiat=quantize_fiat(amount_gold * price_per_gram),
            price_per_gram=price_per_gram,
            payment_method_ref=payment_method.name if payment_method else EXTERNAL_PAYMENT_METHOD,
            proof_ref=proof_ref,
            requested_at=self.clock(),
        )
        return self.tx_repo.add(tx)

    def minimum_sell_grams(self, account_id: int) -> Tuple[Decimal, bool]:
        """매도 최소 수량과 첫 매도 여부

        PENDING/COMPLETED 매도가 없으면 FIRST_SELL_MIN_GRAMS, 있으면 STANDARD_SELL_MIN_GRAMS.
        """
        if self.tx_repo.count_prior_sells(account_id) == 0:
            return to_decimal(self.settings.FIRST_SELL_MIN_GRAMS), True
        return to_decimal(self.settings.STANDARD_SELL_MIN_GRAMS), False

    def submit_sell(
        self,
        account: Account,
        grams: Number,
        payout_destination: Optional[str] = None,
    ) -> Transaction:
        """금 매도 요청 - 최소 수량/가용 금 검증 후 즉시 차감하고 PENDING 거래 생성"""
        amount_gold = self._positive_grams(grams)

        minimum, first_sell = self.minimum_sell_grams(account.id)
        if amount_gold < minimum:
            raise BelowMinimumSellError(minimum=minimum, first_sell=first_sell)

        available = account.available_gold
        if amount_gold > available:
            raise InsufficientAvailableGoldError(required=amount_gold, available=available)

        price_per_gram = self.price_service.sell_price()
        account.balance_gold = quantize_grams(to_decimal(account.balance_gold) - amount_gold)

        tx = Transaction(
            account_id=account.id,
            account_name=account.name,
            type=TransactionType.SELL,
            status=TransactionStatus.PENDING,
            amount_gold=amount_gold,
            amount_fiat=quantize_fiat(amount_gold * price_per_gram),
            price_per_gram=price_per_gram,
            payout_destination=payout_destination,
            requested_at=self.clock(),
        )
        return self.tx_repo.add(tx)

    def get_transaction(self, tx_id: int) -> Transaction:
        tx = self.tx_repo.get(tx_id)
        if tx is None:
            raise NotFoundError(f"Transaction {tx_id} not found")
        return tx

    def get_pending_for_update(self, tx_id: int) -> Transaction:
        tx = self.tx_repo.get_for_update(tx_id)
        if tx is None:
            raise NotFoundError(f"Transaction {tx_id} not found")
        if not tx.is_pending:
            raise InvalidStateTransitionError(
                details={"transaction_id": tx_id, "status": tx.status.value}
            )
        return tx

    def approve(self, tx: Transaction, account: Account) -> Transaction:
        """PENDING 거래 승인 - 유형별 잔액 반영 후 COMPLETED"""
        if tx.type == TransactionType.BUY:
            account.balance_gold = quantize_grams(
                to_decimal(account.balance_gold) + to_decimal(tx.amount_gold or 0)
            )
            self.referral_service.apply_purchase_commission(
                account, to_decimal(tx.amount_fiat)
            )
        elif tx.type == TransactionType.SELL:
            # 금은 요청 시점에 이미 차감됨
            account.balance_fiat = quantize_fiat(
                to_decimal(account.balance_fiat) + to_decimal(tx.amount_fiat)
            )
        elif tx.type == TransactionType.ACTIVATION:
            self.referral_service.approve_activation(account)

        tx.status = TransactionStatus.COMPLETED
        tx.decided_at = self.clock()
        return tx

    def reject(self, tx: Transaction, account: Account) -> Transaction:
        """PENDING 거래 거절 - SELL은 차감했던 금 환불, ACTIVATION은 상태 복원"""
        if tx.type == TransactionType.SELL:
            account.balance_gold = quantize_grams(
                to_decimal(account.balance_gold) + to_decimal(tx.amount_gold or 0)
            )
        elif tx.type == TransactionType.ACTIVATION:
            self.referral_service.reject_activation(account)

        tx.status = TransactionStatus.REJECTED
        tx.decided_at = self.clock()
        return tx

    def list_transactions(
        self, account_id: Optional[int] = None, limit: int = 100, offset: int = 0
    ) -> List[Transaction]:
        return self.tx_repo.list_for_account(account_id, limit=limit, offset=offset)

    def count_transactions(self, account_id: Optional[int] = None) -> int:
        return self.tx_repo.count_for_account(account_id)
