import logging
import secrets
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

from auroapi.config import Settings
from auroapi.core.exceptions import (
    ActivationPendingError,
    AlreadyActiveError,
    InvalidReferralCodeError,
)
from auroapi.models.account import Account, ReferralStatus
from auroapi.models.referral import ReferralCode
from auroapi.models.transaction import Transaction, TransactionStatus, TransactionType
from auroapi.repositories.account_repository import AccountRepository
from auroapi.repositories.referral_repository import ReferralRepository
from auroapi.repositories.system_repository import SystemRepository
from auroapi.repositories.transaction_repository import TransactionRepository
from auroapi.services.price_service import PriceService
from auroapi.utils.money import fiat_to_grams, quantize_fiat, quantize_grams, to_decimal
from auroapi.utils.timezone_utils import Clock, utc_now

logger = logging.getLogger(__name__)

CODE_PREFIX = "REF"
MAX_CODE_ATTEMPTS = 10


class ReferralService:
    """추천 프로그램 - 코드 발급/사용, 활성화 상태 머신, 구매 수수료"""

    def __init__(
        self,
        db: Session,
        settings: Settings,
        price_service: PriceService,
        clock: Clock = utc_now,
    ):
        self.db = db
        self.settings = settings
        self.price_service = price_service
        self.clock = clock
        self.account_repo = AccountRepository(db)
        self.referral_repo = ReferralRepository(db)
        self.tx_repo = TransactionRepository(db)
        self.system_repo = SystemRepository(db)

    def redeem_code(self, code: str, referee: Account) -> Account:
        """가입 시 추천 코드 사용

        미사용 코드만 허용하며, 코드 소유자에게 가입 보너스(fiat)를
        현재 매수가 기준 금으로 환산하여 지급한다.

        Returns:
            Account: 추천인 계정
        """
        referral_code = self.referral_repo.get_by_code_for_update(code)
        if referral_code is None or referral_code.is_used:
            raise InvalidReferralCodeError(code)

        referrer = self.account_repo.get_for_update(referral_code.account_id)
        if referrer is None:
            raise InvalidReferralCodeError(code)

        referral_code.is_used = True
        referral_code.used_by_account_id = referee.id
        referral_code.used_at = self.clock()

        bonus_gold = fiat_to_grams(
            self.settings.REFERRAL_SIGNUP_BONUS_FIAT, self.price_service.buy_price()
        )
        referrer.balance_gold = quantize_grams(to_decimal(referrer.balance_gold) + bonus_gold)

        logger.info(
            f"Referral code {code} redeemed by account {referee.id}; "
            f"credited {bonus_gold}g to referrer {referrer.id}"
        )
        return referrer

    def request_activation(self, account: Account, proof_ref: str) -> Transaction:
        """추천 프로그램 활성화 요청 - INACTIVE 상태에서만 허용"""
        if account.referral_status == ReferralStatus.ACTIVE:
            raise AlreadyActiveError()
        if account.referral_status == ReferralStatus.PENDING:
            raise ActivationPendingError()

        tx = Transaction(
            account_id=account.id,
            account_name=account.name,
            type=TransactionType.ACTIVATION,
            status=TransactionStatus.PENDING,
            amount_gold=None,
            amount_fiat=quantize_fiat(self.settings.REFERRAL_ACTIVATION_FEE_FIAT),
            price_per_gram=None,
            proof_ref=proof_ref,
            requested_at=self.clock(),
        )
        self.tx_repo.add(tx)
        account.referral_status = ReferralStatus.PENDING
        return tx

    def approve_activation(self, account: Account) -> List[ReferralCode]:
        """활성화 승인 - ACTIVE 전환 후 고유 코드 발급"""
        if account.referral_status == ReferralStatus.ACTIVE:
            raise AlreadyActiveError()

        account.referral_status = ReferralStatus.ACTIVE
        codes = self._issue_codes(account)
        logger.info(
            f"Referral activated for account {account.id}: {[c.code for c in codes]}"
        )
        return codes

    def reject_activation(self, account: Account) -> None:
        """활성화 거절 - INACTIVE로 되돌려 재요청 허용"""
        account.referral_status = ReferralStatus.INACTIVE

    def apply_purchase_commission(
        self, buyer: Account, tx_fiat_amount: Decimal
    ) -> Optional[Decimal]:
        """추천인 구매 수수료 지급

        수수료(fiat) = 거래 금액 x 현재 수수료율, 금 환산은 승인 시점의 현재 매수가.
        추천인이 없으면 아무것도 하지 않는다.

        Returns:
            Optional[Decimal]: 지급된 금 수량 (g), 지급 없으면 None
        """
        if buyer.referred_by_id is None:
            return None

        referrer = self.account_repo.get_for_update(buyer.referred_by_id)
        if referrer is None:
            logger.warning(
                f"Referrer {buyer.referred_by_id} of account {buyer.id} not found; commission skipped"
            )
            return None

        config = self.system_repo.get_config()
        rate = (
            to_decimal(config.referral_commission_rate)
            if config is not None
            else to_decimal(self.settings.DEFAULT_REFERRAL_COMMISSION_RATE)
        )
        commission_fiat = to_decimal(tx_fiat_amount) * rate
        commission_gold = fiat_to_grams(commission_fiat, self.price_service.buy_price())
        referrer.balance_gold = quantize_grams(
            to_decimal(referrer.balance_gold) + commission_gold
        )

        logger.info(
            f"Commission {commission_gold}g (rate={rate}) credited to referrer "
            f"{referrer.id} for purchase by account {buyer.id}"
        )
        return commission_gold

    def list_codes(self, account_id: int) -> List[ReferralCode]:
        return self.referral_repo.list_for_account(account_id)

    def issue_codes(self, account: Account) -> List[ReferralCode]:
        """관리자 시드 등 승인 절차 없이 코드를 발급할 때 사용"""
        account.referral_status = ReferralStatus.ACTIVE
        return self._issue_codes(account)

    def _issue_codes(self, account: Account) -> List[ReferralCode]:
        base = self._fresh_base_token()
        codes = []
        for seq in range(1, self.settings.REFERRAL_CODES_PER_ACTIVATION + 1):
            code = ReferralCode(code=f"{CODE_PREFIX}-{base}-{seq:02d}", is_used=False)
            account.referral_codes.append(code)
            codes.append(code)
        self.db.flush()
        return codes

    def _fresh_base_token(self) -> str:
        for _ in range(MAX_CODE_ATTEMPTS):
            base = secrets.token_hex(3).upper()
            if not self.referral_repo.code_exists(f"{CODE_PREFIX}-{base}-01"):
                return base
        raise RuntimeError("Could not generate a unique referral code base")
