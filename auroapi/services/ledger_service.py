"""
원장 파사드(Ledger Facade)

모든 변경 요청(거래, 승인, 채굴 활성화, 정산)의 단일 진입점.

- 각 변경 호출은 공유 잠금을 잡은 상태에서 하나의 DB 트랜잭션으로 실행되고,
  성공 시 commit, 예외 발생 시 rollback 후 그대로 전파한다 (부분 반영 없음).
- 계정 조회/변경 전에는 항상 채굴 정산(reconcile)을 먼저 수행한다.
- 하위 서비스는 commit 하지 않는다.
"""

import logging
import threading
from contextlib import contextmanager
from decimal import Decimal
from typing import Iterator, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from auroapi.config import Settings
from auroapi.core.security import hash_password, verify_password
from auroapi.core.exceptions import (
    AuthenticationError,
    BaseAPIException,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from auroapi.models.account import Account, AccountRole, ReferralStatus
from auroapi.models.system import SystemConfig
from auroapi.models.transaction import Transaction
from auroapi.repositories.account_repository import AccountRepository
from auroapi.repositories.system_repository import SystemRepository
from auroapi.schemas.account import Account as AccountSchema
from auroapi.schemas.account import AccountListItem, ReferralCodeItem
from auroapi.schemas.mining import MiningPackageResponse, MiningSubscriptionResponse
from auroapi.schemas.price import GoldQuote, PriceHistoryItem
from auroapi.schemas.system import PaymentMethodResponse, SystemConfigResponse
from auroapi.schemas.transaction import TransactionResponse
from auroapi.services.mining_service import MiningService
from auroapi.services.price_service import PriceService
from auroapi.services.referral_service import ReferralService
from auroapi.services.transaction_service import TransactionService
from auroapi.utils.money import Number, checked_fiat, checked_rate, quantize_rate
from auroapi.utils.timezone_utils import Clock, utc_now

logger = logging.getLogger(__name__)


class LedgerService:
    """계정 원장과 채굴 정산 엔진의 파사드"""

    def __init__(
        self,
        db: Session,
        settings: Settings,
        lock: threading.RLock,
        clock: Clock = utc_now,
    ):
        self.db = db
        self.settings = settings
        self.lock = lock
        self.clock = clock

        self.account_repo = AccountRepository(db)
        self.system_repo = SystemRepository(db)
        self.price_service = PriceService(db, settings, clock=clock)
        self.referral_service = ReferralService(db, settings, self.price_service, clock=clock)
        self.transaction_service = TransactionService(
            db, settings, self.price_service, self.referral_service, clock=clock
        )
        self.mining_service = MiningService(db, settings, self.price_service, clock=clock)

    @contextmanager
    def _atomic(self) -> Iterator[None]:
        """공유 잠금 + 단일 DB 트랜잭션"""
        with self.lock:
            try:
                yield
                self.db.commit()
            except BaseAPIException as exc:
                self.db.rollback()
                logger.warning(f"Ledger operation rejected: {exc.error_code} {exc.message}")
                raise
            except Exception:
                self.db.rollback()
                raise

    def _load_account(self, account_id: int) -> Account:
        """계정을 잠금 조회하고 채굴 정산을 먼저 반영"""
        account = self.account_repo.get_for_update(account_id)
        if account is None:
            raise NotFoundError(f"Account {account_id} not found")
        self.mining_service.reconcile(account)
        return account

    # ------------------------------------------------------------------
    # 계정 / 인증
    # ------------------------------------------------------------------

    def register(
        self,
        name: str,
        email: str,
        password: str,
        referral_code: Optional[str] = None,
        role: AccountRole = AccountRole.USER,
    ) -> AccountSchema:
        """계정 생성. 추천 코드가 있으면 같은 원자 단위 안에서 사용 처리"""
        with self._atomic():
            if self.account_repo.get_by_email(email) is not None:
                raise ConflictError(
                    "Account already exists", details={"email": email}, error_code="ACCOUNT_001"
                )

            account = Account(
                name=name,
                email=email.lower(),
                password_hash=hash_password(password),
                role=role,
                balance_fiat=Decimal("0"),
                balance_gold=Decimal("0"),
                locked_gold=Decimal("0"),
                referral_status=ReferralStatus.INACTIVE,
            )
            try:
                self.account_repo.add(account)
            except IntegrityError:
                raise ConflictError(
                    "Account already exists", details={"email": email}, error_code="ACCOUNT_001"
                )

            if referral_code:
                referrer = self.referral_service.redeem_code(referral_code, account)
                account.referred_by_id = referrer.id

            self.db.flush()
            logger.info(
                f"Registered account {account.id} ({account.email}) referred_by={account.referred_by_id}"
            )
            return AccountSchema.model_validate(account)

    def authenticate(self, email: str, password: str) -> AccountSchema:
        """로그인 - 자격 증명 확인 후 정산된 계정 반환"""
        with self._atomic():
            account = self.account_repo.get_by_email(email)
            if account is None or not verify_password(account.password_hash, password):
                raise AuthenticationError("Invalid credentials")
            account = self._load_account(account.id)
            return AccountSchema.model_validate(account)

    def get_account(self, account_id: int) -> AccountSchema:
        with self._atomic():
            return AccountSchema.model_validate(self._load_account(account_id))

    def find_account(self, account_id: int) -> Optional[AccountSchema]:
        """정산 없이 계정 조회 (인증 의존성용)"""
        return self.account_repo.to_schema(self.account_repo.get(account_id))

    def list_accounts(self, limit: int = 100, offset: int = 0) -> List[AccountListItem]:
        return [
            AccountListItem.model_validate(account)
            for account in self.account_repo.list_accounts(limit=limit, offset=offset)
        ]

    # ------------------------------------------------------------------
    # 시세
    # ------------------------------------------------------------------

    def get_quote(self) -> GoldQuote:
        with self._atomic():
            return self.price_service.get_quote()

    def set_quote(self, buy: Number, sell: Number) -> GoldQuote:
        with self._atomic():
            quote = self.price_service.set_quote(buy, sell)
            logger.info(f"Gold quote updated buy={quote.buy} sell={quote.sell} trend={quote.trend.value}")
            return quote

    def get_price_history(self) -> List[PriceHistoryItem]:
        return self.price_service.get_history()

    # ------------------------------------------------------------------
    # 거래
    # ------------------------------------------------------------------

    def submit_buy(
        self,
        account_id: int,
        grams: Number,
        payment_method_ref: Optional[str] = None,
        proof_ref: Optional[str] = None,
    ) -> TransactionResponse:
        with self._atomic():
            account = self._load_account(account_id)
            tx = self.transaction_service.submit_buy(
                account, grams, payment_method_ref=payment_method_ref, proof_ref=proof_ref
            )
            logger.info(
                f"BUY request {tx.id} by account {account_id}: {tx.amount_gold}g @ {tx.price_per_gram}"
            )
            return TransactionResponse.model_validate(tx)

    def submit_sell(
        self, account_id: int, grams: Number, payout_destination: Optional[str] = None
    ) -> TransactionResponse:
        with self._atomic():
            account = self._load_account(account_id)
            tx = self.transaction_service.submit_sell(
                account, grams, payout_destination=payout_destination
            )
            logger.info(
                f"SELL request {tx.id} by account {account_id}: {tx.amount_gold}g @ {tx.price_per_gram} "
                f"(gold debited, balance={account.balance_gold})"
            )
            return TransactionResponse.model_validate(tx)

    def request_activation(self, account_id: int, proof_ref: str) -> TransactionResponse:
        with self._atomic():
            account = self._load_account(account_id)
            tx = self.referral_service.request_activation(account, proof_ref)
            logger.info(f"ACTIVATION request {tx.id} by account {account_id}")
            return TransactionResponse.model_validate(tx)

    def _decide(self, tx_id: int, approve: bool) -> TransactionResponse:
        with self._atomic():
            tx: Transaction = self.transaction_service.get_pending_for_update(tx_id)
            account = self._load_account(tx.account_id)
            if approve:
                self.transaction_service.approve(tx, account)
            else:
                self.transaction_service.reject(tx, account)
            self.db.flush()
            logger.info(
                f"{tx.type.value} transaction {tx.id} {tx.status.value} for account {account.id}"
            )
            return TransactionResponse.model_validate(tx)

    def approve(self, tx_id: int) -> TransactionResponse:
        return self._decide(tx_id, approve=True)

    def reject(self, tx_id: int) -> TransactionResponse:
        return self._decide(tx_id, approve=False)

    def get_transaction(self, tx_id: int) -> TransactionResponse:
        return TransactionResponse.model_validate(self.transaction_service.get_transaction(tx_id))

    def list_transactions(
        self, account_id: Optional[int] = None, limit: int = 100, offset: int = 0
    ) -> Tuple[List[TransactionResponse], int]:
        transactions = self.transaction_service.list_transactions(
            account_id, limit=limit, offset=offset
        )
        total = self.transaction_service.count_transactions(account_id)
        return [TransactionResponse.model_validate(tx) for tx in transactions], total

    # ------------------------------------------------------------------
    # 추천
    # ------------------------------------------------------------------

    def list_referral_codes(self, account_id: int) -> Tuple[ReferralStatus, List[ReferralCodeItem]]:
        account = self.account_repo.get(account_id)
        if account is None:
            raise NotFoundError(f"Account {account_id} not found")
        codes = self.referral_service.list_codes(account_id)
        return account.referral_status, [ReferralCodeItem.model_validate(c) for c in codes]

    # ------------------------------------------------------------------
    # 채굴
    # ------------------------------------------------------------------

    def list_mining_packages(self) -> List[MiningPackageResponse]:
        return [
            MiningPackageResponse.model_validate(p)
            for p in self.mining_service.list_packages()
        ]

    def upsert_mining_package(
        self,
        name: str,
        cost: Number,
        daily_profit: Number,
        package_id: Optional[int] = None,
    ) -> MiningPackageResponse:
        details = {"cost": str(cost), "daily_profit": str(daily_profit)}
        try:
            cost_value = checked_fiat(cost)
            profit_value = checked_fiat(daily_profit)
        except (ValueError, TypeError):
            raise ValidationError("Invalid package cost or daily profit", details=details)
        if cost_value <= 0 or profit_value < 0:
            raise ValidationError(
                "Package cost must be positive and daily profit non-negative",
                details=details,
            )
        with self._atomic():
            package = self.mining_service.upsert_package(
                name, cost_value, profit_value, package_id=package_id
            )
            logger.info(f"Mining package {package.id} saved ({package.name})")
            return MiningPackageResponse.model_validate(package)

    def activate_mining(self, account_id: int, package_id: int) -> MiningSubscriptionResponse:
        with self._atomic():
            account = self._load_account(account_id)
            subscription = self.mining_service.activate(account, package_id)
            logger.info(
                f"Mining subscription {subscription.id} activated for account {account_id}: "
                f"locked {subscription.locked_gold_amount}g"
            )
            return MiningSubscriptionResponse.model_validate(subscription)

    def list_mining_subscriptions(self, account_id: int) -> List[MiningSubscriptionResponse]:
        with self._atomic():
            self._load_account(account_id)
            return [
                MiningSubscriptionResponse.model_validate(s)
                for s in self.mining_service.list_subscriptions(account_id)
            ]

    # ------------------------------------------------------------------
    # 시스템 설정 / 결제 수단
    # ------------------------------------------------------------------

    def _config(self) -> SystemConfig:
        config = self.system_repo.get_config()
        if config is None:
            config = SystemConfig(
                id=1,
                referral_commission_rate=quantize_rate(
                    self.settings.DEFAULT_REFERRAL_COMMISSION_RATE
                ),
            )
            self.system_repo.add(config)
        return config

    def get_system_config(self) -> SystemConfigResponse:
        with self._atomic():
            return SystemConfigResponse.model_validate(self._config())

    def set_referral_commission_rate(self, rate: Number) -> SystemConfigResponse:
        try:
            value = checked_rate(rate)
        except (ValueError, TypeError):
            raise ValidationError("Invalid referral commission rate", details={"rate": str(rate)})
        if value < 0 or value > 1:
            raise ValidationError(
                "Referral commission rate must be between 0 and 1",
                details={"rate": str(rate)},
            )
        with self._atomic():
            config = self._config()
            config.referral_commission_rate = value
            logger.info(f"Referral commission rate set to {value}")
            return SystemConfigResponse.model_validate(config)

    def list_payment_methods(self) -> List[PaymentMethodResponse]:
        return [
            PaymentMethodResponse.model_validate(m)
            for m in self.system_repo.list_payment_methods()
        ]

    def update_payment_method(self, method_id: str, details: str) -> PaymentMethodResponse:
        with self._atomic():
            method = self.system_repo.get_payment_method(method_id)
            if method is None:
                raise NotFoundError(f"Payment method {method_id} not found")
            method.details = details
            return PaymentMethodResponse.model_validate(method)
