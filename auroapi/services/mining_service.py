"""
채굴(Mining) 구독 서비스

- 활성화: 패키지 가격을 현재 매도가로 금 환산하여 잠그고 구독을 생성
- 정산(reconcile): 계정 조회/변경 전에 호출되는 지연 정산.
  경과한 완전한 일수만큼 일일 수익을 지급하고 지급 커서를 정확히 그 일수만큼 전진시킨다.
  만기(now >= end_date)가 되면 잠긴 금을 해제하고 COMPLETED 로 전환한다.
  같은 경과일 내에서 여러 번 호출해도 중복 지급되지 않는다.
"""

import logging
from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

from auroapi.config import Settings
from auroapi.core.exceptions import InsufficientAvailableGoldError, NotFoundError
from auroapi.models.account import Account
from auroapi.models.mining import MiningPackage, MiningSubscription, SubscriptionStatus
from auroapi.repositories.mining_repository import (
    MiningPackageRepository,
    MiningSubscriptionRepository,
)
from auroapi.services.price_service import PriceService
from auroapi.utils.money import (
    ZERO,
    Number,
    fiat_to_grams,
    quantize_fiat,
    quantize_grams,
    to_decimal,
)
from auroapi.utils.timezone_utils import ONE_DAY, Clock, ensure_utc, utc_now, whole_days_between

logger = logging.getLogger(__name__)


@dataclass
class ReconcileResult:
    """정산 결과 요약"""

    credited_fiat: Decimal = ZERO
    days_paid: int = 0
    released_gold: Decimal = ZERO
    completed_subscriptions: int = 0

    @property
    def changed(self) -> bool:
        return self.days_paid > 0 or self.completed_subscriptions > 0


class MiningService:
    """채굴 패키지 템플릿과 구독 수명주기 관리"""

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
        self.package_repo = MiningPackageRepository(db)
        self.subscription_repo = MiningSubscriptionRepository(db)

    # ------------------------------------------------------------------
    # 패키지 템플릿
    # ------------------------------------------------------------------

    def list_packages(self) -> List[MiningPackage]:
        return self.package_repo.list_packages()

    def upsert_package(
        self,
        name: str,
        cost: Number,
        daily_profit: Number,
        package_id: Optional[int] = None,
    ) -> MiningPackage:
        """패키지 생성 또는 수정. 기존 구독은 스냅샷을 유지하므로 영향 없음"""
        if package_id is None:
            package = MiningPackage(
                name=name,
                cost=quantize_fiat(cost),
                daily_profit=quantize_fiat(daily_profit),
            )
            return self.package_repo.add(package)

        package = self.package_repo.get_for_update(package_id)
        if package is None:
            raise NotFoundError(f"Mining package {package_id} not found")
        package.name = name
        package.cost = quantize_fiat(cost)
        package.daily_profit = quantize_fiat(daily_profit)
        self.db.flush()
        return package

    # ------------------------------------------------------------------
    # 구독
    # ------------------------------------------------------------------

    def activate(self, account: Account, package_id: int) -> MiningSubscription:
        """채굴 활성화 - 필요 금 = 패키지 가격 / 현재 매도가"""
        package = self.package_repo.get(package_id)
        if package is None:
            raise NotFoundError(f"Mining package {package_id} not found")

        required_gold = fiat_to_grams(package.cost, self.price_service.sell_price(), round_up=True)
        available = account.available_gold
        if available < required_gold:
            raise InsufficientAvailableGoldError(
                required=required_gold,
                available=available,
                message=(
                    f"Insufficient gold value. You need approx {required_gold:.2f}g "
                    f"available to lock {package.cost}."
                ),
            )

        account.locked_gold = quantize_grams(to_decimal(account.locked_gold) + required_gold)

        now = self.clock()
        subscription = MiningSubscription(
            account_id=account.id,
            package_id=package.id,
            package_name=package.name,
            package_cost=package.cost,
            daily_profit=package.daily_profit,
            locked_gold_amount=required_gold,
            start_date=now,
            end_date=now + timedelta(days=self.settings.MINING_TERM_DAYS),
            last_payout_at=now,
            status=SubscriptionStatus.ACTIVE,
        )
        return self.subscription_repo.add(subscription)

    def reconcile(self, account: Account) -> ReconcileResult:
        """계정의 ACTIVE 구독에 대해 밀린 일일 수익 지급 및 만기 처리"""
        now = self.clock()
        result = ReconcileResult()

        for subscription in self.subscription_repo.list_active_for_update(account.id):
            end_date = ensure_utc(subscription.end_date)
            cursor = ensure_utc(subscription.last_payout_at)

            # 만기 후 첫 정산에서도 밀린 일수 전체를 지급하고, 같은 패스에서 종료된다
            days_elapsed = whole_days_between(cursor, now)
            if days_elapsed >= 1:
                profit = quantize_fiat(to_decimal(subscription.daily_profit) * days_elapsed)
                account.balance_fiat = quantize_fiat(to_decimal(account.balance_fiat) + profit)
                subscription.last_payout_at = cursor + ONE_DAY * days_elapsed
                result.credited_fiat += profit
                result.days_paid += days_elapsed

            if now >= end_date:
                locked = to_decimal(account.locked_gold) - to_decimal(subscription.locked_gold_amount)
                account.locked_gold = quantize_grams(max(ZERO, locked))
                subscription.status = SubscriptionStatus.COMPLETED
                result.released_gold += to_decimal(subscription.locked_gold_amount)
                result.completed_subscriptions += 1

        if result.changed:
            self.db.flush()
            logger.info(
                f"Reconciled mining for account {account.id}: "
                f"+{result.credited_fiat} fiat over {result.days_paid} day(s), "
                f"released {result.released_gold}g from {result.completed_subscriptions} subscription(s)"
            )
        return result

    def list_subscriptions(self, account_id: int) -> List[MiningSubscription]:
        return self.subscription_repo.list_for_account(account_id)
