from typing import List

from sqlalchemy import desc
from sqlalchemy.orm import Session

from auroapi.models.mining import (
    MiningPackage as MiningPackageModel,
    MiningSubscription as MiningSubscriptionModel,
    SubscriptionStatus,
)
from auroapi.schemas.mining import MiningPackageResponse, MiningSubscriptionResponse
from auroapi.repositories.base import BaseRepository


class MiningPackageRepository(BaseRepository[MiningPackageModel, MiningPackageResponse]):
    """채굴 패키지 템플릿 리포지토리"""

    def __init__(self, db: Session):
        super().__init__(MiningPackageModel, MiningPackageResponse, db)

    def list_packages(self) -> List[MiningPackageModel]:
        return self.db.query(self.model_class).order_by(self.model_class.cost).all()


class MiningSubscriptionRepository(
    BaseRepository[MiningSubscriptionModel, MiningSubscriptionResponse]
):
    """채굴 구독 리포지토리"""

    def __init__(self, db: Session):
        super().__init__(MiningSubscriptionModel, MiningSubscriptionResponse, db)

    def list_for_account(self, account_id: int) -> List[MiningSubscriptionModel]:
        """계정의 구독 목록 (최신순)"""
        return (
            self.db.query(self.model_class)
            .filter(self.model_class.account_id == account_id)
            .order_by(desc(self.model_class.id))
            .all()
        )

    def list_active_for_update(self, account_id: int) -> List[MiningSubscriptionModel]:
        return (
            self.db.query(self.model_class)
            .filter(
                self.model_class.account_id == account_id,
                self.model_class.status == SubscriptionStatus.ACTIVE,
            )
            .order_by(self.model_class.id)
            .with_for_update()
            .all()
        )
