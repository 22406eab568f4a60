from typing import List, Optional

from sqlalchemy.orm import Session

from auroapi.models.referral import ReferralCode as ReferralCodeModel
from auroapi.schemas.account import ReferralCodeItem
from auroapi.repositories.base import BaseRepository


class ReferralRepository(BaseRepository[ReferralCodeModel, ReferralCodeItem]):
    """추천 코드 리포지토리"""

    def __init__(self, db: Session):
        super().__init__(ReferralCodeModel, ReferralCodeItem, db)

    def get_by_code_for_update(self, code: str) -> Optional[ReferralCodeModel]:
        return (
            self.db.query(self.model_class)
            .filter(self.model_class.code == code)
            .with_for_update()
            .first()
        )

    def code_exists(self, code: str) -> bool:
        return self.exists({"code": code})

    def list_for_account(self, account_id: int) -> List[ReferralCodeModel]:
        return (
            self.db.query(self.model_class)
            .filter(self.model_class.account_id == account_id)
            .order_by(self.model_class.id)
            .all()
        )
