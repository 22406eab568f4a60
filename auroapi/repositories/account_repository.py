from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from auroapi.models.account import Account as AccountModel
from auroapi.schemas.account import Account as AccountSchema
from auroapi.repositories.base import BaseRepository


class AccountRepository(BaseRepository[AccountModel, AccountSchema]):
    """계정 리포지토리"""

    def __init__(self, db: Session):
        super().__init__(AccountModel, AccountSchema, db)

    def get_by_email(self, email: str) -> Optional[AccountModel]:
        """이메일로 계정 조회 (대소문자 무시)"""
        return (
            self.db.query(self.model_class)
            .filter(func.lower(self.model_class.email) == email.lower())
            .first()
        )

    def list_accounts(self, limit: int = 100, offset: int = 0) -> List[AccountModel]:
        return (
            self.db.query(self.model_class)
            .order_by(self.model_class.id)
            .offset(offset)
            .limit(limit)
            .all()
        )
