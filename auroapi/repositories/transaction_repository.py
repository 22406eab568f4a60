from typing import List, Optional

from sqlalchemy import desc
from sqlalchemy.orm import Session

from auroapi.models.transaction import (
    Transaction as TransactionModel,
    TransactionStatus,
    TransactionType,
)
from auroapi.schemas.transaction import TransactionResponse
from auroapi.repositories.base import BaseRepository


class TransactionRepository(BaseRepository[TransactionModel, TransactionResponse]):
    """거래 원장 리포지토리"""

    def __init__(self, db: Session):
        super().__init__(TransactionModel, TransactionResponse, db)

    def list_for_account(
        self, account_id: Optional[int] = None, limit: int = 100, offset: int = 0
    ) -> List[TransactionModel]:
        """거래 목록 (최신순). account_id가 없으면 전체"""
        query = self.db.query(self.model_class)
        if account_id is not None:
            query = query.filter(self.model_class.account_id == account_id)
        return (
            query.order_by(desc(self.model_class.id)).offset(offset).limit(limit).all()
        )

    def count_for_account(self, account_id: Optional[int] = None) -> int:
        query = self.db.query(self.model_class)
        if account_id is not None:
            query = query.filter(self.model_class.account_id == account_id)
        return query.count()

    def count_prior_sells(self, account_id: int) -> int:
        """매도 최소 수량 판정용 - PENDING/COMPLETED 매도 건수"""
        return (
            self.db.query(self.model_class)
            .filter(
                self.model_class.account_id == account_id,
                self.model_class.type == TransactionType.SELL,
                self.model_class.status.in_(
                    [TransactionStatus.PENDING, TransactionStatus.COMPLETED]
                ),
            )
            .count()
        )
