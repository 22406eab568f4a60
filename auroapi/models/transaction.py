"""
거래 원장 데이터 모델

BUY / SELL / ACTIVATION 요청을 저장한다. 요청은 PENDING 상태로 생성되고
관리자 결정으로 COMPLETED 또는 REJECTED 로 정확히 한 번 전이한다.
가격(price_per_gram)과 수량(amount_gold)은 생성 시점에 고정되며 이후 재계산되지 않는다.
"""

import enum
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import DateTime, Enum, ForeignKey, Index, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from auroapi.models.base import BaseModel, BigIntPK


class TransactionType(str, enum.Enum):
    BUY = "BUY"
    SELL = "SELL"
    ACTIVATION = "ACTIVATION"  # 추천 프로그램 활성화 수수료


class TransactionStatus(str, enum.Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    REJECTED = "REJECTED"


class Transaction(BaseModel):
    __tablename__ = "transactions"
    __table_args__ = (
        Index("idx_transactions_account_type", "account_id", "type", "status"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    account_id: Mapped[int] = mapped_column(ForeignKey("accounts.id"), nullable=False)
    # 관리자 화면 표시용 요청자 이름 스냅샷
    account_name: Mapped[str] = mapped_column(String(100), nullable=False)
    type: Mapped[TransactionType] = mapped_column(Enum(TransactionType), nullable=False)
    status: Mapped[TransactionStatus] = mapped_column(
        Enum(TransactionStatus), default=TransactionStatus.PENDING, nullable=False
    )

    amount_gold: Mapped[Optional[Decimal]] = mapped_column(Numeric(20, 8), nullable=True)
    amount_fiat: Mapped[Decimal] = mapped_column(Numeric(20, 2), nullable=False)
    price_per_gram: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(20, 2), nullable=True
    )

    proof_ref: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    payment_method_ref: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    payout_destination: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    requested_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    decided_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def __repr__(self):
        return (
            f"<Transaction(id={self.id}, type={self.type}, status={self.status}, "
            f"account_id={self.account_id})>"
        )

    @property
    def is_pending(self) -> bool:
        return self.status == TransactionStatus.PENDING
