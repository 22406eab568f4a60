import enum
from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, Enum, ForeignKey, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from auroapi.models.base import BaseModel, BigIntPK


class SubscriptionStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"


class MiningPackage(BaseModel):
    """채굴 패키지 템플릿 - 수정 가능, 기존 구독에는 소급 적용되지 않음"""

    __tablename__ = "mining_packages"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    cost: Mapped[Decimal] = mapped_column(Numeric(20, 2), nullable=False)
    daily_profit: Mapped[Decimal] = mapped_column(Numeric(20, 2), nullable=False)


class MiningSubscription(BaseModel):
    __tablename__ = "mining_subscriptions"
    __table_args__ = (Index("idx_mining_subscriptions_account", "account_id", "status"),)

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    account_id: Mapped[int] = mapped_column(ForeignKey("accounts.id"), nullable=False)

    # 활성화 시점 패키지 스냅샷
    package_id: Mapped[int] = mapped_column(ForeignKey("mining_packages.id"), nullable=False)
    package_name: Mapped[str] = mapped_column(String(100), nullable=False)
    package_cost: Mapped[Decimal] = mapped_column(Numeric(20, 2), nullable=False)
    daily_profit: Mapped[Decimal] = mapped_column(Numeric(20, 2), nullable=False)

    locked_gold_amount: Mapped[Decimal] = mapped_column(Numeric(20, 8), nullable=False)
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    # 마지막 일일 수익 지급 시점 (정확히 지급 일수만큼만 전진)
    last_payout_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    status: Mapped[SubscriptionStatus] = mapped_column(
        Enum(SubscriptionStatus), default=SubscriptionStatus.ACTIVE, nullable=False
    )

    def __repr__(self):
        return (
            f"<MiningSubscription(id={self.id}, account_id={self.account_id}, "
            f"status={self.status})>"
        )
