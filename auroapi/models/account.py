from decimal import Decimal
from enum import Enum
from typing import List, Optional, Union

from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, Index, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from auroapi.models.base import BaseModel, BigIntPK


class AccountRole(str, Enum):
    """계정 역할 정의"""

    USER = "USER"  # 일반 사용자
    ADMIN = "ADMIN"  # 관리자

    @classmethod
    def is_admin(cls, role: Union[str, "AccountRole"]) -> bool:
        if isinstance(role, cls):
            role = role.value
        return role == cls.ADMIN.value


class ReferralStatus(str, Enum):
    INACTIVE = "INACTIVE"
    PENDING = "PENDING"  # 활성화 수수료 승인 대기
    ACTIVE = "ACTIVE"


class Account(BaseModel):
    __tablename__ = "accounts"
    __table_args__ = (Index("idx_accounts_email", "email"),)

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    role: Mapped[AccountRole] = mapped_column(
        SAEnum(AccountRole), default=AccountRole.USER, nullable=False
    )

    # 잔액 - fiat(BDT), 금(g), 채굴에 잠긴 금(g)
    balance_fiat: Mapped[Decimal] = mapped_column(
        Numeric(20, 2), default=Decimal("0"), nullable=False
    )
    balance_gold: Mapped[Decimal] = mapped_column(
        Numeric(20, 8), default=Decimal("0"), nullable=False
    )
    locked_gold: Mapped[Decimal] = mapped_column(
        Numeric(20, 8), default=Decimal("0"), nullable=False
    )

    referral_status: Mapped[ReferralStatus] = mapped_column(
        SAEnum(ReferralStatus), default=ReferralStatus.INACTIVE, nullable=False
    )
    # 가입 시 한 번만 설정되는 추천인 (weak reference)
    referred_by_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("accounts.id"), nullable=True
    )

    referral_codes: Mapped[List["ReferralCode"]] = relationship(  # noqa: F821
        "ReferralCode",
        back_populates="owner",
        order_by="ReferralCode.id",
        foreign_keys="ReferralCode.account_id",
    )

    def __repr__(self):
        return f"<Account(id={self.id}, email={self.email}, role={self.role})>"

    @property
    def available_gold(self) -> Decimal:
        return (self.balance_gold or Decimal("0")) - (self.locked_gold or Decimal("0"))

    @property
    def is_admin(self) -> bool:
        return AccountRole.is_admin(self.role)
