from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from auroapi.models.base import BaseModel, BigIntPK


class ReferralCode(BaseModel):
    """추천 코드 - 한 계정이 소유하며 피추천인 가입 시 정확히 한 번 소모된다."""

    __tablename__ = "referral_codes"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    account_id: Mapped[int] = mapped_column(ForeignKey("accounts.id"), nullable=False)
    code: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)
    is_used: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    used_by_account_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("accounts.id"), nullable=True
    )
    used_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    owner = relationship(
        "Account", back_populates="referral_codes", foreign_keys=[account_id]
    )

    def __repr__(self):
        return f"<ReferralCode(code={self.code}, is_used={self.is_used})>"
