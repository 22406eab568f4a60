from decimal import Decimal

from sqlalchemy import Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from auroapi.models.base import BaseModel


class SystemConfig(BaseModel):
    """전역 설정 (단일 행)"""

    __tablename__ = "system_config"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    referral_commission_rate: Mapped[Decimal] = mapped_column(
        Numeric(6, 4), nullable=False
    )


class PaymentMethod(BaseModel):
    """입금 안내용 결제 수단 (예: bank, bkash)"""

    __tablename__ = "payment_methods"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    details: Mapped[str] = mapped_column(Text, nullable=False, default="")
