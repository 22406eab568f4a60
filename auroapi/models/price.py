"""
금 시세 데이터 모델

gold_prices 는 현재 매수/매도 호가를 담는 단일 행 테이블이고,
price_history 는 최근 매수가 추이(최대 PRICE_HISTORY_LIMIT 건, FIFO)를 저장한다.
"""

import enum
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import Date, DateTime, Enum, Integer, Numeric
from sqlalchemy.orm import Mapped, mapped_column

from auroapi.models.base import Base, BaseModel, BigIntPK, TimestampMixin


class PriceTrend(str, enum.Enum):
    UP = "UP"
    DOWN = "DOWN"
    STABLE = "STABLE"


class GoldPrice(BaseModel):
    __tablename__ = "gold_prices"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    buy: Mapped[Decimal] = mapped_column(Numeric(20, 2), nullable=False, comment="1g 매수가")
    sell: Mapped[Decimal] = mapped_column(Numeric(20, 2), nullable=False, comment="1g 매도가")
    trend: Mapped[PriceTrend] = mapped_column(
        Enum(PriceTrend), default=PriceTrend.STABLE, nullable=False
    )
    last_updated: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class PriceHistoryPoint(Base, TimestampMixin):
    __tablename__ = "price_history"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    recorded_on: Mapped[date] = mapped_column(Date, nullable=False, comment="기록일")
    price: Mapped[Decimal] = mapped_column(Numeric(20, 2), nullable=False, comment="매수가")
