import datetime as dt
from decimal import Decimal
from typing import List

from pydantic import BaseModel, ConfigDict, Field

from auroapi.models.price import PriceTrend


class GoldQuote(BaseModel):
    """현재 금 시세"""

    buy: Decimal = Field(..., description="1g 매수가")
    sell: Decimal = Field(..., description="1g 매도가")
    last_updated: dt.datetime
    trend: PriceTrend

    model_config = ConfigDict(from_attributes=True)


class PriceHistoryItem(BaseModel):
    date: dt.date
    price: Decimal


class PriceHistoryResponse(BaseModel):
    history: List[PriceHistoryItem]


class QuoteUpdateRequest(BaseModel):
    buy: Decimal
    sell: Decimal


class MarketInsightResponse(BaseModel):
    quote: GoldQuote
    commentary: str
