from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from auroapi.models.transaction import TransactionStatus, TransactionType


class TransactionResponse(BaseModel):
    """거래 응답"""

    id: int
    account_id: int
    account_name: str
    type: TransactionType
    status: TransactionStatus
    amount_gold: Optional[Decimal] = None
    amount_fiat: Decimal
    price_per_gram: Optional[Decimal] = None
    proof_ref: Optional[str] = None
    payment_method_ref: Optional[str] = None
    payout_destination: Optional[str] = None
    requested_at: datetime
    decided_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class TransactionListResponse(BaseModel):
    transactions: List[TransactionResponse]
    total_count: int


class BuyRequest(BaseModel):
    """금 매수 요청 - 승인 전까지 잔액 변화 없음"""

    grams: Decimal = Field(..., description="매수 수량 (g)")
    payment_method_ref: Optional[str] = Field(None, max_length=100, description="결제 수단 ID")
    proof_ref: Optional[str] = Field(None, description="입금 증빙 참조 (업로드 결과)")


class SellRequest(BaseModel):
    """금 매도 요청 - 요청 즉시 금 차감"""

    grams: Decimal = Field(..., description="매도 수량 (g)")
    payout_destination: Optional[str] = Field(None, max_length=500, description="대금 수령처")
