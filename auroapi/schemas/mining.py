from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from auroapi.models.mining import SubscriptionStatus


class MiningPackageResponse(BaseModel):
    id: int
    name: str
    cost: Decimal
    daily_profit: Decimal

    model_config = ConfigDict(from_attributes=True)


class MiningPackageUpsertRequest(BaseModel):
    """패키지 생성(id 없음) 또는 수정(id 지정)"""

    id: Optional[int] = Field(None, gt=0)
    name: str = Field(..., min_length=1, max_length=100)
    cost: Decimal = Field(..., gt=0, description="패키지 가격 (BDT)")
    daily_profit: Decimal = Field(..., ge=0, description="일일 수익 (BDT)")


class MiningActivateRequest(BaseModel):
    package_id: int = Field(..., gt=0)


class MiningSubscriptionResponse(BaseModel):
    id: int
    account_id: int
    package_id: int
    package_name: str
    package_cost: Decimal
    daily_profit: Decimal
    locked_gold_amount: Decimal
    start_date: datetime
    end_date: datetime
    last_payout_at: datetime
    status: SubscriptionStatus

    model_config = ConfigDict(from_attributes=True)


class MiningSubscriptionListResponse(BaseModel):
    subscriptions: List[MiningSubscriptionResponse]
