from decimal import Decimal
from typing import List

from pydantic import BaseModel, ConfigDict, Field

from auroapi.schemas.account import ReferralCodeItem


class SystemConfigResponse(BaseModel):
    referral_commission_rate: Decimal

    model_config = ConfigDict(from_attributes=True)


class ReferralRateUpdateRequest(BaseModel):
    rate: Decimal = Field(..., description="추천 수수료율 (0.05 = 5%)")


class PaymentMethodResponse(BaseModel):
    id: str
    name: str
    details: str

    model_config = ConfigDict(from_attributes=True)


class PaymentMethodUpdateRequest(BaseModel):
    details: str = Field(..., min_length=1, max_length=2000)


class ReferralActivationRequest(BaseModel):
    proof_ref: str = Field(..., min_length=1, description="활성화 수수료 입금 증빙 참조")


class ReferralCodesResponse(BaseModel):
    referral_status: str
    codes: List[ReferralCodeItem]
