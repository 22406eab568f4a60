from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr

from auroapi.models.account import AccountRole, ReferralStatus


class ReferralCodeItem(BaseModel):
    code: str
    is_used: bool

    model_config = ConfigDict(from_attributes=True)


class Account(BaseModel):
    id: int
    name: str
    email: EmailStr
    role: AccountRole = AccountRole.USER
    balance_fiat: Decimal
    balance_gold: Decimal
    locked_gold: Decimal
    available_gold: Decimal
    referral_status: ReferralStatus
    referred_by_id: Optional[int] = None
    referral_codes: List[ReferralCodeItem] = []
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @property
    def is_admin(self) -> bool:
        return AccountRole.is_admin(self.role)


class AccountListItem(BaseModel):
    """관리자 목록용 간소한 정보"""

    id: int
    name: str
    email: EmailStr
    role: AccountRole
    balance_fiat: Decimal
    balance_gold: Decimal
    locked_gold: Decimal
    referral_status: ReferralStatus

    model_config = ConfigDict(from_attributes=True)
