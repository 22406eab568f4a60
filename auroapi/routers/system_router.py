from typing import Any

from fastapi import APIRouter, Depends

from auroapi.core.auth_middleware import require_admin
from auroapi.deps import get_ledger_service
from auroapi.schemas.account import Account as AccountSchema
from auroapi.schemas.auth import BaseResponse
from auroapi.schemas.system import PaymentMethodUpdateRequest, ReferralRateUpdateRequest
from auroapi.services.ledger_service import LedgerService

router = APIRouter(prefix="/system", tags=["system"])


@router.get("/config", response_model=BaseResponse)
def get_config(ledger: LedgerService = Depends(get_ledger_service)) -> Any:
    config = ledger.get_system_config()
    return BaseResponse(success=True, data={"config": config.model_dump(mode="json")})


@router.put("/referral-rate", response_model=BaseResponse)
def set_referral_rate(
    payload: ReferralRateUpdateRequest,
    _admin: AccountSchema = Depends(require_admin),
    ledger: LedgerService = Depends(get_ledger_service),
) -> Any:
    """추천 수수료율 변경 (관리자, 0 ~ 1)"""
    config = ledger.set_referral_commission_rate(payload.rate)
    return BaseResponse(success=True, data={"config": config.model_dump(mode="json")})


@router.get("/payment-methods", response_model=BaseResponse)
def list_payment_methods(ledger: LedgerService = Depends(get_ledger_service)) -> Any:
    methods = ledger.list_payment_methods()
    return BaseResponse(
        success=True, data={"payment_methods": [m.model_dump(mode="json") for m in methods]}
    )


@router.put("/payment-methods/{method_id}", response_model=BaseResponse)
def update_payment_method(
    method_id: str,
    payload: PaymentMethodUpdateRequest,
    _admin: AccountSchema = Depends(require_admin),
    ledger: LedgerService = Depends(get_ledger_service),
) -> Any:
    method = ledger.update_payment_method(method_id, payload.details)
    return BaseResponse(success=True, data={"payment_method": method.model_dump(mode="json")})
