from typing import Any

from fastapi import APIRouter, Depends, status

from auroapi.core.auth_middleware import get_current_account
from auroapi.deps import get_ledger_service
from auroapi.schemas.account import Account as AccountSchema
from auroapi.schemas.auth import BaseResponse
from auroapi.schemas.system import ReferralActivationRequest, ReferralCodesResponse
from auroapi.services.ledger_service import LedgerService

router = APIRouter(prefix="/referrals", tags=["referrals"])


@router.post("/activation", response_model=BaseResponse, status_code=status.HTTP_201_CREATED)
def request_activation(
    payload: ReferralActivationRequest,
    current_account: AccountSchema = Depends(get_current_account),
    ledger: LedgerService = Depends(get_ledger_service),
) -> Any:
    """추천 프로그램 활성화 요청 (수수료 입금 증빙 첨부)"""
    tx = ledger.request_activation(current_account.id, payload.proof_ref)
    return BaseResponse(success=True, data={"transaction": tx.model_dump(mode="json")})


@router.get("/codes", response_model=BaseResponse)
def list_my_codes(
    current_account: AccountSchema = Depends(get_current_account),
    ledger: LedgerService = Depends(get_ledger_service),
) -> Any:
    referral_status, codes = ledger.list_referral_codes(current_account.id)
    result = ReferralCodesResponse(referral_status=referral_status.value, codes=codes)
    return BaseResponse(success=True, data=result.model_dump(mode="json"))
