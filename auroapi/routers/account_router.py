from typing import Any

from fastapi import APIRouter, Depends, Query

from auroapi.core.auth_middleware import get_current_account, require_admin
from auroapi.deps import get_ledger_service
from auroapi.schemas.account import Account as AccountSchema
from auroapi.schemas.auth import BaseResponse
from auroapi.services.ledger_service import LedgerService

router = APIRouter(prefix="/accounts", tags=["accounts"])


@router.get("/me", response_model=BaseResponse)
def get_my_account(
    current_account: AccountSchema = Depends(get_current_account),
    ledger: LedgerService = Depends(get_ledger_service),
) -> Any:
    """내 계정 조회 - 채굴 정산이 먼저 반영된 잔액을 반환"""
    account = ledger.get_account(current_account.id)
    return BaseResponse(success=True, data={"account": account.model_dump(mode="json")})


@router.get("", response_model=BaseResponse)
def list_accounts(
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    _admin: AccountSchema = Depends(require_admin),
    ledger: LedgerService = Depends(get_ledger_service),
) -> Any:
    """전체 계정 목록 (관리자)"""
    accounts = ledger.list_accounts(limit=limit, offset=offset)
    return BaseResponse(
        success=True,
        data={"accounts": [a.model_dump(mode="json") for a in accounts]},
        meta={"limit": limit, "offset": offset},
    )
