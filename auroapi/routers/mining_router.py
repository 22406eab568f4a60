from typing import Any

from fastapi import APIRouter, Depends, status

from auroapi.core.auth_middleware import get_current_account, require_admin
from auroapi.deps import get_ledger_service
from auroapi.schemas.account import Account as AccountSchema
from auroapi.schemas.auth import BaseResponse
from auroapi.schemas.mining import (
    MiningActivateRequest,
    MiningPackageUpsertRequest,
    MiningSubscriptionListResponse,
)
from auroapi.services.ledger_service import LedgerService

router = APIRouter(prefix="/mining", tags=["mining"])


@router.get("/packages", response_model=BaseResponse)
def list_packages(ledger: LedgerService = Depends(get_ledger_service)) -> Any:
    packages = ledger.list_mining_packages()
    return BaseResponse(
        success=True, data={"packages": [p.model_dump(mode="json") for p in packages]}
    )


@router.put("/packages", response_model=BaseResponse)
def upsert_package(
    payload: MiningPackageUpsertRequest,
    _admin: AccountSchema = Depends(require_admin),
    ledger: LedgerService = Depends(get_ledger_service),
) -> Any:
    """패키지 생성/수정 (관리자) - 기존 구독 조건은 바뀌지 않는다"""
    package = ledger.upsert_mining_package(
        payload.name, payload.cost, payload.daily_profit, package_id=payload.id
    )
    return BaseResponse(success=True, data={"package": package.model_dump(mode="json")})


@router.post("/activate", response_model=BaseResponse, status_code=status.HTTP_201_CREATED)
def activate(
    payload: MiningActivateRequest,
    current_account: AccountSchema = Depends(get_current_account),
    ledger: LedgerService = Depends(get_ledger_service),
) -> Any:
    """채굴 활성화 - 패키지 가격만큼의 금을 약정 기간 동안 잠근다"""
    subscription = ledger.activate_mining(current_account.id, payload.package_id)
    return BaseResponse(
        success=True, data={"subscription": subscription.model_dump(mode="json")}
    )


@router.get("/subscriptions", response_model=BaseResponse)
def list_subscriptions(
    current_account: AccountSchema = Depends(get_current_account),
    ledger: LedgerService = Depends(get_ledger_service),
) -> Any:
    result = MiningSubscriptionListResponse(
        subscriptions=ledger.list_mining_subscriptions(current_account.id)
    )
    return BaseResponse(success=True, data=result.model_dump(mode="json"))
