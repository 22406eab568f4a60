import logging
from typing import Any

from fastapi import APIRouter, Depends, Path, Query, status

from auroapi.core.auth_middleware import get_current_account, require_admin
from auroapi.core.exceptions import NotFoundError
from auroapi.deps import get_ledger_service
from auroapi.schemas.account import Account as AccountSchema
from auroapi.schemas.auth import BaseResponse
from auroapi.schemas.transaction import BuyRequest, SellRequest, TransactionListResponse
from auroapi.services.ledger_service import LedgerService

router = APIRouter(prefix="/transactions", tags=["transactions"])
logger = logging.getLogger(__name__)


@router.post("/buy", response_model=BaseResponse, status_code=status.HTTP_201_CREATED)
def submit_buy(
    payload: BuyRequest,
    current_account: AccountSchema = Depends(get_current_account),
    ledger: LedgerService = Depends(get_ledger_service),
) -> Any:
    """금 매수 요청 - 관리자 승인 시 금이 지급된다"""
    tx = ledger.submit_buy(
        current_account.id,
        payload.grams,
        payment_method_ref=payload.payment_method_ref,
        proof_ref=payload.proof_ref,
    )
    return BaseResponse(success=True, data={"transaction": tx.model_dump(mode="json")})


@router.post("/sell", response_model=BaseResponse, status_code=status.HTTP_201_CREATED)
def submit_sell(
    payload: SellRequest,
    current_account: AccountSchema = Depends(get_current_account),
    ledger: LedgerService = Depends(get_ledger_service),
) -> Any:
    """금 매도 요청 - 요청 즉시 금이 차감되고, 거절 시 환불된다"""
    tx = ledger.submit_sell(
        current_account.id, payload.grams, payout_destination=payload.payout_destination
    )
    return BaseResponse(success=True, data={"transaction": tx.model_dump(mode="json")})


@router.get("", response_model=BaseResponse)
def list_my_transactions(
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    current_account: AccountSchema = Depends(get_current_account),
    ledger: LedgerService = Depends(get_ledger_service),
) -> Any:
    """내 거래 내역 (최신순)"""
    transactions, total = ledger.list_transactions(
        current_account.id, limit=limit, offset=offset
    )
    result = TransactionListResponse(transactions=transactions, total_count=total)
    return BaseResponse(
        success=True,
        data=result.model_dump(mode="json"),
        meta={"limit": limit, "offset": offset},
    )


@router.get("/all", response_model=BaseResponse)
def list_all_transactions(
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    _admin: AccountSchema = Depends(require_admin),
    ledger: LedgerService = Depends(get_ledger_service),
) -> Any:
    """전체 거래 내역 (관리자)"""
    transactions, total = ledger.list_transactions(None, limit=limit, offset=offset)
    result = TransactionListResponse(transactions=transactions, total_count=total)
    return BaseResponse(
        success=True,
        data=result.model_dump(mode="json"),
        meta={"limit": limit, "offset": offset},
    )


@router.get("/{tx_id}", response_model=BaseResponse)
def get_transaction(
    tx_id: int = Path(..., gt=0),
    current_account: AccountSchema = Depends(get_current_account),
    ledger: LedgerService = Depends(get_ledger_service),
) -> Any:
    """거래 단건 조회 - 본인 거래 또는 관리자만"""
    tx = ledger.get_transaction(tx_id)
    if tx.account_id != current_account.id and not current_account.is_admin:
        raise NotFoundError(f"Transaction {tx_id} not found")
    return BaseResponse(success=True, data={"transaction": tx.model_dump(mode="json")})


@router.post("/{tx_id}/approve", response_model=BaseResponse)
def approve_transaction(
    tx_id: int = Path(..., gt=0),
    admin: AccountSchema = Depends(require_admin),
    ledger: LedgerService = Depends(get_ledger_service),
) -> Any:
    tx = ledger.approve(tx_id)
    logger.info(f"Admin {admin.id} approved transaction {tx_id}")
    return BaseResponse(success=True, data={"transaction": tx.model_dump(mode="json")})


@router.post("/{tx_id}/reject", response_model=BaseResponse)
def reject_transaction(
    tx_id: int = Path(..., gt=0),
    admin: AccountSchema = Depends(require_admin),
    ledger: LedgerService = Depends(get_ledger_service),
) -> Any:
    tx = ledger.reject(tx_id)
    logger.info(f"Admin {admin.id} rejected transaction {tx_id}")
    return BaseResponse(success=True, data={"transaction": tx.model_dump(mode="json")})
