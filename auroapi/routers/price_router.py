import asyncio
from typing import Any, List, Tuple

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends

from auroapi.containers import Container
from auroapi.core.auth_middleware import require_admin
from auroapi.deps import get_ledger_service
from auroapi.schemas.account import Account as AccountSchema
from auroapi.schemas.auth import BaseResponse
from auroapi.schemas.price import (
    GoldQuote,
    MarketInsightResponse,
    PriceHistoryItem,
    PriceHistoryResponse,
    QuoteUpdateRequest,
)
from auroapi.services.ledger_service import LedgerService
from auroapi.services.market_insight_service import MarketInsightService

router = APIRouter(prefix="/price", tags=["price"])


@router.get("", response_model=BaseResponse)
def get_quote(ledger: LedgerService = Depends(get_ledger_service)) -> Any:
    """현재 금 시세 (매수/매도가, 추세)"""
    quote = ledger.get_quote()
    return BaseResponse(success=True, data={"quote": quote.model_dump(mode="json")})


@router.put("", response_model=BaseResponse)
def set_quote(
    payload: QuoteUpdateRequest,
    _admin: AccountSchema = Depends(require_admin),
    ledger: LedgerService = Depends(get_ledger_service),
) -> Any:
    """시세 변경 (관리자) - 이력에 오늘 매수가가 추가된다"""
    quote = ledger.set_quote(payload.buy, payload.sell)
    return BaseResponse(success=True, data={"quote": quote.model_dump(mode="json")})


@router.get("/history", response_model=BaseResponse)
def get_history(ledger: LedgerService = Depends(get_ledger_service)) -> Any:
    history = PriceHistoryResponse(history=ledger.get_price_history())
    return BaseResponse(success=True, data=history.model_dump(mode="json"))


def _read_market_snapshot(
    ledger: LedgerService,
) -> Tuple[GoldQuote, List[PriceHistoryItem]]:
    return ledger.get_quote(), ledger.get_price_history()


@router.get("/insights", response_model=BaseResponse)
@inject
async def get_market_insights(
    ledger: LedgerService = Depends(get_ledger_service),
    insight_service: MarketInsightService = Depends(
        Provide[Container.services.market_insight_service]
    ),
) -> Any:
    """AI 시장 코멘트 - 외부 모델 장애 시에도 고정 문구로 응답"""
    # 원장 잠금과 DB 조회는 이벤트 루프 밖에서 수행
    loop = asyncio.get_running_loop()
    quote, history = await loop.run_in_executor(None, _read_market_snapshot, ledger)
    commentary = await insight_service.generate(quote, history)
    insight = MarketInsightResponse(quote=quote, commentary=commentary)
    return BaseResponse(success=True, data=insight.model_dump(mode="json"))
