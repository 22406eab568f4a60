import logging
from typing import Any

from fastapi import APIRouter, Depends, status

from auroapi.deps import get_auth_service
from auroapi.schemas.auth import AccountCreate, AccountLogin, BaseResponse
from auroapi.services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["authentication"])
logger = logging.getLogger(__name__)


@router.post("/register", response_model=BaseResponse, status_code=status.HTTP_201_CREATED)
def register(
    payload: AccountCreate,
    auth_service: AuthService = Depends(get_auth_service),
) -> Any:
    """이메일 회원가입 (선택적으로 추천 코드 사용)

    잘못되었거나 이미 사용된 추천 코드는 가입 전체를 실패시킨다.
    """
    result = auth_service.register(payload)
    return BaseResponse(success=True, data=result.model_dump(mode="json"))


@router.post("/login", response_model=BaseResponse)
def login(
    payload: AccountLogin,
    auth_service: AuthService = Depends(get_auth_service),
) -> Any:
    result = auth_service.login(payload)
    return BaseResponse(success=True, data=result.model_dump(mode="json"))
