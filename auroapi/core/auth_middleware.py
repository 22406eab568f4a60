from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from auroapi.core.exceptions import AuthorizationError
from auroapi.deps import get_auth_service
from auroapi.schemas.account import Account as AccountSchema
from auroapi.services.auth_service import AuthService

# JWT Bearer 토큰 스킴
security = HTTPBearer(auto_error=False)


def get_current_account(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth_service: AuthService = Depends(get_auth_service),
) -> AccountSchema:
    """필수 계정 인증 - 유효한 토큰이 필요함"""
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    account = auth_service.get_current_account(credentials.credentials)
    if not account:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return account


def require_admin(
    current_account: AccountSchema = Depends(get_current_account),
) -> AccountSchema:
    """관리자 권한이 필요한 엔드포인트용 의존성"""
    if not current_account.is_admin:
        raise AuthorizationError("Admin access required")
    return current_account
