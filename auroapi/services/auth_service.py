import logging
from typing import Optional

from auroapi.config import Settings
from auroapi.core.security import create_access_token, decode_access_token
from auroapi.schemas.account import Account as AccountSchema
from auroapi.schemas.auth import AccountCreate, AccountLogin, AuthResponse, Token, TokenData
from auroapi.services.ledger_service import LedgerService

logger = logging.getLogger(__name__)


class AuthService:
    """이메일/비밀번호 인증 서비스 - 계정 생성과 잔액 변경은 원장에 위임"""

    def __init__(self, ledger: LedgerService, settings: Settings):
        self.ledger = ledger
        self.settings = settings

    def _issue_token(self, account: AccountSchema) -> Token:
        access_token = create_access_token(
            data={"sub": account.email, "account_id": account.id},
            settings=self.settings,
        )
        return Token(access_token=access_token)

    def register(self, payload: AccountCreate) -> AuthResponse:
        """회원가입 후 바로 토큰 발급"""
        account = self.ledger.register(
            name=payload.name,
            email=payload.email,
            password=payload.password,
            referral_code=payload.referral_code,
        )
        return AuthResponse(account_id=account.id, token=self._issue_token(account))

    def login(self, payload: AccountLogin) -> AuthResponse:
        account = self.ledger.authenticate(payload.email, payload.password)
        logger.info(f"Account {account.id} logged in")
        return AuthResponse(account_id=account.id, token=self._issue_token(account))

    def verify_token(self, token: str) -> Optional[TokenData]:
        """JWT 토큰 검증"""
        payload = decode_access_token(token, self.settings)
        if payload is None:
            return None
        return TokenData(email=payload.sub, account_id=payload.account_id)

    def get_current_account(self, token: str) -> Optional[AccountSchema]:
        """토큰으로 현재 계정 조회"""
        token_data = self.verify_token(token)
        if not token_data or not token_data.account_id:
            return None
        return self.ledger.find_account(token_data.account_id)
