from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from pydantic import BaseModel, EmailStr, ValidationError
from werkzeug.security import check_password_hash, generate_password_hash

from auroapi.config import Settings


class TokenPayload(BaseModel):
    account_id: int
    sub: EmailStr  # subject, typically account email


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(password_hash: Optional[str], password: str) -> bool:
    if not password_hash:
        return False
    return check_password_hash(password_hash, password)


def create_access_token(
    data: dict, settings: Settings, expires_delta: Optional[timedelta] = None
) -> str:
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(
            minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES
        )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str, settings: Settings) -> Optional[TokenPayload]:
    """JWT 토큰을 검증하고 페이로드를 반환합니다. 유효하지 않으면 None."""
    try:
        payload = jwt.decode(
            token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM]
        )
        return TokenPayload.model_validate(payload)
    except (JWTError, ValidationError):
        return None
