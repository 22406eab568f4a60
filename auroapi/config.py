import os
from decimal import Decimal
from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file="auroapi/.env",
        env_file_encoding="utf-8",
        extra="allow",
    )
    # Application
    APP_NAME: str = "Auro Gold Ledger API"
    API_V1_STR: str = "/api/v1"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    ALLOWED_ORIGINS: List[str] = Field(default_factory=lambda: ["*"])

    # Database
    DATABASE_URL: str = "sqlite:///./auro.db"
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20

    # Security
    SECRET_KEY: str = "change-me"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440

    # Seed admin
    ADMIN_EMAIL: str = "admin@auro.com"
    ADMIN_PASSWORD: str = "admin123"
    ADMIN_NAME: str = "Auro Administrator"

    # Price oracle
    INITIAL_BUY_PRICE: Decimal = Decimal("13500.00")
    INITIAL_SELL_PRICE: Decimal = Decimal("12800.00")
    PRICE_HISTORY_LIMIT: int = 30

    # Referral
    REFERRAL_SIGNUP_BONUS_FIAT: Decimal = Decimal("50")  # 가입 보너스 (BDT, 금으로 환산 지급)
    DEFAULT_REFERRAL_COMMISSION_RATE: Decimal = Decimal("0.05")
    REFERRAL_ACTIVATION_FEE_FIAT: Decimal = Decimal("500")
    REFERRAL_CODES_PER_ACTIVATION: int = 4

    # Trading
    FIRST_SELL_MIN_GRAMS: Decimal = Decimal("0.05")  # 첫 매도 최소 수량
    STANDARD_SELL_MIN_GRAMS: Decimal = Decimal("1.00")

    # Mining
    MINING_TERM_DAYS: int = 30

    # Market commentary (Gemini)
    GEMINI_API_KEY: Optional[str] = None
    GEMINI_MODEL: str = "gemini-2.5-flash"
    GEMINI_API_BASE_URL: str = "https://generativelanguage.googleapis.com"
    GEMINI_TIMEOUT_SECONDS: float = 10.0
    MARKET_INSIGHT_MAX_CHARS: int = 1200

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")


class DevelopmentSettings(Settings):
    DEBUG: bool = True


class StagingSettings(Settings):
    DEBUG: bool = False


class ProductionSettings(Settings):
    DEBUG: bool = False


ENVIRONMENTS: dict[str, type[Settings]] = {
    "development": DevelopmentSettings,
    "staging": StagingSettings,
    "production": ProductionSettings,
}


@lru_cache
def get_settings() -> Settings:
    """Return settings instance based on ENVIRONMENT variable."""

    env = os.getenv("ENVIRONMENT", "development").lower()
    settings_cls = ENVIRONMENTS.get(env, DevelopmentSettings)
    return settings_cls()
