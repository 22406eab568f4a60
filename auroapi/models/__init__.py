from .base import Base
from .account import Account, AccountRole, ReferralStatus
from .referral import ReferralCode
from .transaction import Transaction, TransactionStatus, TransactionType
from .price import GoldPrice, PriceHistoryPoint, PriceTrend
from .mining import MiningPackage, MiningSubscription, SubscriptionStatus
from .system import PaymentMethod, SystemConfig

__all__ = [
    "Base",
    "Account",
    "AccountRole",
    "ReferralStatus",
    "ReferralCode",
    "Transaction",
    "TransactionStatus",
    "TransactionType",
    "GoldPrice",
    "PriceHistoryPoint",
    "PriceTrend",
    "MiningPackage",
    "MiningSubscription",
    "SubscriptionStatus",
    "PaymentMethod",
    "SystemConfig",
]
