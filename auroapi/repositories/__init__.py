# Repository layer - Data access; commits belong to the ledger unit of work

from .base import BaseRepository
from .account_repository import AccountRepository
from .transaction_repository import TransactionRepository
from .referral_repository import ReferralRepository
from .price_repository import PriceRepository
from .mining_repository import MiningPackageRepository, MiningSubscriptionRepository
from .system_repository import SystemRepository

__all__ = [
    "BaseRepository",
    "AccountRepository",
    "TransactionRepository",
    "ReferralRepository",
    "PriceRepository",
    "MiningPackageRepository",
    "MiningSubscriptionRepository",
    "SystemRepository",
]
