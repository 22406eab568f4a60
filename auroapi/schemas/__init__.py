from .auth import AccountCreate, AccountLogin, AuthResponse, Token, TokenData
from .account import Account
from .price import GoldQuote, PriceHistoryItem
from .transaction import TransactionResponse
from .mining import MiningPackageResponse, MiningSubscriptionResponse
from .system import PaymentMethodResponse, SystemConfigResponse
