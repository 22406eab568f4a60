from decimal import Decimal
from typing import Any, Dict, Optional

from fastapi import HTTPException, status


class BaseAPIException(HTTPException):
    """Base exception for API errors"""
    def __init__(
        self,
        status_code: int,
        error_code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        self.error_code = error_code
        self.message = message
        self.details = details or {}

        super().__init__(
            status_code=status_code,
            detail={
                "success": False,
                "error": {
                    "code": error_code,
                    "message": message,
                    "details": self.details
                }
            }
        )

    def __str__(self) -> str:  # Ensure str(e) returns the human message
        return self.message


class AuthenticationError(BaseAPIException):
    """Authentication related errors"""
    def __init__(self, message: str = "Authentication failed", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            error_code="AUTH_001",
            message=message,
            details=details
        )


class AuthorizationError(BaseAPIException):
    """Authorization related errors"""
    def __init__(self, message: str = "Access forbidden", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            error_code="AUTH_002",
            message=message,
            details=details
        )


class ValidationError(BaseAPIException):
    """Validation errors"""
    def __init__(
        self,
        message: str = "Validation failed",
        details: Optional[Dict] = None,
        error_code: str = "VALIDATION_001",
    ):
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            error_code=error_code,
            message=message,
            details=details
        )


class InvalidAmountError(ValidationError):
    """Non-positive or malformed gram amount"""
    def __init__(self, message: str = "Amount must be greater than zero", details: Optional[Dict] = None):
        super().__init__(message=message, details=details, error_code="VALIDATION_002")


class InvalidPriceError(ValidationError):
    """Non-positive buy/sell price"""
    def __init__(self, message: str = "Prices must be greater than zero", details: Optional[Dict] = None):
        super().__init__(message=message, details=details, error_code="PRICE_001")


class NotFoundError(BaseAPIException):
    """Resource not found errors"""
    def __init__(self, message: str = "Resource not found", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            error_code="NOT_FOUND_001",
            message=message,
            details=details
        )


class ConflictError(BaseAPIException):
    """Resource conflict errors"""
    def __init__(
        self,
        message: str = "Resource conflict",
        details: Optional[Dict] = None,
        error_code: str = "CONFLICT_001",
    ):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            error_code=error_code,
            message=message,
            details=details
        )


class InvalidStateTransitionError(ConflictError):
    """Approve/reject on a transaction that is no longer PENDING"""
    def __init__(self, message: str = "Transaction is not pending", details: Optional[Dict] = None):
        super().__init__(message=message, details=details, error_code="TX_STATE_001")


class AlreadyActiveError(ConflictError):
    """Referral program already active"""
    def __init__(self, message: str = "Referral program is already active", details: Optional[Dict] = None):
        super().__init__(message=message, details=details, error_code="REFERRAL_002")


class ActivationPendingError(ConflictError):
    """Referral activation awaiting admin decision"""
    def __init__(self, message: str = "Referral activation is pending approval", details: Optional[Dict] = None):
        super().__init__(message=message, details=details, error_code="REFERRAL_003")


class BusinessLogicError(BaseAPIException):
    """Business logic errors"""
    def __init__(self, error_code: str, message: str, details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code=error_code,
            message=message,
            details=details
        )


class InsufficientAvailableGoldError(BusinessLogicError):
    """Requested grams exceed balance_gold - locked_gold"""
    def __init__(self, required: Decimal, available: Decimal, message: Optional[str] = None):
        self.required = required
        self.available = available
        super().__init__(
            error_code="BALANCE_001",
            message=message
            or f"Insufficient available gold. You have {available:.2f}g available (some may be locked in mining).",
            details={"required": str(required), "available": str(available)},
        )


class BelowMinimumSellError(BusinessLogicError):
    """Sell amount under the graduated minimum"""
    def __init__(self, minimum: Decimal, first_sell: bool):
        self.minimum = minimum
        self.first_sell = first_sell
        label = "First time offer" if first_sell else "Standard limit"
        super().__init__(
            error_code="SELL_001",
            message=f"Minimum sell amount is {minimum:.2f}g ({label}).",
            details={"minimum": str(minimum), "first_sell": first_sell},
        )


class InvalidReferralCodeError(BusinessLogicError):
    """Unknown or already used referral code"""
    def __init__(self, code: str):
        super().__init__(
            error_code="REFERRAL_001",
            message="Invalid or already used referral code",
            details={"code": code},
        )


class InternalServerError(BaseAPIException):
    """Internal server errors"""
    def __init__(self, message: str = "Internal server error", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_code="INTERNAL_001",
            message=message,
            details=details
        )
