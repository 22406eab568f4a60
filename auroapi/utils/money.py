"""
금액/수량 계산 유틸리티

- 금(g)은 소수점 8자리, fiat(BDT)와 가격은 2자리, 비율은 4자리로 고정한다.
- 나눗셈으로 얻은 금 수량은 내림, 채굴 잠금 수량은 올림 처리한다.
"""

from decimal import ROUND_DOWN, ROUND_HALF_UP, ROUND_UP, Decimal
from typing import Union

Number = Union[Decimal, int, float, str]

GRAMS_EXP = Decimal("0.00000001")
FIAT_EXP = Decimal("0.01")
RATE_EXP = Decimal("0.0001")
ZERO = Decimal("0")


def to_decimal(value: Number) -> Decimal:
    """float 오차를 피하기 위해 문자열을 거쳐 Decimal로 변환"""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(value)


def quantize_grams(value: Number, rounding: str = ROUND_DOWN) -> Decimal:
    return to_decimal(value).quantize(GRAMS_EXP, rounding=rounding)


def quantize_fiat(value: Number) -> Decimal:
    return to_decimal(value).quantize(FIAT_EXP, rounding=ROUND_HALF_UP)


def quantize_rate(value: Number) -> Decimal:
    return to_decimal(value).quantize(RATE_EXP, rounding=ROUND_HALF_UP)


def fiat_to_grams(fiat: Number, price_per_gram: Number, round_up: bool = False) -> Decimal:
    """fiat 금액을 주어진 g당 가격으로 금 수량으로 환산"""
    rounding = ROUND_UP if round_up else ROUND_DOWN
    return quantize_grams(to_decimal(fiat) / to_decimal(price_per_gram), rounding)


# Numeric(20, 2) 컬럼의 정수부 한도
MAX_FIAT = Decimal("1e18")


def checked_fiat(value: Number) -> Decimal:
    """외부 입력 금액을 fiat 자릿수로 고정한다.

    변환 불가, 무한대/NaN, 컬럼 한도 초과 값은 ValueError.
    """
    try:
        amount = quantize_fiat(value)
    except ArithmeticError:
        raise ValueError(f"Invalid fiat amount: {value!r}")
    if not amount.is_finite() or abs(amount) >= MAX_FIAT:
        raise ValueError(f"Fiat amount out of range: {value!r}")
    return amount


def checked_rate(value: Number) -> Decimal:
    try:
        rate = quantize_rate(value)
    except ArithmeticError:
        raise ValueError(f"Invalid rate: {value!r}")
    if not rate.is_finite():
        raise ValueError(f"Invalid rate: {value!r}")
    return rate
