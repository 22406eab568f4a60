import logging
from decimal import Decimal
from typing import List

from sqlalchemy.orm import Session

from auroapi.config import Settings
from auroapi.core.exceptions import InvalidPriceError
from auroapi.models.price import GoldPrice, PriceHistoryPoint, PriceTrend
from auroapi.repositories.price_repository import CURRENT_QUOTE_ID, PriceRepository
from auroapi.schemas.price import GoldQuote, PriceHistoryItem
from auroapi.utils.money import Number, checked_fiat, quantize_fiat, to_decimal
from auroapi.utils.timezone_utils import Clock, utc_now

logger = logging.getLogger(__name__)


class PriceService:
    """금 시세(Price Oracle) - 현재 호가와 최근 가격 이력을 관리한다.

    다른 모든 환산(fiat <-> g)은 요청 시점의 현재 호가를 사용하고,
    그 값을 거래/구독에 스냅샷으로 남긴다.
    """

    def __init__(self, db: Session, settings: Settings, clock: Clock = utc_now):
        self.db = db
        self.settings = settings
        self.clock = clock
        self.price_repo = PriceRepository(db)

    def current(self) -> GoldPrice:
        """현재 호가 모델. 최초 호출 시 설정값으로 생성한다."""
        quote = self.price_repo.get_current()
        if quote is None:
            quote = GoldPrice(
                id=CURRENT_QUOTE_ID,
                buy=quantize_fiat(self.settings.INITIAL_BUY_PRICE),
                sell=quantize_fiat(self.settings.INITIAL_SELL_PRICE),
                trend=PriceTrend.STABLE,
                last_updated=self.clock(),
            )
            self.price_repo.add(quote)
            logger.info(
                f"Initialized gold quote buy={quote.buy} sell={quote.sell}"
            )
        return quote

    def get_quote(self) -> GoldQuote:
        return GoldQuote.model_validate(self.current())

    def buy_price(self) -> Decimal:
        return to_decimal(self.current().buy)

    def sell_price(self) -> Decimal:
        return to_decimal(self.current().sell)

    def set_quote(self, buy: Number, sell: Number) -> GoldQuote:
        """새 호가 설정

        - 추세는 새 매수가와 이전 매수가 비교로 결정 (UP / DOWN / STABLE)
        - 이력에 {오늘, 매수가}를 추가하고 한도 초과분은 오래된 것부터 제거
        """
        try:
            buy_value = checked_fiat(buy)
            sell_value = checked_fiat(sell)
        except (ValueError, TypeError):
            raise InvalidPriceError(details={"buy": str(buy), "sell": str(sell)})
        if buy_value <= 0 or sell_value <= 0:
            raise InvalidPriceError(
                details={"buy": str(buy_value), "sell": str(sell_value)}
            )

        quote = self.price_repo.get_current_for_update() or self.current()
        previous_buy = to_decimal(quote.buy)
        if buy_value > previous_buy:
            trend = PriceTrend.UP
        elif buy_value < previous_buy:
            trend = PriceTrend.DOWN
        else:
            trend = PriceTrend.STABLE

        now = self.clock()
        quote.buy = buy_value
        quote.sell = sell_value
        quote.trend = trend
        quote.last_updated = now

        self.price_repo.append_history(
            PriceHistoryPoint(recorded_on=now.date(), price=buy_value)
        )
        evicted = self.price_repo.evict_history_beyond(self.settings.PRICE_HISTORY_LIMIT)
        if evicted:
            logger.debug(f"Evicted {evicted} price history point(s)")

        return GoldQuote.model_validate(quote)

    def get_history(self) -> List[PriceHistoryItem]:
        return [
            PriceHistoryItem(date=point.recorded_on, price=point.price)
            for point in self.price_repo.list_history()
        ]
