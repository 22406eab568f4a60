from typing import List, Optional

from sqlalchemy import asc
from sqlalchemy.orm import Session

from auroapi.models.price import GoldPrice as GoldPriceModel, PriceHistoryPoint
from auroapi.schemas.price import GoldQuote
from auroapi.repositories.base import BaseRepository

CURRENT_QUOTE_ID = 1


class PriceRepository(BaseRepository[GoldPriceModel, GoldQuote]):
    """금 시세 및 가격 이력 리포지토리"""

    def __init__(self, db: Session):
        super().__init__(GoldPriceModel, GoldQuote, db)

    def get_current(self) -> Optional[GoldPriceModel]:
        return self.get(CURRENT_QUOTE_ID)

    def get_current_for_update(self) -> Optional[GoldPriceModel]:
        return self.get_for_update(CURRENT_QUOTE_ID)

    def list_history(self) -> List[PriceHistoryPoint]:
        """가격 이력 (오래된 순)"""
        return (
            self.db.query(PriceHistoryPoint).order_by(asc(PriceHistoryPoint.id)).all()
        )

    def append_history(self, point: PriceHistoryPoint) -> PriceHistoryPoint:
        self.db.add(point)
        self.db.flush()
        return point

    def evict_history_beyond(self, limit: int) -> int:
        """limit 초과분을 오래된 순으로 삭제 (FIFO). 삭제 건수 반환"""
        total = self.db.query(PriceHistoryPoint).count()
        overflow = total - limit
        if overflow <= 0:
            return 0

        oldest = (
            self.db.query(PriceHistoryPoint)
            .order_by(asc(PriceHistoryPoint.id))
            .limit(overflow)
            .all()
        )
        for point in oldest:
            self.db.delete(point)
        self.db.flush()
        return len(oldest)
