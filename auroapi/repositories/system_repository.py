from typing import List, Optional

from sqlalchemy.orm import Session

from auroapi.models.system import PaymentMethod, SystemConfig as SystemConfigModel
from auroapi.schemas.system import SystemConfigResponse
from auroapi.repositories.base import BaseRepository

SYSTEM_CONFIG_ID = 1


class SystemRepository(BaseRepository[SystemConfigModel, SystemConfigResponse]):
    """전역 설정 및 결제 수단 리포지토리"""

    def __init__(self, db: Session):
        super().__init__(SystemConfigModel, SystemConfigResponse, db)

    def get_config(self) -> Optional[SystemConfigModel]:
        return self.get(SYSTEM_CONFIG_ID)

    def get_payment_method(self, method_id: str) -> Optional[PaymentMethod]:
        return self.db.get(PaymentMethod, method_id)

    def list_payment_methods(self) -> List[PaymentMethod]:
        return self.db.query(PaymentMethod).order_by(PaymentMethod.id).all()
