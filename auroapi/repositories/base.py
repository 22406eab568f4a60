from abc import ABC
from typing import Any, Dict, Generic, Optional, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy.orm import Session

T = TypeVar("T")
SchemaType = TypeVar("SchemaType", bound=BaseModel)


class BaseRepository(Generic[T, SchemaType], ABC):
    """모든 리포지토리의 베이스 클래스

    리포지토리는 flush 까지만 수행하고 commit 하지 않는다.
    커밋/롤백은 LedgerService 의 원자 단위가 담당한다.
    """

    def __init__(
        self, model_class: Type[T], schema_class: Type[SchemaType], db: Session
    ):
        self.model_class = model_class
        self.schema_class = schema_class
        self.db = db

    def to_schema(self, model_instance: Any) -> Optional[SchemaType]:
        """SQLAlchemy 모델을 Pydantic 스키마로 변환"""
        if model_instance is None:
            return None
        return self.schema_class.model_validate(model_instance)

    def get(self, id: Any) -> Optional[T]:
        """ID로 모델 조회"""
        return self.db.get(self.model_class, id)

    def get_for_update(self, id: Any) -> Optional[T]:
        """행 잠금과 함께 조회 (SQLite에서는 FOR UPDATE가 무시됨)"""
        return (
            self.db.query(self.model_class)
            .filter(getattr(self.model_class, "id") == id)
            .with_for_update()
            .first()
        )

    def add(self, instance: T) -> T:
        """새 레코드 추가 후 flush (ID 할당)"""
        self.db.add(instance)
        self.db.flush()
        return instance

    def exists(self, filters: Dict[str, Any]) -> bool:
        """레코드 존재 여부 확인"""
        query = self.db.query(self.model_class)

        for key, value in filters.items():
            if hasattr(self.model_class, key):
                query = query.filter(getattr(self.model_class, key) == value)

        return query.first() is not None
