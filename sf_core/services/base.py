"""
基础服务类
"""
from typing import Any, Dict, List, Optional, Type, TypeVar

import pydantic

from sf_core.models.records import EntityRecord
from sf_core.store import EntityStore, EntityType
from sf_core.utils.errors import PersistenceError, ValidationError
from sf_core.utils.logger import get_logger

M = TypeVar("M", bound=EntityRecord)


def is_missing(value: Any) -> bool:
    """None 或空字符串视为缺失"""
    return value is None or (isinstance(value, str) and not value.strip())


def coerce_id(value: Any, field: str) -> int:
    """把请求中的标识转换为整数（接受数字字符串）"""
    if isinstance(value, bool):
        raise ValidationError(code="INVALID_IDENTIFIER", detail=f"Invalid {field}: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    raise ValidationError(code="INVALID_IDENTIFIER", detail=f"Invalid {field}: {value!r}")


def optional_id(value: Optional[Any], field: str) -> Optional[int]:
    """可选标识"""
    if is_missing(value):
        return None
    return coerce_id(value, field)


class BaseService:
    """基础服务类"""

    def __init__(self, store: EntityStore):
        self.store = store
        self.logger = get_logger(f"sf_core.services.{self.__class__.__name__}")

    async def load(self, entity_type: EntityType, model: Type[M]) -> List[M]:
        """读取集合并解析为记录模型"""
        raw = await self.store.read_all(entity_type)
        try:
            return [model.model_validate(record) for record in raw]
        except pydantic.ValidationError as e:
            self.logger.error("Stored records failed validation", entity_type=entity_type.value, exc_info=True)
            raise PersistenceError(
                code="STORE_CORRUPTED",
                detail=f"Invalid {entity_type.value} record: {e.errors()[0]['msg']}"
            )

    def validate_required_fields(self, data: Dict[str, Any], required_fields: List[str]) -> None:
        """验证必填字段"""
        missing_fields = [f for f in required_fields if is_missing(data.get(f))]

        if missing_fields:
            raise ValidationError(
                code="MISSING_FIELDS",
                detail=f"Missing required fields: {', '.join(missing_fields)}"
            )

    @staticmethod
    def index_by_id(records: List[M]) -> Dict[int, M]:
        """按 id 建立索引（重复 id 保留第一条）"""
        index: Dict[int, M] = {}
        for record in records:
            index.setdefault(record.id, record)
        return index

    @staticmethod
    def next_id(records: List[Any]) -> int:
        """下一个 id：现有最大 id + 1，空集合为 1"""
        return max((r.id for r in records), default=0) + 1
