"""
实体存储抽象

读写以整集合为单位：read_all 读取某类实体的全部记录，
write_all 用新集合整体替换旧集合，没有局部更新。
"""
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, List, Mapping, Sequence

from sf_core.utils.errors import StockFlowException, PersistenceError
from sf_core.utils.logger import get_logger

Record = Dict[str, Any]


class EntityType(str, Enum):
    """实体类型，值即集合名"""
    PRODUCT = "products"
    WAREHOUSE = "warehouses"
    STOCK_ENTRY = "stock"
    TRANSFER = "transfers"
    ALERT_ACKNOWLEDGMENT = "alerts"


class EntityStore(ABC):
    """实体存储基类

    子类实现 _read / _write_many；公共方法负责把底层异常
    统一包装为 PersistenceError 并记录日志。
    """

    def __init__(self):
        self.logger = get_logger(f"sf_core.store.{self.__class__.__name__}")

    async def read_all(self, entity_type: EntityType) -> List[Record]:
        """读取某类实体的全部记录"""
        try:
            return await self._read(EntityType(entity_type))
        except StockFlowException:
            raise
        except Exception as e:
            self.logger.error("Entity store read failed", entity_type=str(entity_type), exc_info=True)
            raise PersistenceError(
                code="STORE_READ_FAILED",
                detail=f"Failed to read {EntityType(entity_type).value}: {e}"
            )

    async def write_all(self, entity_type: EntityType, records: Sequence[Record]) -> None:
        """整体替换某类实体的集合"""
        await self.write_batch({EntityType(entity_type): records})

    async def write_batch(self, collections: Mapping[EntityType, Sequence[Record]]) -> None:
        """作为一个逻辑单元写入多个集合"""
        batch = {EntityType(k): [dict(r) for r in v] for k, v in collections.items()}
        try:
            await self._write_many(batch)
        except StockFlowException:
            raise
        except Exception as e:
            names = ", ".join(t.value for t in batch)
            self.logger.error("Entity store write failed", entity_types=names, exc_info=True)
            raise PersistenceError(
                code="STORE_WRITE_FAILED",
                detail=f"Failed to write {names}: {e}"
            )

    async def close(self) -> None:
        """释放资源"""

    @abstractmethod
    async def _read(self, entity_type: EntityType) -> List[Record]:
        ...

    @abstractmethod
    async def _write_many(self, collections: Dict[EntityType, List[Record]]) -> None:
        ...
