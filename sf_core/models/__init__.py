"""
StockFlow 数据模型包
"""
from .base import Base
from .entity_record import EntityRecordRow
from .records import (
    EntityRecord,
    Product,
    Warehouse,
    StockEntry,
    Transfer,
    AlertAcknowledgment,
)

__all__ = [
    "Base",
    "EntityRecordRow",
    "EntityRecord",
    "Product",
    "Warehouse",
    "StockEntry",
    "Transfer",
    "AlertAcknowledgment",
]
