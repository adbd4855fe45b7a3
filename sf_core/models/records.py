"""
实体记录模型

五类实体在存储中以 camelCase 字段保存（与前端/JSON 文件一致），
Python 侧使用 snake_case 属性。未知字段原样保留，写回时不丢失。
"""
from datetime import datetime, timezone
from decimal import Decimal
from typing import Annotated, Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, field_validator
from pydantic.alias_generators import to_camel

# 金额：内部 Decimal，JSON 输出为数字
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]

TRANSFER_STATUS_COMPLETED = "completed"


def utcnow() -> datetime:
    """当前 UTC 时间"""
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """无时区的时间按 UTC 处理"""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class EntityRecord(BaseModel):
    """实体记录基类"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    def to_record(self) -> Dict[str, Any]:
        """转换为存储格式（camelCase，JSON 兼容）"""
        return self.model_dump(mode="json", by_alias=True)


class Product(EntityRecord):
    """商品（参考数据）"""
    id: int
    sku: str = ""
    name: str = ""
    category: str = ""
    unit_cost: Money = Field(default=Decimal("0"), ge=0)
    reorder_point: int = Field(default=0, ge=0)


class Warehouse(EntityRecord):
    """仓库（参考数据）"""
    id: int
    name: str = ""
    location: str = ""


class StockEntry(EntityRecord):
    """某商品在某仓库的库存"""
    id: int
    product_id: int
    warehouse_id: int
    quantity: int = Field(default=0, ge=0)


class Transfer(EntityRecord):
    """调拨记录，创建后不可修改"""
    model_config = ConfigDict(frozen=True)

    id: int
    product_id: int
    from_warehouse_id: int
    to_warehouse_id: int
    quantity: int = Field(gt=0)
    notes: str = ""
    date: datetime
    status: str = TRANSFER_STATUS_COMPLETED

    @field_validator("notes", mode="before")
    @classmethod
    def _notes_default(cls, v):
        return v or ""

    @field_validator("date")
    @classmethod
    def _date_utc(cls, v):
        return ensure_utc(v)


class AlertAcknowledgment(EntityRecord):
    """告警确认状态（开关，不是日志）"""
    product_id: int
    acknowledged: bool = False
    acknowledged_at: Optional[datetime] = None
    acknowledged_by: Optional[str] = None

    @field_validator("acknowledged_at", "acknowledged_by", mode="before")
    @classmethod
    def _empty_as_none(cls, v):
        if v == "":
            return None
        return v

    @field_validator("acknowledged_at")
    @classmethod
    def _acknowledged_at_utc(cls, v):
        return ensure_utc(v)
