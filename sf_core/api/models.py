"""
API 请求/响应模型

请求字段保持宽松（Any），由服务层按固定顺序校验，
以保证错误码和错误信息与调拨/告警规则一致。
"""
from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """camelCase 字段模型"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class CreateTransferRequest(CamelModel):
    """创建调拨请求"""
    product_id: Optional[Any] = Field(default=None, description="商品ID")
    from_warehouse_id: Optional[Any] = Field(default=None, description="源仓库ID")
    to_warehouse_id: Optional[Any] = Field(default=None, description="目标仓库ID")
    quantity: Optional[Any] = Field(default=None, description="调拨数量（正整数）")
    notes: Optional[Any] = Field(default=None, description="备注")


class AcknowledgeAlertRequest(CamelModel):
    """确认告警请求"""
    product_id: Optional[Any] = Field(default=None, description="商品ID")
    acknowledged_by: Optional[Any] = Field(default=None, description="确认人")


class MessageResponse(BaseModel):
    """消息响应"""
    message: str


class AcknowledgeAlertResponse(MessageResponse):
    """确认告警响应"""
    alert: Dict[str, Any]
