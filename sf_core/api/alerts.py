"""
库存告警 API 路由
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from sf_core.services import AlertService
from .deps import get_alert_service
from .models import AcknowledgeAlertRequest, AcknowledgeAlertResponse, MessageResponse

router = APIRouter()


@router.get("")
async def list_alerts(
    severity: Optional[str] = Query(default=None, description="critical/high/medium/low"),
    acknowledged: Optional[bool] = Query(default=None),
    alert_service: AlertService = Depends(get_alert_service)
):
    """所有商品的库存告警（按严重级别排序）"""
    return await alert_service.compute_alerts(severity=severity, acknowledged=acknowledged)


@router.get("/summary")
async def alert_summary(alert_service: AlertService = Depends(get_alert_service)):
    """告警统计"""
    return await alert_service.summarize()


@router.post("", response_model=AcknowledgeAlertResponse)
async def acknowledge_alert(
    payload: AcknowledgeAlertRequest,
    alert_service: AlertService = Depends(get_alert_service)
):
    """确认告警"""
    alert = await alert_service.acknowledge(payload.product_id, payload.acknowledged_by)
    return AcknowledgeAlertResponse(message="Alert acknowledged successfully", alert=alert)


@router.delete("", response_model=MessageResponse)
async def unacknowledge_alert(
    product_id: Optional[str] = Query(default=None, alias="productId"),
    alert_service: AlertService = Depends(get_alert_service)
):
    """取消确认（幂等）"""
    await alert_service.unacknowledge(product_id)
    return MessageResponse(message="Alert unacknowledged successfully")
