"""
调拨 API 路由
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from sf_core.services import TransferService
from .deps import get_transfer_service
from .models import CreateTransferRequest

router = APIRouter()


@router.get("")
async def list_transfers(
    product_id: Optional[str] = Query(default=None, alias="productId"),
    warehouse_id: Optional[str] = Query(default=None, alias="warehouseId"),
    transfer_service: TransferService = Depends(get_transfer_service)
):
    """调拨记录列表（最新在前）"""
    return await transfer_service.list_transfers(
        product_id=product_id,
        warehouse_id=warehouse_id
    )


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_transfer(
    payload: CreateTransferRequest,
    transfer_service: TransferService = Depends(get_transfer_service)
):
    """创建调拨"""
    return await transfer_service.create_transfer(
        product_id=payload.product_id,
        from_warehouse_id=payload.from_warehouse_id,
        to_warehouse_id=payload.to_warehouse_id,
        quantity=payload.quantity,
        notes=payload.notes
    )
