"""
库存查询 API 路由
"""
from fastapi import APIRouter, Depends, Query

from sf_core.services import StockService
from .deps import get_stock_service

router = APIRouter()


@router.get("/products/{product_id}")
async def product_stock(
    product_id: int,
    stock_service: StockService = Depends(get_stock_service)
):
    """商品总库存和仓库分布"""
    return await stock_service.product_stock(product_id)


@router.get("/availability")
async def stock_availability(
    product_id: int = Query(alias="productId"),
    warehouse_id: int = Query(alias="warehouseId"),
    stock_service: StockService = Depends(get_stock_service)
):
    """某商品在某仓库的可用数量"""
    return await stock_service.availability(product_id, warehouse_id)


@router.get("/warehouses")
async def warehouse_totals(stock_service: StockService = Depends(get_stock_service)):
    """各仓库库存件数和货值"""
    return await stock_service.warehouse_totals()
