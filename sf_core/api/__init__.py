"""
StockFlow API 路由模块
"""

from fastapi import APIRouter

from .transfers import router as transfers_router
from .alerts import router as alerts_router
from .stock import router as stock_router
from .system import router as system_router

# 创建主路由器
api_router = APIRouter()

api_router.include_router(transfers_router, prefix="/transfers", tags=["Transfers"])
api_router.include_router(alerts_router, prefix="/alerts", tags=["Alerts"])
api_router.include_router(stock_router, prefix="/stock", tags=["Stock"])
api_router.include_router(system_router, prefix="/system", tags=["System"])

__all__ = ["api_router"]
