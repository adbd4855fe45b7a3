"""
系统 API 路由
"""
from fastapi import APIRouter, Request

from sf_core import __version__
from sf_core.middleware.metrics import get_metrics_handler

router = APIRouter()


@router.get("/health")
async def health_check(request: Request):
    """健康检查"""
    return {
        "status": "healthy",
        "version": __version__,
        "store": request.app.state.store.__class__.__name__,
    }


@router.get("/metrics")
async def metrics():
    """Prometheus 指标端点"""
    handler = get_metrics_handler()
    return await handler(None)
