"""
依赖注入：服务实例在应用创建时构建，挂在 app.state 上
"""
from fastapi import Request

from sf_core.services import AlertService, StockService, TransferService


def get_transfer_service(request: Request) -> TransferService:
    return request.app.state.transfer_service


def get_alert_service(request: Request) -> AlertService:
    return request.app.state.alert_service


def get_stock_service(request: Request) -> StockService:
    return request.app.state.stock_service
