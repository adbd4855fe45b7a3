"""
StockFlow 核心服务模块
"""
from .base import BaseService
from .ledger import StockLedger, StockService
from .transfers import TransferService
from .alerts import AlertService, classify_stock

__all__ = [
    "BaseService",
    "StockLedger",
    "StockService",
    "TransferService",
    "AlertService",
    "classify_stock",
]
