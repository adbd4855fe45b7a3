"""
StockFlow 错误处理系统
每个异常一对一映射为 HTTP 响应 {"error": ..., "code": ...}
"""
from typing import Any, Dict, Optional
from fastapi import Request
from fastapi.responses import JSONResponse


class StockFlowException(Exception):
    """StockFlow 基础异常类"""

    def __init__(
        self,
        status: int,
        code: str,
        title: str,
        detail: Optional[str] = None,
        **kwargs
    ):
        self.status = status
        self.code = code
        self.title = title
        self.detail = detail
        self.extra = kwargs
        super().__init__(detail or title)

    def to_dict(self) -> Dict[str, Any]:
        """转换为响应体"""
        body: Dict[str, Any] = {
            "error": self.detail or self.title,
            "code": self.code,
        }
        body.update({k: v for k, v in self.extra.items() if v is not None})
        return body

    def to_response(self, request: Optional[Request] = None) -> JSONResponse:
        """转换为 JSON 响应"""
        return JSONResponse(status_code=self.status, content=self.to_dict())


# 预定义错误类
class ValidationError(StockFlowException):
    """400 输入校验失败（调用方可修正）"""
    def __init__(self, code: str, detail: str):
        super().__init__(
            status=400,
            code=code,
            title="Validation Failed",
            detail=detail
        )


class NotFoundError(StockFlowException):
    """404 引用的商品/仓库不存在"""
    def __init__(self, code: str, resource: str):
        super().__init__(
            status=404,
            code=code,
            title="Not Found",
            detail=f"{resource} not found"
        )


class ConflictError(StockFlowException):
    """请求合法但与当前状态冲突（如库存不足），以 400 返回"""
    def __init__(self, code: str, detail: str, **kwargs):
        super().__init__(
            status=400,
            code=code,
            title="Conflict",
            detail=detail,
            **kwargs
        )


class InsufficientStockError(ConflictError):
    """源仓库库存不足"""
    def __init__(self, warehouse_name: str, available: int, requested: int):
        self.available = available
        self.requested = requested
        super().__init__(
            code="INSUFFICIENT_STOCK",
            detail=f"Insufficient stock in {warehouse_name}. Available: {available}, Requested: {requested}",
            available=available,
            requested=requested
        )


class PersistenceError(StockFlowException):
    """500 持久化存储读写失败"""
    def __init__(self, code: str = "PERSISTENCE_FAILED", detail: str = "Failed to access the entity store"):
        super().__init__(
            status=500,
            code=code,
            title="Persistence Failure",
            detail=detail
        )

