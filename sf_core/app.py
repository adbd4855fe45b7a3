"""
StockFlow FastAPI 主应用
"""
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from sf_core import __version__
from sf_core.config import Settings, get_settings
from sf_core.utils.logger import setup_logging, get_logger
from sf_core.utils.errors import StockFlowException
from sf_core.store import EntityStore, create_store
from sf_core.services import AlertService, StockService, TransferService
from sf_core.middleware.logging import LoggingMiddleware
from sf_core.middleware.metrics import MetricsMiddleware
from sf_core.api import api_router

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    logger.info(
        "Starting StockFlow application",
        version=__version__,
        store=app.state.store.__class__.__name__
    )

    yield

    logger.info("Shutting down StockFlow application")
    try:
        await app.state.store.close()
    except Exception:
        logger.error("Error during application shutdown", exc_info=True)


def create_app(settings: Optional[Settings] = None, store: Optional[EntityStore] = None) -> FastAPI:
    """创建 FastAPI 应用

    store 为空时按配置创建；测试时可注入内存存储。
    """
    settings = settings or get_settings()

    setup_logging(
        log_level=settings.log_level,
        log_format=settings.log_format
    )

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        description="StockFlow multi-warehouse inventory API",
        docs_url="/docs" if settings.api_debug else None,
        redoc_url="/redoc" if settings.api_debug else None,
        openapi_url="/openapi.json" if settings.api_debug else None,
        lifespan=lifespan,
    )

    # 服务实例在应用级别共享，调拨锁才能覆盖所有请求
    app.state.settings = settings
    app.state.store = store if store is not None else create_store(settings)
    app.state.transfer_service = TransferService(app.state.store)
    app.state.alert_service = AlertService(
        app.state.store,
        default_acknowledged_by=settings.default_acknowledged_by
    )
    app.state.stock_service = StockService(app.state.store)

    # 添加中间件（后添加的先执行）
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.api_debug else settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if settings.metrics_enabled:
        app.add_middleware(MetricsMiddleware)

    app.add_middleware(LoggingMiddleware)

    app.include_router(api_router, prefix=settings.api_prefix)

    @app.exception_handler(StockFlowException)
    async def stockflow_exception_handler(request: Request, exc: StockFlowException):
        """处理 StockFlow 自定义异常"""
        return exc.to_response(request)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """请求格式错误按 400 返回"""
        logger.warning("Request validation failed", path=request.url.path, errors=str(exc.errors()))
        return JSONResponse(
            status_code=400,
            content={
                "error": "Request validation failed",
                "code": "VALIDATION_ERROR",
            }
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """处理 HTTP 异常（404 路由、405 方法等）"""
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": exc.detail,
                "code": f"HTTP_{exc.status_code}",
            }
        )

    @app.exception_handler(Exception)
    async def internal_server_error_handler(request: Request, exc: Exception):
        """处理未捕获的服务器错误"""
        logger.error("Unhandled server error", path=request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={
                "error": "An internal server error occurred",
                "code": "INTERNAL_SERVER_ERROR",
            }
        )

    @app.get("/healthz")
    async def health_check():
        """健康检查端点"""
        return {"status": "healthy"}

    return app


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "sf_core.app:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_debug,
        log_level=settings.log_level.lower(),
        access_log=False,  # 使用自定义日志中间件
    )
