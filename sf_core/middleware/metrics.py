"""
指标收集中间件
"""
import re
import time
from typing import Callable

from fastapi import Request, Response
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.middleware.base import BaseHTTPMiddleware

from sf_core.utils.metrics import HTTP_REQUESTS, HTTP_REQUEST_DURATION


class MetricsMiddleware(BaseHTTPMiddleware):
    """指标收集中间件"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        method = request.method
        endpoint = self._get_endpoint_pattern(request)

        start_time = time.time()

        try:
            response = await call_next(request)
        except Exception:
            HTTP_REQUESTS.labels(method=method, endpoint=endpoint, status_code="500").inc()
            HTTP_REQUEST_DURATION.labels(method=method, endpoint=endpoint).observe(time.time() - start_time)
            raise

        HTTP_REQUESTS.labels(
            method=method,
            endpoint=endpoint,
            status_code=str(response.status_code)
        ).inc()
        HTTP_REQUEST_DURATION.labels(
            method=method,
            endpoint=endpoint
        ).observe(time.time() - start_time)

        return response

    def _get_endpoint_pattern(self, request: Request) -> str:
        """获取端点模式（用于聚合指标）"""
        path = request.url.path

        # 替换数字 ID
        path = re.sub(r'/\d+', '/{id}', path)

        return path or "/"


def get_metrics_handler():
    """获取指标端点处理器"""
    async def metrics_endpoint(request: Request = None):
        return Response(
            generate_latest(),
            media_type=CONTENT_TYPE_LATEST
        )

    return metrics_endpoint
