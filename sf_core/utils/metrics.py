"""
Prometheus 指标定义

指标在模块级别注册一次，多次创建应用（测试）不会重复注册。
"""
from prometheus_client import Counter, Histogram

# HTTP
HTTP_REQUESTS = Counter(
    'sf_http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status_code']
)

HTTP_REQUEST_DURATION = Histogram(
    'sf_http_request_duration_seconds',
    'HTTP request duration',
    ['method', 'endpoint']
)

# 调拨
TRANSFERS = Counter(
    'sf_transfers_total',
    'Transfer requests by outcome',
    ['result']
)

TRANSFERRED_UNITS = Counter(
    'sf_transferred_units_total',
    'Units moved between warehouses'
)

# 告警确认
ALERT_ACKNOWLEDGMENTS = Counter(
    'sf_alert_acknowledgments_total',
    'Alert acknowledgment changes',
    ['action']
)
