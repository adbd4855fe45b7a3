"""
Pytest 配置和 fixtures
"""
from typing import AsyncGenerator

import httpx
import pytest
import pytest_asyncio

from sf_core.app import create_app
from sf_core.config import Settings
from sf_core.services import AlertService, StockService, TransferService
from sf_core.store import EntityType, MemoryEntityStore


@pytest.fixture
def sample_products():
    """示例商品：1 号即补货点 100、单价 2.00 的场景商品"""
    return [
        {"id": 1, "sku": "WID-001", "name": "Widget", "category": "Hardware", "unitCost": 2.00, "reorderPoint": 100},
        {"id": 2, "sku": "GAD-002", "name": "Gadget", "category": "Electronics", "unitCost": 10.5, "reorderPoint": 20},
        {"id": 3, "sku": "GIZ-003", "name": "Gizmo", "category": "Hardware", "unitCost": 5, "reorderPoint": 10},
    ]


@pytest.fixture
def sample_warehouses():
    """示例仓库"""
    return [
        {"id": 1, "name": "Warehouse A", "location": "Seattle, WA"},
        {"id": 2, "name": "Warehouse B", "location": "Newark, NJ"},
        {"id": 3, "name": "Warehouse C", "location": "Dallas, TX"},
    ]


@pytest.fixture
def sample_stock():
    """示例库存：Widget 40（critical）、Gadget 20（adequate）、Gizmo 31（overstocked）"""
    return [
        {"id": 1, "productId": 1, "warehouseId": 1, "quantity": 40},
        {"id": 2, "productId": 2, "warehouseId": 1, "quantity": 15},
        {"id": 3, "productId": 2, "warehouseId": 2, "quantity": 5},
        {"id": 4, "productId": 3, "warehouseId": 3, "quantity": 31},
    ]


@pytest.fixture
def store(sample_products, sample_warehouses, sample_stock) -> MemoryEntityStore:
    """预置示例数据的内存存储"""
    return MemoryEntityStore({
        EntityType.PRODUCT: sample_products,
        EntityType.WAREHOUSE: sample_warehouses,
        EntityType.STOCK_ENTRY: sample_stock,
    })


@pytest.fixture
def transfer_service(store) -> TransferService:
    return TransferService(store)


@pytest.fixture
def alert_service(store) -> AlertService:
    return AlertService(store)


@pytest.fixture
def stock_service(store) -> StockService:
    return StockService(store)


@pytest.fixture
def settings() -> Settings:
    """测试配置（不读取 .env）"""
    return Settings(_env_file=None, store_backend="memory", log_format="text", log_level="WARNING")


@pytest_asyncio.fixture
async def client(settings, store) -> AsyncGenerator[httpx.AsyncClient, None]:
    """API 测试客户端"""
    app = create_app(settings=settings, store=store)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def stock_quantity(store):
    """读取存储中某条库存的数量，不存在返回 None"""
    async def _read(product_id: int, warehouse_id: int):
        for record in await store.read_all(EntityType.STOCK_ENTRY):
            if record["productId"] == product_id and record["warehouseId"] == warehouse_id:
                return record["quantity"]
        return None
    return _read
