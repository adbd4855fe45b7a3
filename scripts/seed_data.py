#!/usr/bin/env python3
"""
写入示例库存数据

功能：
1. 向配置的实体存储写入示例商品、仓库和库存
2. 可选清空调拨记录和告警确认

使用方法：
    PYTHONPATH=. python scripts/seed_data.py
    SF__STORE_BACKEND=database PYTHONPATH=. python scripts/seed_data.py --create-schema --reset
"""
import argparse
import asyncio
import logging
import sys
from pathlib import Path

# 确保可以导入项目模块
sys.path.insert(0, str(Path(__file__).parent.parent))

from sf_core.config import get_settings
from sf_core.store import EntityType, create_store

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


SAMPLE_PRODUCTS = [
    {"id": 1, "sku": "WH-1001", "name": "Wireless Headphones", "category": "Electronics", "unitCost": 45.5, "reorderPoint": 50},
    {"id": 2, "sku": "OC-2001", "name": "Office Chair", "category": "Furniture", "unitCost": 120.0, "reorderPoint": 20},
    {"id": 3, "sku": "CB-3001", "name": "Coffee Beans 1kg", "category": "Food", "unitCost": 12.75, "reorderPoint": 100},
    {"id": 4, "sku": "DL-4001", "name": "Desk Lamp", "category": "Electronics", "unitCost": 18.0, "reorderPoint": 30},
]

SAMPLE_WAREHOUSES = [
    {"id": 1, "name": "Main Warehouse", "location": "Seattle, WA"},
    {"id": 2, "name": "East Coast Hub", "location": "Newark, NJ"},
    {"id": 3, "name": "Central Depot", "location": "Dallas, TX"},
]

SAMPLE_STOCK = [
    {"id": 1, "productId": 1, "warehouseId": 1, "quantity": 80},
    {"id": 2, "productId": 1, "warehouseId": 2, "quantity": 40},
    {"id": 3, "productId": 2, "warehouseId": 1, "quantity": 6},
    {"id": 4, "productId": 3, "warehouseId": 2, "quantity": 70},
    {"id": 5, "productId": 3, "warehouseId": 3, "quantity": 0},
    {"id": 6, "productId": 4, "warehouseId": 3, "quantity": 150},
]


async def seed(reset: bool, create_schema: bool) -> None:
    settings = get_settings()
    store = create_store(settings)

    try:
        if create_schema and hasattr(store, "create_schema"):
            await store.create_schema()

        collections = {
            EntityType.PRODUCT: SAMPLE_PRODUCTS,
            EntityType.WAREHOUSE: SAMPLE_WAREHOUSES,
            EntityType.STOCK_ENTRY: SAMPLE_STOCK,
        }
        if reset:
            collections[EntityType.TRANSFER] = []
            collections[EntityType.ALERT_ACKNOWLEDGMENT] = []

        await store.write_batch(collections)
        logger.info(
            f"Seeded {len(SAMPLE_PRODUCTS)} products, {len(SAMPLE_WAREHOUSES)} warehouses, "
            f"{len(SAMPLE_STOCK)} stock entries into {settings.store_backend} store"
        )
    finally:
        await store.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description='写入示例库存数据')
    parser.add_argument('--reset', action='store_true', help='同时清空调拨记录和告警确认')
    parser.add_argument('--create-schema', action='store_true', help='数据库存储：先创建表')
    args = parser.parse_args()

    asyncio.run(seed(reset=args.reset, create_schema=args.create_schema))
