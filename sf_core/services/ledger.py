"""
库存账本

只读视图：回答"某商品在某仓库有多少"和"某商品总共有多少"。
缺失数据返回 0 或空列表，不抛错。
"""
from collections import defaultdict
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from sf_core.models.records import Product, StockEntry, Warehouse
from sf_core.store import EntityType
from .base import BaseService

UNKNOWN_LABEL = "Unknown"


class StockLedger:
    """库存账本"""

    def __init__(self, stock_entries: Iterable[StockEntry], warehouses: Iterable[Warehouse] = ()):
        self.entries: List[StockEntry] = list(stock_entries)
        self.warehouses: Dict[int, Warehouse] = {}
        for warehouse in warehouses:
            self.warehouses.setdefault(warehouse.id, warehouse)

        self._by_product: Dict[int, List[StockEntry]] = defaultdict(list)
        for entry in self.entries:
            self._by_product[entry.product_id].append(entry)

    def quantity_at(self, product_id: int, warehouse_id: int) -> int:
        """某商品在某仓库的数量"""
        return sum(
            e.quantity for e in self._by_product.get(product_id, ())
            if e.warehouse_id == warehouse_id
        )

    def total_quantity(self, product_id: int) -> int:
        """某商品在所有仓库的总数量"""
        return sum(e.quantity for e in self._by_product.get(product_id, ()))

    def breakdown(self, product_id: int) -> List[Dict[str, Any]]:
        """按仓库分布（保留数量为 0 的条目，顺序与库存集合一致）"""
        result = []
        for entry in self._by_product.get(product_id, ()):
            warehouse: Optional[Warehouse] = self.warehouses.get(entry.warehouse_id)
            result.append({
                "warehouseId": entry.warehouse_id,
                "warehouseName": warehouse.name if warehouse else UNKNOWN_LABEL,
                "warehouseLocation": warehouse.location if warehouse else UNKNOWN_LABEL,
                "quantity": entry.quantity,
            })
        return result

    def warehouse_totals(self, products: Iterable[Product]) -> List[Dict[str, Any]]:
        """每个仓库的库存件数和货值"""
        unit_costs = {}
        for product in products:
            unit_costs.setdefault(product.id, product.unit_cost)

        totals = []
        for warehouse in self.warehouses.values():
            entries = [e for e in self.entries if e.warehouse_id == warehouse.id]
            totals.append({
                "warehouseId": warehouse.id,
                "warehouseName": warehouse.name,
                "warehouseLocation": warehouse.location,
                "items": sum(e.quantity for e in entries),
                "value": sum(
                    (unit_costs.get(e.product_id, Decimal("0")) * e.quantity for e in entries),
                    Decimal("0")
                ),
            })
        return totals


class StockService(BaseService):
    """库存查询服务"""

    async def get_ledger(self) -> StockLedger:
        """加载当前库存账本"""
        entries = await self.load(EntityType.STOCK_ENTRY, StockEntry)
        warehouses = await self.load(EntityType.WAREHOUSE, Warehouse)
        return StockLedger(entries, warehouses)

    async def product_stock(self, product_id: int) -> Dict[str, Any]:
        """某商品的总量和仓库分布"""
        ledger = await self.get_ledger()
        return {
            "productId": product_id,
            "totalQuantity": ledger.total_quantity(product_id),
            "breakdown": ledger.breakdown(product_id),
        }

    async def availability(self, product_id: int, warehouse_id: int) -> Dict[str, Any]:
        """某商品在某仓库的可用数量"""
        ledger = await self.get_ledger()
        return {
            "productId": product_id,
            "warehouseId": warehouse_id,
            "quantity": ledger.quantity_at(product_id, warehouse_id),
        }

    async def warehouse_totals(self) -> List[Dict[str, Any]]:
        """各仓库库存汇总"""
        ledger = await self.get_ledger()
        products = await self.load(EntityType.PRODUCT, Product)
        return ledger.warehouse_totals(products)
