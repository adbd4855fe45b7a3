"""
库存调拨服务

在两个仓库之间移动某商品的库存：校验通过后扣减源库存、
增加（或新建）目标库存，并追加一条不可变的调拨记录。
"""
import asyncio
from typing import Any, Dict, List, Optional

from sf_core.models.records import (
    Product, Warehouse, StockEntry, Transfer, TRANSFER_STATUS_COMPLETED, utcnow
)
from sf_core.store import EntityStore, EntityType
from sf_core.utils.errors import (
    StockFlowException, ValidationError, NotFoundError, InsufficientStockError
)
from sf_core.utils.metrics import TRANSFERS, TRANSFERRED_UNITS
from .base import BaseService, coerce_id, optional_id

UNKNOWN_PRODUCT = "Unknown Product"
UNKNOWN_WAREHOUSE = "Unknown Warehouse"
UNKNOWN_SKU = "N/A"


def parse_quantity(value: Any) -> int:
    """调拨数量必须是正整数"""
    quantity: Optional[int] = None
    if isinstance(value, bool):
        quantity = None
    elif isinstance(value, int):
        quantity = value
    elif isinstance(value, float) and value.is_integer():
        quantity = int(value)
    elif isinstance(value, str):
        try:
            quantity = int(value.strip())
        except ValueError:
            quantity = None

    if quantity is None or quantity <= 0:
        raise ValidationError(
            code="INVALID_QUANTITY",
            detail="Quantity must be a positive integer"
        )
    return quantity


class TransferService(BaseService):
    """调拨服务"""

    def __init__(self, store: EntityStore):
        super().__init__(store)
        # 读取-校验-写入必须串行，否则两个并发调拨可能同时通过库存校验
        self._lock = asyncio.Lock()

    async def create_transfer(
        self,
        product_id: Any,
        from_warehouse_id: Any,
        to_warehouse_id: Any,
        quantity: Any,
        notes: Optional[str] = None
    ) -> Dict[str, Any]:
        """创建调拨，返回带展示名称的调拨记录"""
        try:
            request = self._validate_request(product_id, from_warehouse_id, to_warehouse_id, quantity)

            async with self._lock:
                result = await self._execute(notes=notes, **request)

        except StockFlowException as e:
            TRANSFERS.labels(result="failed" if e.status >= 500 else "rejected").inc()
            log = self.logger.error if e.status >= 500 else self.logger.warning
            log(
                "Transfer rejected",
                code=e.code,
                detail=e.detail,
                product_id=product_id,
                from_warehouse_id=from_warehouse_id,
                to_warehouse_id=to_warehouse_id,
                quantity=quantity
            )
            raise

        TRANSFERS.labels(result="completed").inc()
        TRANSFERRED_UNITS.inc(result["quantity"])
        return result

    def _validate_request(
        self,
        product_id: Any,
        from_warehouse_id: Any,
        to_warehouse_id: Any,
        quantity: Any
    ) -> Dict[str, int]:
        """校验请求本身（不依赖存储）"""
        self.validate_required_fields(
            {
                "productId": product_id,
                "fromWarehouseId": from_warehouse_id,
                "toWarehouseId": to_warehouse_id,
                "quantity": quantity,
            },
            ["productId", "fromWarehouseId", "toWarehouseId", "quantity"]
        )

        from_warehouse_id = coerce_id(from_warehouse_id, "fromWarehouseId")
        to_warehouse_id = coerce_id(to_warehouse_id, "toWarehouseId")

        if from_warehouse_id == to_warehouse_id:
            raise ValidationError(
                code="SAME_WAREHOUSE",
                detail="Source and destination warehouses must be different"
            )

        return {
            "product_id": coerce_id(product_id, "productId"),
            "from_warehouse_id": from_warehouse_id,
            "to_warehouse_id": to_warehouse_id,
            "quantity": parse_quantity(quantity),
        }

    async def _execute(
        self,
        product_id: int,
        from_warehouse_id: int,
        to_warehouse_id: int,
        quantity: int,
        notes: Optional[str]
    ) -> Dict[str, Any]:
        """校验引用和库存后执行调拨"""
        products = self.index_by_id(await self.load(EntityType.PRODUCT, Product))
        warehouses = self.index_by_id(await self.load(EntityType.WAREHOUSE, Warehouse))

        product = products.get(product_id)
        if product is None:
            raise NotFoundError(code="PRODUCT_NOT_FOUND", resource="Product")

        from_warehouse = warehouses.get(from_warehouse_id)
        to_warehouse = warehouses.get(to_warehouse_id)
        if from_warehouse is None or to_warehouse is None:
            raise NotFoundError(code="WAREHOUSE_NOT_FOUND", resource="Warehouse")

        stock = await self.load(EntityType.STOCK_ENTRY, StockEntry)
        source = self._find_entry(stock, product_id, from_warehouse_id)
        available = source.quantity if source else 0
        if source is None or available < quantity:
            raise InsufficientStockError(from_warehouse.name, available, quantity)

        transfers = await self.load(EntityType.TRANSFER, Transfer)

        source.quantity -= quantity

        destination = self._find_entry(stock, product_id, to_warehouse_id)
        if destination is not None:
            destination.quantity += quantity
        else:
            stock.append(StockEntry(
                id=self.next_id(stock),
                product_id=product_id,
                warehouse_id=to_warehouse_id,
                quantity=quantity,
            ))

        transfer = Transfer(
            id=self.next_id(transfers),
            product_id=product_id,
            from_warehouse_id=from_warehouse_id,
            to_warehouse_id=to_warehouse_id,
            quantity=quantity,
            notes=str(notes).strip() if notes else "",
            date=utcnow(),
            status=TRANSFER_STATUS_COMPLETED,
        )
        transfers.append(transfer)

        await self.store.write_batch({
            EntityType.STOCK_ENTRY: [entry.to_record() for entry in stock],
            EntityType.TRANSFER: [t.to_record() for t in transfers],
        })

        self.logger.info(
            "Transfer completed",
            transfer_id=transfer.id,
            product_id=product_id,
            from_warehouse_id=from_warehouse_id,
            to_warehouse_id=to_warehouse_id,
            quantity=quantity,
            source_remaining=source.quantity
        )

        return self._enrich(transfer, products, warehouses)

    async def list_transfers(
        self,
        product_id: Any = None,
        warehouse_id: Any = None
    ) -> List[Dict[str, Any]]:
        """列出调拨记录（最新在前），可按商品或仓库过滤"""
        product_filter = optional_id(product_id, "productId")
        warehouse_filter = optional_id(warehouse_id, "warehouseId")

        transfers = await self.load(EntityType.TRANSFER, Transfer)
        products = self.index_by_id(await self.load(EntityType.PRODUCT, Product))
        warehouses = self.index_by_id(await self.load(EntityType.WAREHOUSE, Warehouse))

        if product_filter is not None:
            transfers = [t for t in transfers if t.product_id == product_filter]
        if warehouse_filter is not None:
            transfers = [
                t for t in transfers
                if warehouse_filter in (t.from_warehouse_id, t.to_warehouse_id)
            ]

        # sorted 是稳定排序，日期相同的记录保持存储顺序
        transfers = sorted(transfers, key=lambda t: t.date, reverse=True)

        return [self._enrich(t, products, warehouses) for t in transfers]

    @staticmethod
    def _find_entry(stock: List[StockEntry], product_id: int, warehouse_id: int) -> Optional[StockEntry]:
        for entry in stock:
            if entry.product_id == product_id and entry.warehouse_id == warehouse_id:
                return entry
        return None

    @staticmethod
    def _enrich(
        transfer: Transfer,
        products: Dict[int, Product],
        warehouses: Dict[int, Warehouse]
    ) -> Dict[str, Any]:
        """附加商品和仓库的展示名称，找不到时使用占位名称"""
        product = products.get(transfer.product_id)
        from_warehouse = warehouses.get(transfer.from_warehouse_id)
        to_warehouse = warehouses.get(transfer.to_warehouse_id)

        record = transfer.to_record()
        record.update({
            "productName": (product.name if product else None) or UNKNOWN_PRODUCT,
            "productSku": (product.sku if product else None) or UNKNOWN_SKU,
            "fromWarehouseName": (from_warehouse.name if from_warehouse else None) or UNKNOWN_WAREHOUSE,
            "toWarehouseName": (to_warehouse.name if to_warehouse else None) or UNKNOWN_WAREHOUSE,
        })
        return record
