"""
调拨服务测试
"""
import asyncio

import pytest

from sf_core.services import AlertService, TransferService
from sf_core.store import EntityType, MemoryEntityStore
from sf_core.utils.errors import (
    ConflictError, InsufficientStockError, NotFoundError, PersistenceError, ValidationError
)


class FailingWriteStore(MemoryEntityStore):
    """写入总是失败的存储"""

    async def _write_many(self, collections):
        raise OSError("disk full")


async def _total(store, product_id):
    records = await store.read_all(EntityType.STOCK_ENTRY)
    return sum(r["quantity"] for r in records if r["productId"] == product_id)


@pytest.mark.asyncio
async def test_transfer_to_new_destination(store, transfer_service, stock_quantity):
    """A 有 40 个，调 10 个到没有库存记录的 B"""
    alerts = AlertService(store)
    before = next(a for a in await alerts.compute_alerts() if a["productId"] == 1)

    transfer = await transfer_service.create_transfer(1, 1, 2, 10, notes="rebalance")

    assert transfer["id"] == 1
    assert transfer["quantity"] == 10
    assert transfer["status"] == "completed"
    assert transfer["notes"] == "rebalance"
    assert transfer["productName"] == "Widget"
    assert transfer["productSku"] == "WID-001"
    assert transfer["fromWarehouseName"] == "Warehouse A"
    assert transfer["toWarehouseName"] == "Warehouse B"

    assert await stock_quantity(1, 1) == 30
    assert await stock_quantity(1, 2) == 10

    stock = await store.read_all(EntityType.STOCK_ENTRY)
    new_entry = next(r for r in stock if r["productId"] == 1 and r["warehouseId"] == 2)
    assert new_entry["id"] == 5

    transfers = await store.read_all(EntityType.TRANSFER)
    assert len(transfers) == 1
    assert transfers[0]["quantity"] == 10

    after = next(a for a in await alerts.compute_alerts() if a["productId"] == 1)
    assert before["status"] == after["status"] == "critical"
    assert before["reorderQuantity"] == after["reorderQuantity"] == 160


@pytest.mark.asyncio
async def test_transfer_to_existing_destination(store, transfer_service, stock_quantity):
    await transfer_service.create_transfer(2, 1, 2, 5)

    assert await stock_quantity(2, 1) == 10
    assert await stock_quantity(2, 2) == 10
    assert len(await store.read_all(EntityType.STOCK_ENTRY)) == 4


@pytest.mark.asyncio
@pytest.mark.parametrize("quantity", [1, 17, 40])
async def test_transfer_conserves_total(store, transfer_service, stock_quantity, quantity):
    before = await _total(store, 1)

    await transfer_service.create_transfer(1, 1, 3, quantity)

    assert await _total(store, 1) == before
    assert await stock_quantity(1, 1) == 40 - quantity


@pytest.mark.asyncio
async def test_transfer_ids_increase(store, transfer_service):
    first = await transfer_service.create_transfer(1, 1, 2, 1)
    second = await transfer_service.create_transfer(1, 2, 3, 1)

    assert second["id"] == first["id"] + 1


@pytest.mark.asyncio
async def test_zero_quantity_entry_is_kept(store, transfer_service, stock_quantity):
    await transfer_service.create_transfer(1, 1, 2, 40)

    assert await stock_quantity(1, 1) == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("product_id,quantity", [
    (1, 5),
    (999, 5),
    (1, -3),
    (1, "lots"),
    ("abc", 5),
    (1.5, 5),
    (True, 5),
])
async def test_same_warehouse_rejected(transfer_service, product_id, quantity):
    with pytest.raises(ValidationError) as exc_info:
        await transfer_service.create_transfer(product_id, 2, 2, quantity)

    assert exc_info.value.code == "SAME_WAREHOUSE"
    assert exc_info.value.status == 400


@pytest.mark.asyncio
async def test_same_warehouse_compares_numeric_ids(transfer_service):
    with pytest.raises(ValidationError) as exc_info:
        await transfer_service.create_transfer(1, "3", 3, 5)

    assert exc_info.value.code == "SAME_WAREHOUSE"


@pytest.mark.asyncio
@pytest.mark.parametrize("args", [
    (None, 1, 2, 5),
    (1, None, 2, 5),
    (1, 1, "", 5),
    (1, 1, 2, None),
])
async def test_missing_fields(transfer_service, args):
    with pytest.raises(ValidationError) as exc_info:
        await transfer_service.create_transfer(*args)

    assert exc_info.value.code == "MISSING_FIELDS"


@pytest.mark.asyncio
@pytest.mark.parametrize("quantity", [0, -1, 2.5, "abc", True])
async def test_invalid_quantity(transfer_service, quantity):
    with pytest.raises(ValidationError) as exc_info:
        await transfer_service.create_transfer(1, 1, 2, quantity)

    assert exc_info.value.code == "INVALID_QUANTITY"


@pytest.mark.asyncio
async def test_string_inputs_are_accepted(transfer_service, stock_quantity):
    transfer = await transfer_service.create_transfer("1", "1", "2", "4")

    assert transfer["productId"] == 1
    assert transfer["quantity"] == 4
    assert await stock_quantity(1, 2) == 4


@pytest.mark.asyncio
async def test_invalid_identifier(transfer_service):
    with pytest.raises(ValidationError) as exc_info:
        await transfer_service.create_transfer("abc", 1, 2, 4)

    assert exc_info.value.code == "INVALID_IDENTIFIER"


@pytest.mark.asyncio
async def test_unknown_product(transfer_service):
    with pytest.raises(NotFoundError) as exc_info:
        await transfer_service.create_transfer(999, 1, 2, 5)

    assert exc_info.value.status == 404
    assert exc_info.value.detail == "Product not found"


@pytest.mark.asyncio
@pytest.mark.parametrize("from_id,to_id", [(99, 1), (1, 99)])
async def test_unknown_warehouse(transfer_service, from_id, to_id):
    with pytest.raises(NotFoundError) as exc_info:
        await transfer_service.create_transfer(1, from_id, to_id, 5)

    assert exc_info.value.detail == "Warehouse not found"


@pytest.mark.asyncio
async def test_insufficient_stock(store, transfer_service, stock_quantity):
    with pytest.raises(InsufficientStockError) as exc_info:
        await transfer_service.create_transfer(1, 1, 2, 41)

    error = exc_info.value
    assert isinstance(error, ConflictError)
    assert error.status == 400
    assert error.available == 40
    assert error.requested == 41
    assert "Warehouse A" in error.detail
    assert "40" in error.detail and "41" in error.detail

    assert await stock_quantity(1, 1) == 40
    assert await store.read_all(EntityType.TRANSFER) == []


@pytest.mark.asyncio
async def test_missing_source_entry_reports_zero_available(transfer_service):
    with pytest.raises(InsufficientStockError) as exc_info:
        await transfer_service.create_transfer(3, 1, 2, 1)

    assert exc_info.value.available == 0
    assert exc_info.value.detail == "Insufficient stock in Warehouse A. Available: 0, Requested: 1"


@pytest.mark.asyncio
async def test_concurrent_transfers_cannot_overdraw(store, transfer_service, stock_quantity):
    results = await asyncio.gather(
        transfer_service.create_transfer(1, 1, 2, 30),
        transfer_service.create_transfer(1, 1, 3, 30),
        return_exceptions=True,
    )

    assert sum(1 for r in results if isinstance(r, InsufficientStockError)) == 1
    assert await stock_quantity(1, 1) == 10
    assert await _total(store, 1) == 40


@pytest.mark.asyncio
async def test_write_failure_raises_persistence_error(sample_products, sample_warehouses, sample_stock):
    store = FailingWriteStore({
        EntityType.PRODUCT: sample_products,
        EntityType.WAREHOUSE: sample_warehouses,
        EntityType.STOCK_ENTRY: sample_stock,
    })
    service = TransferService(store)

    with pytest.raises(PersistenceError) as exc_info:
        await service.create_transfer(1, 1, 2, 5)

    assert exc_info.value.status == 500
    assert await store.read_all(EntityType.STOCK_ENTRY) == sample_stock
    assert await store.read_all(EntityType.TRANSFER) == []


@pytest.mark.asyncio
async def test_list_transfers_newest_first_with_fallbacks(store, transfer_service):
    await store.write_all(EntityType.TRANSFER, [
        {"id": 1, "productId": 1, "fromWarehouseId": 1, "toWarehouseId": 2, "quantity": 5,
         "notes": "", "date": "2026-01-01T08:00:00.000Z", "status": "completed"},
        {"id": 2, "productId": 77, "fromWarehouseId": 1, "toWarehouseId": 88, "quantity": 3,
         "notes": "", "date": "2026-03-01T08:00:00.000Z", "status": "completed"},
        {"id": 3, "productId": 2, "fromWarehouseId": 2, "toWarehouseId": 3, "quantity": 1,
         "date": "2026-02-01T08:00:00", "status": "completed"},
    ])

    transfers = await transfer_service.list_transfers()

    assert [t["id"] for t in transfers] == [2, 3, 1]
    orphan = transfers[0]
    assert orphan["productName"] == "Unknown Product"
    assert orphan["productSku"] == "N/A"
    assert orphan["fromWarehouseName"] == "Warehouse A"
    assert orphan["toWarehouseName"] == "Unknown Warehouse"
    assert transfers[1]["notes"] == ""


@pytest.mark.asyncio
async def test_list_transfers_filters(store, transfer_service):
    await transfer_service.create_transfer(1, 1, 2, 5)
    await transfer_service.create_transfer(2, 2, 3, 1)

    assert [t["productId"] for t in await transfer_service.list_transfers(product_id=2)] == [2]
    assert len(await transfer_service.list_transfers(warehouse_id="2")) == 2
    assert await transfer_service.list_transfers(warehouse_id=1) == [
        t for t in await transfer_service.list_transfers() if t["productId"] == 1
    ]


@pytest.mark.asyncio
async def test_list_transfers_empty(transfer_service):
    assert await transfer_service.list_transfers() == []
