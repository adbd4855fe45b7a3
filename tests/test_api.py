"""
HTTP 接口测试
"""
import httpx
import pytest

from sf_core.app import create_app
from sf_core.store import EntityType, MemoryEntityStore

TRANSFER = {"productId": 1, "fromWarehouseId": 1, "toWarehouseId": 2, "quantity": 10}


class FailingReadStore(MemoryEntityStore):
    """读取总是失败的存储"""

    async def _read(self, entity_type):
        raise OSError("store offline")


@pytest.mark.asyncio
async def test_create_and_list_transfers(client):
    response = await client.post("/api/transfers", json={**TRANSFER, "notes": "restock B"})

    assert response.status_code == 201
    created = response.json()
    assert created["id"] == 1
    assert created["quantity"] == 10
    assert created["notes"] == "restock B"
    assert created["status"] == "completed"
    assert created["productName"] == "Widget"
    assert created["toWarehouseName"] == "Warehouse B"
    assert created["date"]

    response = await client.get("/api/transfers")
    assert response.status_code == 200
    assert [t["id"] for t in response.json()] == [1]

    response = await client.get("/api/transfers", params={"productId": 2})
    assert response.json() == []


@pytest.mark.asyncio
async def test_transfer_updates_stock_views(client):
    await client.post("/api/transfers", json=TRANSFER)

    response = await client.get("/api/stock/products/1")
    assert response.status_code == 200
    body = response.json()
    assert body["totalQuantity"] == 40
    assert [(b["warehouseId"], b["quantity"]) for b in body["breakdown"]] == [(1, 30), (2, 10)]

    response = await client.get("/api/stock/availability", params={"productId": 1, "warehouseId": 2})
    assert response.json()["quantity"] == 10


@pytest.mark.asyncio
async def test_same_warehouse_is_400(client):
    response = await client.post("/api/transfers", json={**TRANSFER, "toWarehouseId": 1})

    assert response.status_code == 400
    assert response.json()["code"] == "SAME_WAREHOUSE"
    assert response.json()["error"] == "Source and destination warehouses must be different"


@pytest.mark.asyncio
async def test_insufficient_stock_is_400_with_detail(client):
    response = await client.post("/api/transfers", json={**TRANSFER, "quantity": 500})

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Insufficient stock in Warehouse A. Available: 40, Requested: 500"
    assert body["available"] == 40
    assert body["requested"] == 500


@pytest.mark.asyncio
@pytest.mark.parametrize("payload,status_code,code", [
    ({"productId": 1, "fromWarehouseId": 1, "toWarehouseId": 2}, 400, "MISSING_FIELDS"),
    ({**TRANSFER, "quantity": 0}, 400, "INVALID_QUANTITY"),
    ({**TRANSFER, "productId": 999}, 404, "PRODUCT_NOT_FOUND"),
    ({**TRANSFER, "toWarehouseId": 999}, 404, "WAREHOUSE_NOT_FOUND"),
])
async def test_transfer_errors(client, payload, status_code, code):
    response = await client.post("/api/transfers", json=payload)

    assert response.status_code == status_code
    assert response.json()["code"] == code
    assert response.json()["error"]


@pytest.mark.asyncio
async def test_malformed_body_is_400(client):
    response = await client.post(
        "/api/transfers",
        content="not json",
        headers={"content-type": "application/json"}
    )

    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_alerts_acknowledge_flow(client):
    response = await client.get("/api/alerts")
    assert response.status_code == 200
    alerts = response.json()
    assert [a["productId"] for a in alerts] == [1, 3, 2]
    assert alerts[0]["reorderQuantity"] == 160
    assert alerts[0]["estimatedCost"] == 320

    response = await client.post("/api/alerts", json={"productId": 1, "acknowledgedBy": "Manager"})
    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Alert acknowledged successfully"
    assert body["alert"]["acknowledged"] is True
    assert body["alert"]["acknowledgedBy"] == "Manager"

    widget = (await client.get("/api/alerts")).json()[0]
    assert widget["acknowledged"] is True
    assert widget["acknowledgedBy"] == "Manager"

    response = await client.get("/api/alerts", params={"acknowledged": "false"})
    assert [a["productId"] for a in response.json()] == [3, 2]

    for _ in range(2):
        response = await client.delete("/api/alerts", params={"productId": 1})
        assert response.status_code == 200
        assert response.json() == {"message": "Alert unacknowledged successfully"}

    widget = (await client.get("/api/alerts")).json()[0]
    assert widget["acknowledged"] is False


@pytest.mark.asyncio
async def test_alerts_require_product_id(client):
    response = await client.post("/api/alerts", json={"acknowledgedBy": "Manager"})
    assert response.status_code == 400
    assert response.json()["error"] == "Product ID is required"

    response = await client.delete("/api/alerts")
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_alert_summary(client):
    response = await client.get("/api/alerts/summary")

    assert response.status_code == 200
    summary = response.json()
    assert summary["critical"] == 1
    assert summary["medium"] == 1
    assert summary["totalReorderCost"] == 320


@pytest.mark.asyncio
async def test_read_failure_is_500(settings):
    app = create_app(settings=settings, store=FailingReadStore())
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        for path in ("/api/transfers", "/api/alerts"):
            response = await client.get(path)
            assert response.status_code == 500
            assert "error" in response.json()

        response = await client.post("/api/transfers", json=TRANSFER)
        assert response.status_code == 500


@pytest.mark.asyncio
async def test_system_endpoints(client):
    assert (await client.get("/healthz")).json() == {"status": "healthy"}

    response = await client.get("/api/system/health")
    assert response.json()["store"] == "MemoryEntityStore"

    await client.post("/api/transfers", json=TRANSFER)
    response = await client.get("/api/system/metrics")
    assert response.status_code == 200
    assert "sf_transfers_total" in response.text

    response = await client.get("/api/stock/warehouses")
    assert len(response.json()) == 3


@pytest.mark.asyncio
async def test_trace_id_header(client):
    response = await client.get("/api/transfers", headers={"X-Trace-Id": "abc-123"})

    assert response.headers["X-Trace-Id"] == "abc-123"


@pytest.mark.asyncio
async def test_unknown_route_uses_error_body(client):
    response = await client.get("/api/nothing-here")

    assert response.status_code == 404
    assert response.json()["code"] == "HTTP_404"


def test_store_defaults_to_settings_backend(settings):
    app = create_app(settings=settings)

    assert isinstance(app.state.store, MemoryEntityStore)
    assert app.state.transfer_service.store is app.state.store
    assert EntityType.TRANSFER.value == "transfers"
