"""
库存告警与补货服务

按商品汇总所有仓库的库存，与补货点比较得出状态和严重级别，
计算建议补货量和预估成本，并合并人工确认状态。
"""
import asyncio
import math
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

from sf_core.models.records import (
    Product, Warehouse, StockEntry, AlertAcknowledgment, utcnow
)
from sf_core.store import EntityStore, EntityType
from sf_core.utils.errors import ValidationError
from sf_core.utils.metrics import ALERT_ACKNOWLEDGMENTS
from .base import BaseService, coerce_id, is_missing
from .ledger import StockLedger

DEFAULT_ACKNOWLEDGED_BY = "System"


class StockStatus(str, Enum):
    """库存状态"""
    CRITICAL = "critical"
    LOW = "low"
    OVERSTOCKED = "overstocked"
    ADEQUATE = "adequate"


class Severity(str, Enum):
    """严重级别"""
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return SEVERITY_RANK[self]


SEVERITY_RANK = {
    Severity.CRITICAL: 0,
    Severity.HIGH: 1,
    Severity.MEDIUM: 2,
    Severity.LOW: 3,
}


@dataclass(frozen=True)
class StockClassification:
    """库存分级结果"""
    status: StockStatus
    severity: Severity
    recommended_action: str
    reorder_quantity: int


def classify_stock(total: int, reorder_point: int) -> StockClassification:
    """按补货点对总库存分级

    critical: total < 0.5 × rp，补到 2 × rp
    low:      0.5 × rp <= total < rp，补到 1.5 × rp
    overstocked: total > 3 × rp
    其余为 adequate。rp 为 0 时任何正库存都是 overstocked。
    """
    if 2 * total < reorder_point:
        return StockClassification(
            status=StockStatus.CRITICAL,
            severity=Severity.CRITICAL,
            recommended_action="Immediate reorder required",
            reorder_quantity=math.ceil(2 * reorder_point - total),
        )

    if total < reorder_point:
        return StockClassification(
            status=StockStatus.LOW,
            severity=Severity.HIGH,
            recommended_action="Reorder recommended",
            reorder_quantity=math.ceil(1.5 * reorder_point - total),
        )

    if total > 3 * reorder_point:
        return StockClassification(
            status=StockStatus.OVERSTOCKED,
            severity=Severity.MEDIUM,
            recommended_action="Consider redistribution or promotion",
            reorder_quantity=0,
        )

    return StockClassification(
        status=StockStatus.ADEQUATE,
        severity=Severity.LOW,
        recommended_action="No action needed",
        reorder_quantity=0,
    )


class AlertService(BaseService):
    """告警服务"""

    def __init__(self, store: EntityStore, default_acknowledged_by: str = DEFAULT_ACKNOWLEDGED_BY):
        super().__init__(store)
        self.default_acknowledged_by = default_acknowledged_by
        self._lock = asyncio.Lock()

    async def compute_alerts(
        self,
        severity: Optional[str] = None,
        acknowledged: Optional[bool] = None
    ) -> List[Dict[str, Any]]:
        """计算所有商品的告警，按严重级别排序（同级保持商品顺序）"""
        severity_filter = self._parse_severity(severity)

        products = await self.load(EntityType.PRODUCT, Product)
        stock = await self.load(EntityType.STOCK_ENTRY, StockEntry)
        warehouses = await self.load(EntityType.WAREHOUSE, Warehouse)
        acknowledgments = await self.load(EntityType.ALERT_ACKNOWLEDGMENT, AlertAcknowledgment)

        ledger = StockLedger(stock, warehouses)
        ack_by_product: Dict[int, AlertAcknowledgment] = {}
        for ack in acknowledgments:
            ack_by_product.setdefault(ack.product_id, ack)

        alerts = [
            self._build_alert(product, ledger, ack_by_product.get(product.id))
            for product in products
        ]
        alerts.sort(key=lambda a: a["severityRank"])

        if severity_filter is not None:
            alerts = [a for a in alerts if a["severity"] == severity_filter.value]
        if acknowledged is not None:
            alerts = [a for a in alerts if a["acknowledged"] == acknowledged]

        return alerts

    def _build_alert(
        self,
        product: Product,
        ledger: StockLedger,
        ack: Optional[AlertAcknowledgment]
    ) -> Dict[str, Any]:
        total = ledger.total_quantity(product.id)
        result = classify_stock(total, product.reorder_point)
        is_acknowledged = bool(ack and ack.acknowledged)

        return {
            "productId": product.id,
            "productName": product.name,
            "productSku": product.sku,
            "category": product.category,
            "unitCost": product.unit_cost,
            "currentStock": total,
            "reorderPoint": product.reorder_point,
            "status": result.status.value,
            "severity": result.severity.value,
            "severityRank": result.severity.rank,
            "recommendedAction": result.recommended_action,
            "reorderQuantity": result.reorder_quantity,
            "estimatedCost": result.reorder_quantity * product.unit_cost,
            "warehouseBreakdown": ledger.breakdown(product.id),
            "acknowledged": is_acknowledged,
            "acknowledgedAt": ack.acknowledged_at if is_acknowledged else None,
            "acknowledgedBy": ack.acknowledged_by if is_acknowledged else None,
        }

    async def summarize(self) -> Dict[str, Any]:
        """告警统计：各级别未确认数量和未确认补货总成本"""
        alerts = await self.compute_alerts()
        pending = [a for a in alerts if not a["acknowledged"]]

        summary: Dict[str, Any] = {"total": len(alerts)}
        for severity in Severity:
            summary[severity.value] = sum(1 for a in pending if a["severity"] == severity.value)
        summary["acknowledged"] = len(alerts) - len(pending)
        summary["totalReorderCost"] = sum(
            (a["estimatedCost"] for a in pending if a["reorderQuantity"] > 0),
            Decimal("0")
        )
        return summary

    async def acknowledge(self, product_id: Any, acknowledged_by: Optional[str] = None) -> Dict[str, Any]:
        """确认告警（覆盖已有确认记录）"""
        product_id = self._require_product_id(product_id)
        author = self.default_acknowledged_by if is_missing(acknowledged_by) else str(acknowledged_by).strip()

        async with self._lock:
            acknowledgments = await self.load(EntityType.ALERT_ACKNOWLEDGMENT, AlertAcknowledgment)

            record = AlertAcknowledgment(
                product_id=product_id,
                acknowledged=True,
                acknowledged_at=utcnow(),
                acknowledged_by=author,
            )

            updated = [a for a in acknowledgments if a.product_id != product_id]
            replaced = len(updated) != len(acknowledgments)
            # 覆盖时保持原位置
            position = next(
                (i for i, a in enumerate(acknowledgments) if a.product_id == product_id),
                len(updated)
            )
            updated.insert(position, record)

            await self.store.write_all(
                EntityType.ALERT_ACKNOWLEDGMENT,
                [a.to_record() for a in updated]
            )

        ALERT_ACKNOWLEDGMENTS.labels(action="acknowledge").inc()
        self.logger.info(
            "Alert acknowledged",
            product_id=product_id,
            acknowledged_by=author,
            replaced=replaced
        )
        return record.to_record()

    async def unacknowledge(self, product_id: Any) -> bool:
        """取消确认（幂等），返回是否删除了记录"""
        product_id = self._require_product_id(product_id)

        async with self._lock:
            acknowledgments = await self.load(EntityType.ALERT_ACKNOWLEDGMENT, AlertAcknowledgment)
            remaining = [a for a in acknowledgments if a.product_id != product_id]
            removed = len(remaining) != len(acknowledgments)

            await self.store.write_all(
                EntityType.ALERT_ACKNOWLEDGMENT,
                [a.to_record() for a in remaining]
            )

        ALERT_ACKNOWLEDGMENTS.labels(action="unacknowledge").inc()
        self.logger.info("Alert unacknowledged", product_id=product_id, removed=removed)
        return removed

    @staticmethod
    def _require_product_id(product_id: Any) -> int:
        if is_missing(product_id):
            raise ValidationError(code="MISSING_PRODUCT_ID", detail="Product ID is required")
        return coerce_id(product_id, "productId")

    @staticmethod
    def _parse_severity(severity: Optional[str]) -> Optional[Severity]:
        if is_missing(severity) or severity == "all":
            return None
        try:
            return Severity(str(severity).lower())
        except ValueError:
            raise ValidationError(
                code="INVALID_SEVERITY",
                detail=f"Severity must be one of: {', '.join(s.value for s in Severity)}"
            )
