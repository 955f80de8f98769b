"""
Stock levels for the admin inventory screen.

Each product row carries ``stock`` and an optional ``alert_level``; a
product is out of stock at zero, low at or below its alert level and in
stock above it. Adjustments never take stock below zero.

Usage:
    service = InventoryService(db)
    report = service.list_inventory(low_stock_only=True)
    product = service.adjust_stock("prod-1", -3, reason="Damaged in transit")
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from catalog.repository import PRODUCTS_TABLE
from core.logging import LoggerMixin

DEFAULT_ALERT_LEVEL = 5

INVENTORY_COLUMNS = "id, sku, name, stock, alert_level, status, price"


class InventoryStatus(str, Enum):
    IN_STOCK = "in_stock"
    LOW_STOCK = "low_stock"
    OUT_OF_STOCK = "out_of_stock"


class InventoryError(Exception):
    """Rejected stock change."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _alert_level(row: Dict[str, Any]) -> int:
    level = row.get("alert_level")
    return DEFAULT_ALERT_LEVEL if level is None else int(level)


def inventory_status(stock: int, alert_level: int = DEFAULT_ALERT_LEVEL) -> InventoryStatus:
    if stock <= 0:
        return InventoryStatus.OUT_OF_STOCK
    if stock <= alert_level:
        return InventoryStatus.LOW_STOCK
    return InventoryStatus.IN_STOCK


def clamp_stock(stock: int) -> int:
    return max(0, int(stock))


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _stock_columns(stock: int) -> Dict[str, Any]:
    return {"stock": stock, "in_stock": stock > 0, "updated_at": _now_iso()}


@dataclass
class BulkStockResult:
    success: List[str] = field(default_factory=list)
    failed: List[Dict[str, str]] = field(default_factory=list)

    def to_api(self) -> Dict[str, Any]:
        return {"success": self.success, "failed": self.failed}


def summarize(rows: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Counts per inventory status plus the stock value at list price."""
    counts = {status.value: 0 for status in InventoryStatus}
    total_value = 0.0
    for row in rows:
        counts[row["inventory_status"]] += 1
        total_value += int(row.get("stock") or 0) * float(row.get("price") or 0)
    return {"total": len(rows), **counts, "total_value": round(total_value, 2)}


class InventoryService(LoggerMixin):
    """Stock reads and writes over the products table."""

    def __init__(self, db) -> None:
        self._db = db

    def list_inventory(self, low_stock_only: bool = False) -> Dict[str, Any]:
        """
        Every product's stock, lowest first, with its inventory status.

        ``low_stock_only`` keeps products at or below their alert level,
        which includes the out-of-stock ones.
        """
        rows = (
            self._db.table(PRODUCTS_TABLE)
            .select(INVENTORY_COLUMNS)
            .order("stock")
            .execute()
            .data
            or []
        )
        items = []
        for row in rows:
            stock = int(row.get("stock") or 0)
            level = _alert_level(row)
            if low_stock_only and stock > level:
                continue
            items.append({**row, "stock": stock, "inventory_status": inventory_status(stock, level).value})
        return {"inventory": items, "summary": summarize(items)}

    def adjust_stock(self, product_id: str, adjustment: int, reason: Optional[str] = None) -> Dict[str, Any]:
        """Add ``adjustment`` (may be negative) to a product's stock, floored at zero."""
        rows = (
            self._db.table(PRODUCTS_TABLE)
            .select("id, sku, stock")
            .eq("id", product_id)
            .limit(1)
            .execute()
            .data
            or []
        )
        if not rows:
            raise InventoryError("Product not found", status_code=404)

        previous = int(rows[0].get("stock") or 0)
        stock = clamp_stock(previous + adjustment)
        result = self._db.table(PRODUCTS_TABLE).update(_stock_columns(stock)).eq("id", product_id).execute()
        updated = (result.data or [None])[0] or {**rows[0], "stock": stock}

        self.logger.info(
            "Stock adjusted",
            product_id=product_id,
            previous=previous,
            adjustment=adjustment,
            stock=stock,
            reason=reason,
        )
        return updated

    def bulk_update(self, updates: List[Dict[str, Any]]) -> BulkStockResult:
        """Set absolute stock by SKU. One failed SKU does not stop the rest."""
        result = BulkStockResult()
        for update in updates:
            sku = str(update.get("sku") or "").strip()
            if not sku:
                result.failed.append({"sku": sku, "error": "SKU is required"})
                continue
            try:
                stock = clamp_stock(update.get("stock"))
            except (TypeError, ValueError):
                result.failed.append({"sku": sku, "error": "Stock must be a number"})
                continue

            try:
                written = self._db.table(PRODUCTS_TABLE).update(_stock_columns(stock)).eq("sku", sku).execute()
            except Exception as e:
                self.logger.warning("Stock update failed", sku=sku, error=str(e))
                result.failed.append({"sku": sku, "error": str(e)})
                continue
            if not written.data:
                result.failed.append({"sku": sku, "error": "Product not found"})
                continue
            result.success.append(sku)

        self.logger.info("Bulk stock update", updated=len(result.success), failed=len(result.failed))
        return result
