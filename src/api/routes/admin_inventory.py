"""
Admin stock management.

Usage:
    GET /api/admin/inventory?lowStock=true
    POST /api/admin/inventory   {"productId": "...", "adjustment": -2, "reason": "Damaged"}
    PUT /api/admin/inventory    {"updates": [{"sku": "NOW-001", "stock": 40}]}
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from api.errors import domain_error
from catalog.inventory import InventoryError, InventoryService
from config.database import get_db
from core.auth import SupabaseUser, require_admin

router = APIRouter(prefix="/api/admin/inventory", tags=["Admin"])


class StockAdjustment(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    product_id: str = Field(..., min_length=1)
    adjustment: int
    reason: Optional[str] = None


class BulkStockUpdate(BaseModel):
    updates: List[Dict[str, Any]]


@router.get("")
def admin_list_inventory(
    low_stock: bool = Query(False, alias="lowStock"),
    admin: SupabaseUser = Depends(require_admin),
    db=Depends(get_db),
) -> Dict[str, Any]:
    return InventoryService(db).list_inventory(low_stock_only=low_stock)


@router.post("")
def admin_adjust_stock(
    body: StockAdjustment,
    admin: SupabaseUser = Depends(require_admin),
    db=Depends(get_db),
) -> Dict[str, Any]:
    try:
        product = InventoryService(db).adjust_stock(body.product_id, body.adjustment, reason=body.reason)
    except InventoryError as e:
        raise domain_error(e)
    return {"success": True, "product": product, "message": f"Stock updated to {product['stock']}"}


@router.put("")
def admin_bulk_update_stock(
    body: BulkStockUpdate,
    admin: SupabaseUser = Depends(require_admin),
    db=Depends(get_db),
) -> Dict[str, Any]:
    return InventoryService(db).bulk_update(body.updates).to_api()
