"""Admin order management: listing, stats, shipping and soft delete."""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query

from api.errors import domain_error, not_found
from config.database import get_db
from core.auth import SupabaseUser, require_admin
from core.logging import get_logger
from orders.lifecycle import OrderEvent, OrderTransitionError, allowed_events
from orders.models import ShipOrderRequest
from orders.notifications import EmailNotifier, get_email_notifier
from orders.service import OrderService

logger = get_logger(__name__)

router = APIRouter(prefix="/api/admin/orders", tags=["Admin"])


@router.get("")
def admin_list_orders(
    status_filter: Optional[str] = Query(None, alias="status"),
    search: Optional[str] = None,
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    admin: SupabaseUser = Depends(require_admin),
    db=Depends(get_db),
) -> Dict[str, Any]:
    orders = OrderService(db).list_orders(status=status_filter, search=search, limit=limit, offset=offset)
    return {"orders": orders, "count": len(orders)}


@router.get("/stats")
def admin_order_stats(
    admin: SupabaseUser = Depends(require_admin),
    db=Depends(get_db),
) -> Dict[str, Any]:
    return OrderService(db).stats()


@router.get("/{order_id}")
def admin_get_order(
    order_id: str,
    admin: SupabaseUser = Depends(require_admin),
    db=Depends(get_db),
) -> Dict[str, Any]:
    service = OrderService(db)
    order = service.get_by_id(order_id)
    if order is None:
        raise not_found("Order")
    return {
        "order": order,
        "returns": service.get_returns(order_id),
        "allowedEvents": [e.value for e in allowed_events(order)],
    }


@router.post("/{order_id}/ship")
def admin_ship_order(
    order_id: str,
    request: ShipOrderRequest,
    admin: SupabaseUser = Depends(require_admin),
    db=Depends(get_db),
    notifier: EmailNotifier = Depends(get_email_notifier),
) -> Dict[str, Any]:
    service = OrderService(db)
    order = service.get_by_id(order_id)
    if order is None:
        raise not_found("Order")

    try:
        updated = service.transition(
            order,
            OrderEvent.SHIP,
            notes=f"Shipped with {request.carrier}",
            tracking_number=request.tracking_number,
        )
    except OrderTransitionError as e:
        raise domain_error(e)

    emailed = notifier.send_shipping_notification(updated, request.tracking_number, request.carrier)
    return {"success": True, "order": updated, "emailSent": emailed}


@router.delete("/{order_id}")
def admin_delete_order(
    order_id: str,
    admin: SupabaseUser = Depends(require_admin),
    db=Depends(get_db),
) -> Dict[str, Any]:
    """Orders are never removed; delete cancels through the state machine."""
    service = OrderService(db)
    order = service.get_by_id(order_id)
    if order is None:
        raise not_found("Order")

    try:
        updated = service.transition(order, OrderEvent.CANCEL, notes=f"Deleted by admin {admin.email or admin.id}")
    except OrderTransitionError as e:
        raise domain_error(e)
    logger.info("Order soft deleted", order_id=order_id, admin_id=admin.id)
    return {"success": True, "order": updated}
