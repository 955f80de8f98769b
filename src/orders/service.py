"""
Order persistence over Supabase.

The service owns the orders, order_items and returns tables. Status
changes always go through ``orders.lifecycle.apply_transition``; this
module only persists the columns the state machine returns.

Usage::

    service = OrderService(db)
    order = service.create(request, totals)
    service.transition(order, OrderEvent.CANCEL, notes="Cancelled by customer")
"""

import random
import string
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from commerce.pricing import OrderTotals, build_order_items, generate_order_number
from core.logging import LoggerMixin
from core.utils import drop_none, ilike_any
from orders.lifecycle import (
    OrderEvent,
    OrderStatus,
    PaymentEvent,
    PaymentStatus,
    TransitionResult,
    apply_payment_event,
    apply_transition,
)
from orders.models import CreateOrderRequest, ReturnOrderRequest

ORDERS_TABLE = "orders"
ORDER_ITEMS_TABLE = "order_items"
RETURNS_TABLE = "returns"

# Columns matched by the admin order search box
SEARCH_COLUMNS = ("order_number", "customer_email", "customer_name")

# Statuses that do not count toward revenue
_NON_REVENUE = frozenset({OrderStatus.CANCELLED.value, OrderStatus.REFUNDED.value})


class OrderCreationError(RuntimeError):
    """Raised when the order or its items could not be stored."""


def generate_return_id(now_ms: Optional[int] = None, rng: Optional[random.Random] = None) -> str:
    """Return request id: RET-<epoch ms>-<9 uppercase alphanumerics>."""
    now_ms = now_ms if now_ms is not None else int(time.time() * 1000)
    rng = rng or random.SystemRandom()
    suffix = "".join(rng.choice(string.ascii_uppercase + string.digits) for _ in range(9))
    return f"RET-{now_ms}-{suffix}"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class OrderService(LoggerMixin):
    """CRUD and status transitions for orders."""

    def __init__(self, db) -> None:
        self._db = db

    # ---------------------------------------------------------------------
    # Create
    # ---------------------------------------------------------------------

    def create(
        self,
        request: CreateOrderRequest,
        totals: OrderTotals,
        coupon_code: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Insert the order row, then its item rows.

        If the item insert fails the order row is deleted again and
        OrderCreationError is raised.
        """
        row = {
            "order_number": generate_order_number(),
            "customer_email": request.customer_email,
            "customer_name": request.customer_name,
            "customer_phone": request.customer_phone,
            "shipping_address": request.shipping_address.model_dump(),
            "subtotal": totals.subtotal,
            "shipping_cost": totals.shipping_cost,
            "tax": totals.tax,
            "discount": totals.discount,
            "total": totals.total,
            "status": OrderStatus.PENDING.value,
            "payment_status": PaymentStatus.PENDING.value,
            "payment_method": request.payment_method,
            "shipping_method": request.shipping_method.value,
            "coupon_code": coupon_code,
            "notes": request.notes,
        }

        result = self._db.table(ORDERS_TABLE).insert(row).execute()
        if not result.data:
            raise OrderCreationError("Failed to create order")
        order = result.data[0]

        items = build_order_items(order["id"], request.items)
        try:
            items_result = self._db.table(ORDER_ITEMS_TABLE).insert(items).execute()
            if not items_result.data:
                raise OrderCreationError("Failed to create order items")
        except Exception as e:
            self.logger.error(
                "Order items insert failed, removing order",
                order_id=order["id"],
                error=str(e),
            )
            self._db.table(ORDERS_TABLE).delete().eq("id", order["id"]).execute()
            if isinstance(e, OrderCreationError):
                raise
            raise OrderCreationError("Failed to create order items") from e

        order["items"] = items_result.data
        self.logger.info(
            "Order created",
            order_id=order["id"],
            order_number=order.get("order_number"),
            total=totals.total,
        )
        return order

    def increment_coupon_usage(self, code: str) -> None:
        """Bump uses_count for a redeemed coupon. Failures are logged only."""
        try:
            rows = self._db.table("coupons").select("id, uses_count").eq("code", code).limit(1).execute().data
            if rows:
                uses = int(rows[0].get("uses_count") or 0) + 1
                self._db.table("coupons").update({"uses_count": uses}).eq("id", rows[0]["id"]).execute()
        except Exception as e:
            self.logger.warning("Coupon usage update failed", code=code, error=str(e))

    # ---------------------------------------------------------------------
    # Read
    # ---------------------------------------------------------------------

    def _with_items(self, order: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        if order is None:
            return None
        items = self._db.table(ORDER_ITEMS_TABLE).select("*").eq("order_id", order["id"]).execute()
        order["items"] = items.data or []
        return order

    def _first(self, column: str, value: str) -> Optional[Dict[str, Any]]:
        result = self._db.table(ORDERS_TABLE).select("*").eq(column, value).limit(1).execute()
        rows = result.data or []
        return rows[0] if rows else None

    def get_by_id(self, order_id: str) -> Optional[Dict[str, Any]]:
        return self._with_items(self._first("id", order_id))

    def get_by_number(self, order_number: str) -> Optional[Dict[str, Any]]:
        return self._with_items(self._first("order_number", order_number))

    def list_orders(
        self,
        status: Optional[str] = None,
        search: Optional[str] = None,
        customer_email: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Dict[str, Any]]:
        """Orders newest first, optionally filtered by status, customer or a search term."""
        query = self._db.table(ORDERS_TABLE).select("*").order("created_at", desc=True)
        if status:
            query = query.eq("status", status)
        if customer_email:
            query = query.eq("customer_email", customer_email)
        if search and search.strip():
            query = query.or_(ilike_any(SEARCH_COLUMNS, search))
        return query.range(offset, offset + limit - 1).execute().data or []

    def stats(self) -> Dict[str, Any]:
        """Order counts per status plus revenue (cancelled and refunded excluded)."""
        rows = self._db.table(ORDERS_TABLE).select("status, total").execute().data or []
        by_status = {status.value: 0 for status in OrderStatus}
        revenue = 0.0
        for row in rows:
            status = row.get("status") or OrderStatus.PENDING.value
            by_status[status] = by_status.get(status, 0) + 1
            if status not in _NON_REVENUE:
                revenue += float(row.get("total") or 0)

        counted = len(rows) - sum(by_status[s] for s in _NON_REVENUE)
        return {
            "total_orders": len(rows),
            "by_status": by_status,
            "revenue": round(revenue, 2),
            "average_order_value": round(revenue / counted, 2) if counted else 0.0,
        }

    # ---------------------------------------------------------------------
    # Update
    # ---------------------------------------------------------------------

    def update(self, order_id: str, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Write non-status columns (notes, tracking, payment status)."""
        changes = drop_none(changes)
        if "status" in changes:
            raise ValueError("Use transition() to change order status")
        changes["updated_at"] = _now_iso()
        result = self._db.table(ORDERS_TABLE).update(changes).eq("id", order_id).execute()
        rows = result.data or []
        return rows[0] if rows else None

    def transition(
        self,
        order: Dict[str, Any],
        event: OrderEvent,
        notes: Optional[str] = None,
        tracking_number: Optional[str] = None,
        return_window_days: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Apply ``event`` to ``order`` and persist the result.

        Raises OrderTransitionError (nothing is written) when the event is
        not allowed from the order's current status.
        """
        kwargs = {"tracking_number": tracking_number}
        if return_window_days is not None:
            kwargs["return_window_days"] = return_window_days
        result: TransitionResult = apply_transition(order, event, **kwargs)

        changes = dict(result.changes)
        if notes:
            changes["notes"] = notes

        updated = self._db.table(ORDERS_TABLE).update(changes).eq("id", order["id"]).execute()
        rows = updated.data or []
        self.logger.info(
            "Order status changed",
            order_id=order["id"],
            event=OrderEvent(event).value,
            previous=result.previous.value,
            status=result.status.value,
        )
        merged = {**order, **changes}
        return {**merged, **rows[0]} if rows else merged

    def request_return(
        self,
        order: Dict[str, Any],
        request: ReturnOrderRequest,
        return_window_days: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Record a return request and move the order to return_requested.

        The state machine check (delivered, inside the window) runs before
        anything is written. If the order update fails, the return row is
        deleted again and the error re-raised.
        """
        kwargs = {}
        if return_window_days is not None:
            kwargs["return_window_days"] = return_window_days
        apply_transition(order, OrderEvent.REQUEST_RETURN, **kwargs)

        return_id = generate_return_id()
        record = {
            "id": return_id,
            "order_id": order["id"],
            "order_number": order.get("order_number"),
            "reason": request.reason,
            "description": request.description or "",
            "items": [item.model_dump() for item in request.items],
            "images": request.images,
            "status": "pending",
        }
        self._db.table(RETURNS_TABLE).insert(record).execute()

        notes = f"Return requested: {request.reason}. Description: {request.description or 'N/A'}"
        try:
            updated = self.transition(order, OrderEvent.REQUEST_RETURN, notes=notes, **kwargs)
        except Exception as e:
            self.logger.error(
                "Order update failed, removing return request",
                order_id=order["id"],
                return_id=return_id,
                error=str(e),
            )
            self._db.table(RETURNS_TABLE).delete().eq("id", return_id).execute()
            raise
        return {"return": record, "order": updated}

    # ---------------------------------------------------------------------
    # Payments
    # ---------------------------------------------------------------------

    def find_for_payment(
        self,
        order_id: Optional[str],
        payment_intent_id: Optional[str],
    ) -> Optional[Dict[str, Any]]:
        """The order a PaymentIntent belongs to: by metadata order id, else by intent id."""
        if order_id:
            order = self._first("id", order_id)
            if order is not None:
                return order
        if payment_intent_id:
            return self._first("payment_intent_id", payment_intent_id)
        return None

    def record_payment(
        self,
        order: Dict[str, Any],
        event: PaymentEvent,
        payment_intent_id: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        """
        Persist a payment outcome. Returns None when the event was already
        applied; raises OrderTransitionError when it cannot apply.
        """
        changes = apply_payment_event(order, event)
        if changes is None:
            self.logger.info("Payment event already applied", order_id=order["id"], event=PaymentEvent(event).value)
            return None
        if payment_intent_id:
            changes["payment_intent_id"] = payment_intent_id

        updated = self._db.table(ORDERS_TABLE).update(changes).eq("id", order["id"]).execute()
        rows = updated.data or []
        self.logger.info(
            "Payment status changed",
            order_id=order["id"],
            event=PaymentEvent(event).value,
            payment_status=changes["payment_status"],
        )
        merged = {**order, **changes}
        return {**merged, **rows[0]} if rows else merged

    def get_returns(self, order_id: str) -> List[Dict[str, Any]]:
        result = self._db.table(RETURNS_TABLE).select("*").eq("order_id", order_id).execute()
        return result.data or []
