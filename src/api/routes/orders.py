"""
Order endpoints: checkout, lookup, customer cancel/return and the admin
status patch.

Status changes are validated by ``orders.lifecycle`` before anything is
written; emails go out only after the change is persisted.

Usage:
    POST /api/orders                      create from a cart
    GET  /api/orders/by-number/NOW-...    lookup by order number
    POST /api/orders/{id}/payment-intent  Stripe PaymentIntent for the order total
    POST /api/orders/{id}/cancel          pending/processing only
    POST /api/orders/{id}/return          delivered, inside the return window
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, status

from api.errors import domain_error, http_error, not_found
from commerce.coupons import CouponValidationError, normalize_code, validate_coupon
from commerce.pricing import calculate_order_totals, cart_subtotal
from commerce.shipping import can_ship_to_country
from config.database import get_db
from config.settings import get_settings
from core.auth import SupabaseUser, get_current_user, is_admin, require_admin
from core.logging import bind_context, get_logger
from orders.lifecycle import OrderEvent, OrderStatus, OrderTransitionError, PaymentStatus, event_for_status
from orders.models import (
    CancelOrderRequest,
    CreateOrderRequest,
    OrderUpdateRequest,
    ReturnOrderRequest,
)
from orders.notifications import EmailNotifier, get_email_notifier
from orders.payments import PaymentError, StripeGateway, get_payment_gateway
from orders.service import OrderCreationError, OrderService

logger = get_logger(__name__)

router = APIRouter(prefix="/api/orders", tags=["Orders"])


def _load_order(service: OrderService, order_id: str) -> Dict[str, Any]:
    order = service.get_by_id(order_id)
    if order is None:
        raise not_found("Order")
    return order


def _check_access(order: Dict[str, Any], user: Optional[SupabaseUser]) -> None:
    """Signed-in customers only see their own orders; guests need the order id."""
    if user is None or is_admin(user):
        return
    owner = (order.get("customer_email") or "").lower()
    if owner and owner != (user.email or "").lower():
        raise http_error(403, "Forbidden", "Bu siparişe erişim yetkiniz yok.")


@router.post("", status_code=status.HTTP_201_CREATED)
def create_order(
    request: CreateOrderRequest,
    db=Depends(get_db),
    notifier: EmailNotifier = Depends(get_email_notifier),
) -> Dict[str, Any]:
    country = request.shipping_address.country
    if not can_ship_to_country(country):
        raise http_error(400, f"Shipping to {country} is not available")

    coupon = None
    if request.coupon_code:
        try:
            coupon = validate_coupon(db, request.coupon_code, cart_subtotal(request.items))
        except CouponValidationError as e:
            raise domain_error(e)

    totals = calculate_order_totals(
        request.items,
        country,
        request.shipping_method,
        discount=coupon.discount if coupon else 0.0,
        free_shipping=coupon.free_shipping if coupon else False,
    )

    service = OrderService(db)
    try:
        order = service.create(request, totals, coupon_code=coupon.code if coupon else None)
    except OrderCreationError as e:
        raise http_error(500, str(e), "Sipariş oluşturulamadı.")

    bind_context(order_id=order["id"])
    if coupon:
        service.increment_coupon_usage(normalize_code(coupon.code))
    notifier.send_order_confirmation(order, order.get("items", []))

    return {"success": True, "order": order, "totals": totals.to_api()}


@router.get("/by-number/{order_number}")
def get_order_by_number(
    order_number: str,
    db=Depends(get_db),
    user: Optional[SupabaseUser] = Depends(get_current_user),
) -> Dict[str, Any]:
    order = OrderService(db).get_by_number(order_number)
    if order is None:
        raise not_found("Order")
    _check_access(order, user)
    return {"order": order}


@router.get("/{order_id}")
def get_order(
    order_id: str,
    db=Depends(get_db),
    user: Optional[SupabaseUser] = Depends(get_current_user),
) -> Dict[str, Any]:
    order = _load_order(OrderService(db), order_id)
    _check_access(order, user)
    return {"order": order}


@router.post("/{order_id}/payment-intent")
def create_payment_intent(
    order_id: str,
    db=Depends(get_db),
    user: Optional[SupabaseUser] = Depends(get_current_user),
    gateway: StripeGateway = Depends(get_payment_gateway),
) -> Dict[str, Any]:
    """Start (or retry) card payment for an unpaid order."""
    service = OrderService(db)
    order = _load_order(service, order_id)
    _check_access(order, user)

    if order.get("status") == OrderStatus.CANCELLED.value:
        raise http_error(400, "Order is cancelled", "İptal edilen sipariş için ödeme alınamaz.")
    payment_status = order.get("payment_status") or PaymentStatus.PENDING.value
    if payment_status not in (PaymentStatus.PENDING.value, PaymentStatus.FAILED.value):
        raise http_error(400, "Order is already paid", "Bu siparişin ödemesi zaten alınmış.")

    try:
        intent = gateway.create_payment_intent(order)
    except PaymentError as e:
        raise domain_error(e)

    service.update(order_id, {"payment_intent_id": intent.id})
    return intent.to_api(order.get("order_number"))


@router.post("/{order_id}/cancel")
def cancel_order(
    order_id: str,
    request: Optional[CancelOrderRequest] = None,
    db=Depends(get_db),
    user: Optional[SupabaseUser] = Depends(get_current_user),
    notifier: EmailNotifier = Depends(get_email_notifier),
) -> Dict[str, Any]:
    service = OrderService(db)
    order = _load_order(service, order_id)
    _check_access(order, user)

    reason = request.reason if request and request.reason else None
    try:
        updated = service.transition(
            order,
            OrderEvent.CANCEL,
            notes=f"Cancelled by customer: {reason}" if reason else "Cancelled by customer",
        )
    except OrderTransitionError as e:
        logger.info("Cancel rejected", order_id=order_id, status=order.get("status"))
        raise domain_error(e)

    notifier.send_order_cancellation(updated)
    return {
        "success": True,
        "message": "Siparişiniz başarıyla iptal edildi.",
        "order": updated,
    }


@router.post("/{order_id}/return")
def request_return(
    order_id: str,
    request: ReturnOrderRequest,
    db=Depends(get_db),
    user: Optional[SupabaseUser] = Depends(get_current_user),
    notifier: EmailNotifier = Depends(get_email_notifier),
) -> Dict[str, Any]:
    service = OrderService(db)
    order = _load_order(service, order_id)
    _check_access(order, user)

    try:
        result = service.request_return(order, request, get_settings().return_window_days)
    except OrderTransitionError as e:
        logger.info("Return rejected", order_id=order_id, status=order.get("status"))
        raise domain_error(e)

    notifier.send_return_confirmation(result["order"], result["return"]["id"], request.reason)
    return {
        "success": True,
        "message": "İade talebiniz alındı.",
        "returnId": result["return"]["id"],
        "order": result["order"],
    }


@router.patch("/{order_id}")
def update_order(
    order_id: str,
    request: OrderUpdateRequest,
    db=Depends(get_db),
    admin: SupabaseUser = Depends(require_admin),
    notifier: EmailNotifier = Depends(get_email_notifier),
) -> Dict[str, Any]:
    """Admin patch. A status change runs through the state machine first."""
    service = OrderService(db)
    order = _load_order(service, order_id)

    if request.payment_status:
        try:
            PaymentStatus(request.payment_status)
        except ValueError:
            raise http_error(400, f"Unknown payment status '{request.payment_status}'")

    status_changed = bool(request.status) and request.status != order.get("status")
    if status_changed:
        try:
            event = event_for_status(request.status)
            order = service.transition(
                order,
                event,
                notes=request.notes,
                tracking_number=request.tracking_number,
            )
        except OrderTransitionError as e:
            raise domain_error(e)
        if event == OrderEvent.SHIP and order.get("tracking_number"):
            notifier.send_shipping_notification(order, order["tracking_number"])
        elif event == OrderEvent.CANCEL:
            notifier.send_order_cancellation(order)

    extra = {
        "tracking_number": None if status_changed else request.tracking_number,
        "notes": None if status_changed else request.notes,
        "payment_status": request.payment_status,
    }
    if any(v is not None for v in extra.values()):
        updated = service.update(order_id, extra)
        order = {**order, **(updated or {})}

    logger.info("Order updated by admin", order_id=order_id, admin_id=admin.id)
    return {"success": True, "order": order}
