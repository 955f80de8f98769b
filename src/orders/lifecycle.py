"""
Order status state machine.

Every status change (customer cancel, return request, admin ship,
admin status patch, soft delete) goes through ``apply_transition`` and the
single ``TRANSITIONS`` table below. Rejections raise
``OrderTransitionError`` with an English ``error`` and a Turkish
``message`` for the storefront.

Usage::

    from orders.lifecycle import OrderEvent, apply_transition

    update = apply_transition(order, OrderEvent.CANCEL)
    db.table("orders").update(update.changes).eq("id", order["id"]).execute()
"""

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Mapping, Optional, Tuple

from catalog.models import parse_timestamp

RETURN_WINDOW_DAYS = 30


class OrderStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    RETURN_REQUESTED = "return_requested"
    REFUNDED = "refunded"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


class OrderEvent(str, Enum):
    PROCESS = "process"
    SHIP = "ship"
    DELIVER = "deliver"
    CANCEL = "cancel"
    REQUEST_RETURN = "request_return"
    REFUND = "refund"


@dataclass(frozen=True)
class Transition:
    sources: FrozenSet[OrderStatus]
    target: OrderStatus


S = OrderStatus

TRANSITIONS: Mapping[OrderEvent, Transition] = MappingProxyType({
    OrderEvent.PROCESS: Transition(frozenset({S.PENDING}), S.PROCESSING),
    OrderEvent.SHIP: Transition(frozenset({S.PENDING, S.PROCESSING}), S.SHIPPED),
    OrderEvent.DELIVER: Transition(frozenset({S.SHIPPED}), S.DELIVERED),
    OrderEvent.CANCEL: Transition(frozenset({S.PENDING, S.PROCESSING}), S.CANCELLED),
    OrderEvent.REQUEST_RETURN: Transition(frozenset({S.DELIVERED}), S.RETURN_REQUESTED),
    OrderEvent.REFUND: Transition(frozenset({S.CANCELLED, S.RETURN_REQUESTED}), S.REFUNDED),
})

# Turkish verbs for the generic rejection message
_EVENT_TR = {
    OrderEvent.PROCESS: "hazırlanamaz",
    OrderEvent.SHIP: "kargoya verilemez",
    OrderEvent.DELIVER: "teslim edildi olarak işaretlenemez",
    OrderEvent.CANCEL: "iptal edilemez",
    OrderEvent.REQUEST_RETURN: "iade edilemez",
    OrderEvent.REFUND: "iade ödemesi yapılamaz",
}


class OrderTransitionError(Exception):
    """A status change the state machine does not allow (HTTP 400)."""

    def __init__(self, error: str, message: str, status_code: int = 400):
        super().__init__(error)
        self.error = error
        self.message = message
        self.status_code = status_code

    def to_detail(self) -> Dict[str, str]:
        return {"error": self.error, "message": self.message}


@dataclass
class TransitionResult:
    """Outcome of a permitted transition: the new status plus columns to write."""
    previous: OrderStatus
    status: OrderStatus
    changes: Dict[str, Any] = field(default_factory=dict)


def _utc(value: datetime) -> datetime:
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value


def _status_of(order: Mapping[str, Any]) -> OrderStatus:
    try:
        return OrderStatus(order.get("status") or OrderStatus.PENDING)
    except ValueError:
        raise OrderTransitionError(
            f"Unknown order status '{order.get('status')}'",
            "Sipariş durumu tanınmıyor.",
        )


def days_since_delivery(order: Mapping[str, Any], now: Optional[datetime] = None) -> Optional[int]:
    """Whole days since delivered_at (or updated_at); None when neither is set."""
    delivered = parse_timestamp(order.get("delivered_at")) or parse_timestamp(order.get("updated_at"))
    if delivered is None:
        return None
    now = _utc(now or datetime.now(timezone.utc))
    return math.floor((now - _utc(delivered)).total_seconds() / 86400)


def _reject(event: OrderEvent, current: OrderStatus) -> OrderTransitionError:
    if event == OrderEvent.CANCEL:
        if current in (S.SHIPPED, S.DELIVERED):
            return OrderTransitionError(
                "Cannot cancel order that has been shipped or delivered",
                "Bu sipariş zaten kargoya verildiği için iptal edilemez. "
                "İade talebi oluşturabilirsiniz.",
            )
        if current == S.CANCELLED:
            return OrderTransitionError(
                "Order is already cancelled",
                "Bu sipariş zaten iptal edilmiş.",
            )
    if event == OrderEvent.REQUEST_RETURN:
        return OrderTransitionError(
            "Order must be delivered to create a return",
            "Sadece teslim edilen siparişler için iade talebi oluşturabilirsiniz.",
        )
    return OrderTransitionError(
        f"Cannot {event.value.replace('_', ' ')} order with status '{current.value}'",
        f"Bu sipariş mevcut durumunda {_EVENT_TR[event]}.",
    )


def can_transition(order: Mapping[str, Any], event: OrderEvent) -> bool:
    return _status_of(order) in TRANSITIONS[OrderEvent(event)].sources


def apply_transition(
    order: Mapping[str, Any],
    event: OrderEvent,
    now: Optional[datetime] = None,
    tracking_number: Optional[str] = None,
    return_window_days: int = RETURN_WINDOW_DAYS,
) -> TransitionResult:
    """
    Check ``event`` against the order's current status.

    Returns the columns to persist (status, updated_at and the event's
    timestamp or tracking number). Raises OrderTransitionError otherwise;
    the order itself is never mutated.
    """
    event = OrderEvent(event)
    current = _status_of(order)
    transition = TRANSITIONS[event]

    if current not in transition.sources:
        raise _reject(event, current)

    if event == OrderEvent.REQUEST_RETURN:
        days = days_since_delivery(order, now)
        if days is not None and days > return_window_days:
            raise OrderTransitionError(
                "Return window has expired",
                f"İade süresi ({return_window_days} gün) dolmuştur.",
            )

    stamp = _utc(now or datetime.now(timezone.utc)).isoformat()
    changes: Dict[str, Any] = {"status": transition.target.value, "updated_at": stamp}

    if event == OrderEvent.CANCEL:
        changes["cancelled_at"] = stamp
    elif event == OrderEvent.DELIVER:
        changes["delivered_at"] = stamp
    elif event == OrderEvent.SHIP and tracking_number:
        changes["tracking_number"] = tracking_number
    elif event == OrderEvent.REFUND:
        changes["payment_status"] = PaymentStatus.REFUNDED.value

    return TransitionResult(previous=current, status=transition.target, changes=changes)


# Target status -> the event that reaches it, for admin status patches
_EVENT_FOR_TARGET: Mapping[OrderStatus, OrderEvent] = MappingProxyType(
    {t.target: e for e, t in TRANSITIONS.items()}
)


def event_for_status(target: str) -> OrderEvent:
    """Map a requested status to the event that produces it."""
    try:
        status = OrderStatus(target)
    except ValueError:
        raise OrderTransitionError(
            f"Unknown order status '{target}'",
            "Sipariş durumu tanınmıyor.",
        )
    if status not in _EVENT_FOR_TARGET:
        raise OrderTransitionError(
            f"Orders cannot be moved to '{status.value}'",
            "Sipariş bu duruma getirilemez.",
        )
    return _EVENT_FOR_TARGET[status]


def allowed_events(order: Mapping[str, Any]) -> Tuple[OrderEvent, ...]:
    """Events permitted from the order's current status (for the admin UI)."""
    current = _status_of(order)
    return tuple(e for e, t in TRANSITIONS.items() if current in t.sources)


# =============================================================================
# Payment status
# =============================================================================

class PaymentEvent(str, Enum):
    SUCCEED = "succeed"
    FAIL = "fail"


P = PaymentStatus

# A failed payment can be retried on the same order; a paid one is final
PAYMENT_TRANSITIONS: Mapping[PaymentEvent, Tuple[FrozenSet[PaymentStatus], PaymentStatus]] = MappingProxyType({
    PaymentEvent.SUCCEED: (frozenset({P.PENDING, P.FAILED}), P.PAID),
    PaymentEvent.FAIL: (frozenset({P.PENDING, P.FAILED}), P.FAILED),
})


def payment_status_of(order: Mapping[str, Any]) -> PaymentStatus:
    try:
        return PaymentStatus(order.get("payment_status") or PaymentStatus.PENDING)
    except ValueError:
        raise OrderTransitionError(
            f"Unknown payment status '{order.get('payment_status')}'",
            "Ödeme durumu tanınmıyor.",
        )


def apply_payment_event(
    order: Mapping[str, Any],
    event: PaymentEvent,
    now: Optional[datetime] = None,
) -> Optional[Dict[str, Any]]:
    """
    Columns to write for a payment provider event.

    Returns None for a success on an order that is already paid, so a
    redelivered webhook changes nothing. Each failure is recorded, since a
    customer may retry and fail again. Raises OrderTransitionError when
    the event cannot apply (a success after a refund, a failure after
    payment).
    """
    event = PaymentEvent(event)
    current = payment_status_of(order)
    sources, target = PAYMENT_TRANSITIONS[event]

    if current == target and event == PaymentEvent.SUCCEED:
        return None
    if current not in sources:
        raise OrderTransitionError(
            f"Cannot mark payment {target.value} when it is '{current.value}'",
            "Ödeme durumu bu şekilde değiştirilemez.",
        )

    changes: Dict[str, Any] = {
        "payment_status": target.value,
        "updated_at": _utc(now or datetime.now(timezone.utc)).isoformat(),
    }
    if event == PaymentEvent.SUCCEED:
        changes["paid_at"] = changes["updated_at"]
    return changes
