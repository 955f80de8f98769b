"""
Order lifecycle, persistence, payments and notifications.
"""

from orders.lifecycle import (
    OrderEvent,
    OrderStatus,
    OrderTransitionError,
    PaymentEvent,
    PaymentStatus,
    apply_payment_event,
    apply_transition,
    event_for_status,
)
from orders.notifications import EmailNotifier, get_email_notifier
from orders.payments import PaymentError, StripeGateway, get_payment_gateway
from orders.service import OrderCreationError, OrderService

__all__ = [
    "OrderEvent",
    "OrderStatus",
    "OrderTransitionError",
    "PaymentEvent",
    "PaymentStatus",
    "apply_payment_event",
    "apply_transition",
    "event_for_status",
    "EmailNotifier",
    "get_email_notifier",
    "PaymentError",
    "StripeGateway",
    "get_payment_gateway",
    "OrderCreationError",
    "OrderService",
]
