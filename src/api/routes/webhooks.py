"""
Stripe webhook: settles ``payment_status`` on orders.

Stripe retries any non-2xx response, so once the signature checks out
every event is acknowledged, including ones for unknown orders and
repeats of an already applied event.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Header, Request

from api.errors import domain_error
from config.database import get_db
from core.logging import bind_context, get_logger
from orders.lifecycle import OrderTransitionError, PaymentEvent
from orders.notifications import EmailNotifier, get_email_notifier
from orders.payments import (
    PAYMENT_FAILED,
    PAYMENT_SUCCEEDED,
    PaymentError,
    StripeGateway,
    event_object,
    get_payment_gateway,
)
from orders.service import OrderService

logger = get_logger(__name__)

router = APIRouter(prefix="/api/webhooks", tags=["Webhooks"])

_PAYMENT_EVENTS = {
    PAYMENT_SUCCEEDED: PaymentEvent.SUCCEED,
    PAYMENT_FAILED: PaymentEvent.FAIL,
}

ACK = {"received": True}


async def raw_body(request: Request) -> bytes:
    """Unparsed request body; the signature covers the exact bytes."""
    return await request.body()


@router.post("/stripe")
def stripe_webhook(
    payload: bytes = Depends(raw_body),
    stripe_signature: Optional[str] = Header(None),
    db=Depends(get_db),
    gateway: StripeGateway = Depends(get_payment_gateway),
    notifier: EmailNotifier = Depends(get_email_notifier),
) -> Dict[str, Any]:
    try:
        event = gateway.parse_event(payload, stripe_signature)
    except PaymentError as e:
        raise domain_error(e)

    payment_event = _PAYMENT_EVENTS.get(event["type"])
    if payment_event is None:
        logger.debug("Webhook event ignored", event_type=event["type"])
        return ACK

    intent = event_object(event)
    metadata = intent.get("metadata") or {}
    bind_context(stripe_event_id=event.get("id"), payment_intent_id=intent.get("id"))

    service = OrderService(db)
    order = service.find_for_payment(metadata.get("order_id"), intent.get("id"))
    if order is None:
        logger.warning("Webhook for unknown order", order_id=metadata.get("order_id"))
        return ACK

    try:
        updated = service.record_payment(order, payment_event, payment_intent_id=intent.get("id"))
    except OrderTransitionError as e:
        logger.warning(
            "Payment event rejected",
            order_id=order["id"],
            payment_status=order.get("payment_status"),
            error=e.error,
        )
        return ACK

    if updated is not None and payment_event == PaymentEvent.FAIL:
        error = intent.get("last_payment_error") or {}
        notifier.send_payment_failed(updated, error.get("message"))
    return ACK
