"""
Card payments through Stripe.

Checkout creates the order first; the storefront then asks for a
PaymentIntent for that order and confirms it client side. Stripe reports
the outcome to ``POST /api/webhooks/stripe``, whose signature is checked
here before the event is trusted.

Usage::

    gateway = StripeGateway(settings)
    intent = gateway.create_payment_intent(order)
    event = gateway.parse_event(raw_body, request.headers["stripe-signature"])
"""

import json
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Optional

import stripe

from config.settings import Settings, get_settings
from core.logging import LoggerMixin

PAYMENT_SUCCEEDED = "payment_intent.succeeded"
PAYMENT_FAILED = "payment_intent.payment_failed"


class PaymentError(Exception):
    """Payment request or webhook rejected."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def to_minor_units(amount: float) -> int:
    """Order total in the currency's smallest unit (kuruş for TRY)."""
    return int((Decimal(str(amount)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


@dataclass
class PaymentIntent:
    id: str
    client_secret: str
    amount: int

    def to_api(self, order_number: Optional[str]) -> Dict[str, Any]:
        return {
            "clientSecret": self.client_secret,
            "orderNumber": order_number,
            "paymentIntentId": self.id,
        }


class StripeGateway(LoggerMixin):
    """PaymentIntent creation and webhook verification."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()

    def create_payment_intent(self, order: Dict[str, Any]) -> PaymentIntent:
        """
        Create a PaymentIntent for the order total.

        The order id is used as idempotency key, so a double-clicked pay
        button returns the same intent.
        """
        s = self._settings
        if not s.payments_enabled:
            raise PaymentError("Payments are not configured", status_code=503)

        amount = to_minor_units(float(order.get("total") or 0))
        if amount <= 0:
            raise PaymentError("Invalid amount")

        try:
            intent = stripe.PaymentIntent.create(
                amount=amount,
                currency=s.store_currency.lower(),
                receipt_email=order.get("customer_email") or None,
                metadata={
                    "order_id": order["id"],
                    "order_number": order.get("order_number") or "",
                },
                automatic_payment_methods={"enabled": True},
                api_key=s.stripe_secret_key,
                idempotency_key=f"order-{order['id']}-{amount}",
            )
        except stripe.StripeError as e:
            self.logger.error("PaymentIntent creation failed", order_id=order["id"], error=str(e))
            raise PaymentError("Failed to create payment intent", status_code=502) from e

        self.logger.info("PaymentIntent created", order_id=order["id"], payment_intent_id=intent.id, amount=amount)
        return PaymentIntent(id=intent.id, client_secret=intent.client_secret, amount=amount)

    def parse_event(self, payload: bytes, signature: Optional[str]) -> Dict[str, Any]:
        """Verify the Stripe-Signature header and return the decoded event."""
        if not signature:
            raise PaymentError("No signature")
        secret = self._settings.stripe_webhook_secret
        if not secret:
            raise PaymentError("Webhook secret is not configured", status_code=503)

        text = payload.decode("utf-8", errors="replace")
        try:
            stripe.WebhookSignature.verify_header(
                text, signature, secret, self._settings.stripe_webhook_tolerance_seconds
            )
        except stripe.SignatureVerificationError as e:
            self.logger.warning("Webhook signature rejected", error=str(e))
            raise PaymentError("Invalid signature") from e

        try:
            event = json.loads(text)
        except ValueError as e:
            raise PaymentError("Invalid payload") from e
        if not isinstance(event, dict) or "type" not in event:
            raise PaymentError("Invalid payload")
        return event


def event_object(event: Dict[str, Any]) -> Dict[str, Any]:
    return (event.get("data") or {}).get("object") or {}


def get_payment_gateway() -> StripeGateway:
    """FastAPI dependency; override in tests."""
    return StripeGateway()
