"""Transactional order emails via the Resend HTTP API."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from html import escape
from typing import Any, Dict, Iterable, Optional

import requests

from config.settings import Settings, get_settings
from core.logging import get_logger


logger = get_logger(__name__)


class EmailApiError(RuntimeError):
    """Raised for Resend API failures."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass
class EmailMessage:
    to: str
    subject: str
    text: str
    html: str


def _html(title: str, paragraphs: Iterable[str], brand: str) -> str:
    body = "".join(f"<p>{escape(p)}</p>" for p in paragraphs if p)
    return (
        "<!DOCTYPE html><html><head><meta charset=\"utf-8\">"
        f"<title>{escape(title)}</title></head>"
        f"<body><h1>{escape(brand)}</h1>{body}"
        f"<p>&copy; {datetime.now().year} {escape(brand)}. All rights reserved.</p>"
        "</body></html>"
    )


def _message(to: str, subject: str, paragraphs: list, brand: str) -> EmailMessage:
    return EmailMessage(
        to=to,
        subject=subject,
        text="\n\n".join(p for p in paragraphs if p),
        html=_html(subject, paragraphs, brand),
    )


class EmailNotifier:
    """
    Sends order emails. Every public ``send_*`` method is best effort:
    it returns False and logs instead of raising, so a mail outage never
    undoes a persisted order change.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()

    def is_configured(self) -> bool:
        return self._settings.email_enabled

    # ---------------------------------------------------------------------
    # Transport
    # ---------------------------------------------------------------------

    def _post(self, message: EmailMessage) -> Dict[str, Any]:
        s = self._settings
        resp = requests.post(
            s.resend_api_url,
            headers={"Authorization": f"Bearer {s.resend_api_key}"},
            json={
                "from": f"{s.email_brand_name} <{s.email_from_address}>",
                "to": [message.to],
                "subject": message.subject,
                "html": message.html,
                "text": message.text,
            },
            timeout=s.email_timeout_seconds,
        )
        if resp.status_code >= 400:
            raise EmailApiError(
                f"Email send failed ({resp.status_code}): {resp.text}",
                status_code=resp.status_code,
            )
        return resp.json()

    def send(self, message: EmailMessage) -> bool:
        if not message.to:
            logger.warning("Email skipped: no recipient", subject=message.subject)
            return False
        if not self.is_configured():
            logger.info("Email disabled, skipping send", subject=message.subject)
            return False
        try:
            data = self._post(message)
        except (requests.RequestException, EmailApiError) as e:
            logger.error("Email send failed", subject=message.subject, error=str(e))
            return False
        logger.info("Email sent", subject=message.subject, email_id=data.get("id"))
        return True

    # ---------------------------------------------------------------------
    # Order emails
    # ---------------------------------------------------------------------

    def send_order_confirmation(self, order: Dict[str, Any], items: list) -> bool:
        brand = self._settings.email_brand_name
        currency = self._settings.store_currency
        lines = [
            f"{item.get('quantity', 1)} x {item.get('product_name', 'Product')} "
            f"({float(item.get('price', 0)):.2f} {currency})"
            for item in items
        ]
        paragraphs = [
            f"Hi {order.get('customer_name') or ''},",
            f"Thank you for your order {order.get('order_number')}.",
            *lines,
            f"Total: {float(order.get('total') or 0):.2f} {currency}",
        ]
        return self.send(_message(
            order.get("customer_email", ""),
            f"Order Confirmation - {order.get('order_number')}",
            paragraphs,
            brand,
        ))

    def send_shipping_notification(
        self, order: Dict[str, Any], tracking_number: str, carrier: Optional[str] = None
    ) -> bool:
        paragraphs = [
            f"Hi {order.get('customer_name') or ''},",
            f"Your order {order.get('order_number')} is on its way.",
            f"Carrier: {carrier}" if carrier else "",
            f"Tracking number: {tracking_number}",
        ]
        return self.send(_message(
            order.get("customer_email", ""),
            f"Your Order Has Shipped - {order.get('order_number')}",
            paragraphs,
            self._settings.email_brand_name,
        ))

    def send_order_cancellation(self, order: Dict[str, Any]) -> bool:
        currency = self._settings.store_currency
        paragraphs = [
            f"Hi {order.get('customer_name') or ''},",
            "Your order has been successfully cancelled as requested.",
            f"Refund amount: {float(order.get('total') or 0):.2f} {currency}",
            "Your refund will be processed within 5-7 business days.",
        ]
        return self.send(_message(
            order.get("customer_email", ""),
            f"Order Cancelled - {order.get('order_number')}",
            paragraphs,
            self._settings.email_brand_name,
        ))

    def send_return_confirmation(self, order: Dict[str, Any], return_id: str, reason: str) -> bool:
        paragraphs = [
            f"Hi {order.get('customer_name') or ''},",
            f"We received your return request {return_id} for order {order.get('order_number')}.",
            f"Reason: {reason}",
            "Your return label will be sent to this email address.",
        ]
        return self.send(_message(
            order.get("customer_email", ""),
            f"Return Request Received - {order.get('order_number')}",
            paragraphs,
            self._settings.email_brand_name,
        ))

    def send_payment_failed(self, order: Dict[str, Any], reason: Optional[str] = None) -> bool:
        paragraphs = [
            f"Hi {order.get('customer_name') or ''},",
            f"We could not process the payment for order {order.get('order_number')}.",
            f"Reason: {reason}" if reason else "",
            "Please try again or use a different payment method.",
        ]
        return self.send(_message(
            order.get("customer_email", ""),
            f"Payment Failed - {order.get('order_number')}",
            paragraphs,
            self._settings.email_brand_name,
        ))


def get_email_notifier() -> EmailNotifier:
    """FastAPI dependency; override in tests."""
    return EmailNotifier()
