"""
Order pricing: order numbers, line items and totals.

Totals are computed from the cart prices sent at checkout. Shipping comes
from the destination's zone table and tax is only added where the
destination's tax is not already included in shelf prices.
"""

import random
import string
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from commerce.shipping import ShippingMethod, calculate_shipping_cost
from commerce.tax import calculate_tax

ORDER_NUMBER_PREFIX = "NOW"
ORDER_NUMBER_ALPHABET = string.ascii_uppercase + string.digits
ORDER_NUMBER_SUFFIX_LENGTH = 6


def generate_order_number(now: Optional[datetime] = None, rng: Optional[random.Random] = None) -> str:
    """
    Order number in the form NOW-YYYY-MM-DD-XXXXXX.

    Example:
        NOW-2025-11-15-A1B2C3
    """
    now = now or datetime.now()
    rng = rng or random.SystemRandom()
    suffix = "".join(rng.choice(ORDER_NUMBER_ALPHABET) for _ in range(ORDER_NUMBER_SUFFIX_LENGTH))
    return f"{ORDER_NUMBER_PREFIX}-{now:%Y-%m-%d}-{suffix}"


class CartItem(BaseModel):
    """A cart line as posted by the storefront checkout."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    product_id: str
    product_name: str = "Product"
    product_image: str = ""
    product_sku: str = ""
    size: Optional[str] = None
    color: Optional[str] = None
    quantity: int = Field(..., ge=1)
    price: float = Field(..., gt=0)

    @property
    def line_total(self) -> float:
        return round(self.price * self.quantity, 2)


@dataclass(frozen=True)
class OrderTotals:
    subtotal: float
    shipping_cost: float
    tax: float
    tax_name: str
    tax_included: bool
    discount: float
    total: float

    def to_api(self) -> Dict[str, Any]:
        return {
            "subtotal": self.subtotal,
            "shippingCost": self.shipping_cost,
            "tax": self.tax,
            "taxName": self.tax_name,
            "taxIncluded": self.tax_included,
            "discount": self.discount,
            "total": self.total,
        }


def cart_subtotal(items: List[CartItem]) -> float:
    return round(sum(item.price * item.quantity for item in items), 2)


def calculate_order_totals(
    items: List[CartItem],
    country: str,
    method: ShippingMethod = ShippingMethod.STANDARD,
    discount: float = 0.0,
    free_shipping: bool = False,
) -> OrderTotals:
    """Subtotal, shipping, tax, discount and grand total for a cart."""
    subtotal = cart_subtotal(items)
    shipping = 0.0 if free_shipping else calculate_shipping_cost(country, subtotal, method).cost
    tax = calculate_tax(subtotal, country, include_in_price=True)
    discount = min(max(0.0, discount), subtotal)
    total = max(0.0, subtotal + shipping + tax.amount - discount)

    return OrderTotals(
        subtotal=subtotal,
        shipping_cost=round(shipping, 2),
        tax=round(tax.amount, 2),
        tax_name=tax.name,
        tax_included=tax.included,
        discount=round(discount, 2),
        total=round(total, 2),
    )


def build_order_items(order_id: str, items: List[CartItem]) -> List[Dict[str, Any]]:
    """order_items rows: a snapshot of each cart line."""
    return [
        {
            "order_id": order_id,
            "product_id": item.product_id,
            "product_name": item.product_name or "Product",
            "product_image": item.product_image,
            "product_sku": item.product_sku,
            "size": item.size,
            "color": item.color,
            "quantity": item.quantity,
            "price": item.price,
            "total": item.line_total,
        }
        for item in items
    ]
