"""
Checkout preview and coupon validation.

The quote is what the checkout page shows before the order is placed:
shipping options, the tax line, the coupon effect and the grand total.
The same ``calculate_order_totals`` runs again at order creation, so the
quoted total is what the customer is charged.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from api.errors import domain_error, http_error
from commerce.coupons import CouponValidationError, validate_coupon
from commerce.pricing import calculate_order_totals, cart_subtotal
from commerce.shipping import (
    calculate_delivery_date,
    can_ship_to_country,
    get_shipping_options,
    get_shipping_recommendations,
)
from commerce.tax import format_tax_info, get_tax_breakdown
from config.database import get_db
from config.settings import get_settings
from orders.models import QuoteRequest

router = APIRouter(tags=["Checkout"])


class CouponValidateRequest(BaseModel):
    code: str = Field(..., min_length=1)
    subtotal: float = Field(..., ge=0)


@router.post("/api/checkout/quote")
def checkout_quote(request: QuoteRequest, db=Depends(get_db)) -> Dict[str, Any]:
    if not can_ship_to_country(request.country):
        raise http_error(400, f"Shipping to {request.country} is not available")

    currency = get_settings().store_currency
    subtotal = cart_subtotal(request.items)

    coupon = None
    if request.coupon_code:
        try:
            coupon = validate_coupon(db, request.coupon_code, subtotal)
        except CouponValidationError as e:
            raise domain_error(e)

    totals = calculate_order_totals(
        request.items,
        request.country,
        request.shipping_method,
        discount=coupon.discount if coupon else 0.0,
        free_shipping=coupon.free_shipping if coupon else False,
    )
    breakdown = get_tax_breakdown(subtotal, request.country)
    _, _, delivery = calculate_delivery_date(request.country, request.shipping_method)
    recommendation = get_shipping_recommendations(request.country, subtotal, currency)

    return {
        "currency": currency,
        "totals": totals.to_api(),
        "shippingOptions": [
            {
                "method": quote.method.value,
                "name": quote.name,
                "cost": quote.cost,
                "isFree": quote.is_free,
                "zone": quote.zone,
                "estimatedDays": quote.estimated_days,
                "description": quote.description,
            }
            for quote in get_shipping_options(request.country, subtotal)
        ],
        "estimatedDelivery": delivery,
        "shippingMessage": recommendation.message,
        "tax": {
            "name": breakdown.tax_name,
            "rate": breakdown.tax_rate,
            "included": breakdown.tax_included,
            "amount": round(breakdown.tax_amount, 2),
            "subtotalExcludingTax": round(breakdown.subtotal_excluding_tax, 2),
            "label": format_tax_info(subtotal, request.country, currency),
        },
        "coupon": coupon.to_api() if coupon else None,
    }


@router.post("/api/coupons/validate")
def coupons_validate(request: CouponValidateRequest, db=Depends(get_db)) -> Dict[str, Any]:
    try:
        coupon = validate_coupon(db, request.code, request.subtotal)
    except CouponValidationError as e:
        raise domain_error(e)
    return {"valid": True, "coupon": coupon.to_api()}
