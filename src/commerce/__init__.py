"""
Checkout arithmetic: tax, shipping, coupons and order totals.
"""

from commerce.coupons import AppliedCoupon, CouponValidationError, apply_coupon, validate_coupon
from commerce.pricing import CartItem, OrderTotals, calculate_order_totals, generate_order_number
from commerce.shipping import ShippingMethod, get_shipping_options, get_shipping_zone
from commerce.tax import calculate_tax, get_tax_breakdown, get_tax_rate

__all__ = [
    "AppliedCoupon",
    "CouponValidationError",
    "apply_coupon",
    "validate_coupon",
    "CartItem",
    "OrderTotals",
    "calculate_order_totals",
    "generate_order_number",
    "ShippingMethod",
    "get_shipping_options",
    "get_shipping_zone",
    "calculate_tax",
    "get_tax_breakdown",
    "get_tax_rate",
]
