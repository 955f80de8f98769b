"""
Coupon validation.

A coupon is looked up by its upper-cased code among active coupons, then
checked against its validity window, minimum order value and usage cap.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from catalog.models import Coupon, CouponType


class CouponValidationError(Exception):
    """Raised when a coupon cannot be applied. Carries the HTTP status to use."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


@dataclass(frozen=True)
class AppliedCoupon:
    code: str
    type: str
    value: float
    discount: float
    free_shipping: bool
    description: Optional[str] = None

    def to_api(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "type": self.type,
            "value": self.value,
            "discount": self.discount,
            "freeShipping": self.free_shipping,
            "description": self.description,
        }


def normalize_code(code: str) -> str:
    return (code or "").strip().upper()


def _as_utc(value: datetime) -> datetime:
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value


def apply_coupon(coupon: Optional[Coupon], subtotal: float, now: Optional[datetime] = None) -> AppliedCoupon:
    """
    Validate ``coupon`` for an order subtotal and compute the discount.

    Raises:
        CouponValidationError: 404 when missing/inactive, 400 for any other rule
    """
    if coupon is None or not coupon.is_active:
        raise CouponValidationError("Invalid or expired coupon code", status_code=404)

    now = _as_utc(now or datetime.now(timezone.utc))

    if coupon.valid_from and now < _as_utc(coupon.valid_from):
        raise CouponValidationError("Coupon is not yet valid")

    if coupon.valid_until and now > _as_utc(coupon.valid_until):
        raise CouponValidationError("Coupon has expired")

    if coupon.min_order_value and subtotal < coupon.min_order_value:
        raise CouponValidationError(
            f"Minimum order value of {coupon.min_order_value:g} required"
        )

    if coupon.max_uses and coupon.uses_count >= coupon.max_uses:
        raise CouponValidationError("Coupon usage limit reached")

    discount = 0.0
    free_shipping = False
    if coupon.type == CouponType.PERCENTAGE:
        discount = subtotal * coupon.value / 100
    elif coupon.type == CouponType.FIXED:
        discount = min(coupon.value, subtotal)
    elif coupon.type == CouponType.FREE_SHIPPING:
        free_shipping = True

    return AppliedCoupon(
        code=coupon.code,
        type=CouponType(coupon.type).value,
        value=coupon.value,
        discount=round(discount, 2),
        free_shipping=free_shipping,
        description=coupon.description,
    )


def fetch_coupon(db, code: str) -> Optional[Coupon]:
    """Active coupon row for ``code`` or None."""
    result = (
        db.table("coupons")
        .select("*")
        .eq("code", normalize_code(code))
        .eq("is_active", True)
        .limit(1)
        .execute()
    )
    rows = result.data or []
    return Coupon.model_validate(rows[0]) if rows else None


def validate_coupon(db, code: str, subtotal: float, now: Optional[datetime] = None) -> AppliedCoupon:
    """Look up ``code`` and apply it to ``subtotal``."""
    if not normalize_code(code):
        raise CouponValidationError("Code and subtotal are required")
    return apply_coupon(fetch_coupon(db, code), subtotal, now)
