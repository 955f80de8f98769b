"""
Tests for coupon validation.
"""

from datetime import datetime, timedelta, timezone

import pytest

from catalog.models import Coupon
from commerce.coupons import (
    CouponValidationError,
    apply_coupon,
    normalize_code,
    validate_coupon,
)

NOW = datetime(2025, 3, 1, tzinfo=timezone.utc)


def make_coupon(**overrides) -> Coupon:
    data = {"code": "WELCOME10", "type": "percentage", "value": 10, "is_active": True}
    data.update(overrides)
    return Coupon(**data)


class TestApplyCoupon:
    """Tests for apply_coupon."""

    def test_percentage(self):
        applied = apply_coupon(make_coupon(), 250.0, now=NOW)

        assert applied.discount == 25.0
        assert applied.free_shipping is False
        assert applied.type == "percentage"

    def test_fixed_capped_at_subtotal(self):
        applied = apply_coupon(make_coupon(type="fixed", value=100), 60.0, now=NOW)

        assert applied.discount == 60.0

    def test_free_shipping(self):
        applied = apply_coupon(make_coupon(type="free_shipping", value=0), 60.0, now=NOW)

        assert applied.discount == 0.0
        assert applied.free_shipping is True
        assert applied.to_api()["freeShipping"] is True

    def test_missing_coupon_is_404(self):
        with pytest.raises(CouponValidationError) as exc_info:
            apply_coupon(None, 100.0)

        assert exc_info.value.status_code == 404

    def test_inactive_coupon_is_404(self):
        with pytest.raises(CouponValidationError) as exc_info:
            apply_coupon(make_coupon(is_active=False), 100.0)

        assert exc_info.value.status_code == 404

    def test_not_yet_valid(self):
        coupon = make_coupon(valid_from=NOW + timedelta(days=1))

        with pytest.raises(CouponValidationError, match="not yet valid"):
            apply_coupon(coupon, 100.0, now=NOW)

    def test_expired(self):
        coupon = make_coupon(valid_until="2025-02-01T00:00:00Z")

        with pytest.raises(CouponValidationError, match="expired") as exc_info:
            apply_coupon(coupon, 100.0, now=NOW)

        assert exc_info.value.status_code == 400

    def test_naive_dates_treated_as_utc(self):
        coupon = make_coupon(valid_from=datetime(2025, 2, 1), valid_until=datetime(2025, 4, 1))

        assert apply_coupon(coupon, 100.0, now=NOW).discount == 10.0

    def test_minimum_order_value(self):
        coupon = make_coupon(min_order_value=200)

        with pytest.raises(CouponValidationError, match="Minimum order value of 200 required"):
            apply_coupon(coupon, 199.0, now=NOW)

    def test_usage_limit(self):
        coupon = make_coupon(max_uses=5, uses_count=5)

        with pytest.raises(CouponValidationError, match="usage limit"):
            apply_coupon(coupon, 100.0, now=NOW)


class TestValidateCoupon:
    """Tests for the database lookup path."""

    def test_code_is_normalized(self, mock_supabase_client):
        coupons = mock_supabase_client.seed("coupons", [
            {"code": "WELCOME10", "type": "percentage", "value": 10, "is_active": True},
        ])

        applied = validate_coupon(mock_supabase_client, "  welcome10 ", 100.0, now=NOW)

        assert applied.code == "WELCOME10"
        coupons.eq.assert_any_call("code", "WELCOME10")

    def test_unknown_code(self, mock_supabase_client):
        with pytest.raises(CouponValidationError) as exc_info:
            validate_coupon(mock_supabase_client, "NOPE", 100.0)

        assert exc_info.value.status_code == 404

    def test_blank_code(self, mock_supabase_client):
        with pytest.raises(CouponValidationError):
            validate_coupon(mock_supabase_client, "   ", 100.0)

        mock_supabase_client.table.assert_not_called()

    def test_normalize_code(self):
        assert normalize_code(" summer25 ") == "SUMMER25"
        assert normalize_code(None) == ""


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
