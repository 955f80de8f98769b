"""
Pydantic request models for the order endpoints.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from commerce.pricing import CartItem
from commerce.shipping import ShippingMethod


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class ShippingAddress(_CamelModel):
    """Address snapshot embedded in the order row."""
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    address: str = Field(..., min_length=1)
    apartment: Optional[str] = None
    city: str = Field(..., min_length=1)
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: str = Field("Turkey", min_length=1)
    phone: Optional[str] = None


class CreateOrderRequest(_CamelModel):
    """Checkout submission."""
    customer_email: str = Field(..., min_length=3, max_length=320)
    customer_name: str = Field(..., min_length=1, max_length=200)
    customer_phone: Optional[str] = None
    shipping_address: ShippingAddress
    items: List[CartItem] = Field(..., min_length=1)
    shipping_method: ShippingMethod = ShippingMethod.STANDARD
    payment_method: Optional[str] = None
    coupon_code: Optional[str] = None
    notes: Optional[str] = None


class QuoteRequest(_CamelModel):
    """Checkout preview: shipping options, tax lines and coupon effect."""
    items: List[CartItem] = Field(..., min_length=1)
    country: str = "Turkey"
    shipping_method: ShippingMethod = ShippingMethod.STANDARD
    coupon_code: Optional[str] = None


class CancelOrderRequest(_CamelModel):
    reason: Optional[str] = Field(None, max_length=500)


class ReturnItem(_CamelModel):
    product_id: str
    quantity: int = Field(1, ge=1)


class ReturnOrderRequest(_CamelModel):
    reason: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    items: List[ReturnItem] = Field(..., min_length=1)
    images: List[str] = Field(default_factory=list)


class ShipOrderRequest(_CamelModel):
    tracking_number: str = Field(..., min_length=1)
    carrier: str = Field(..., min_length=1)


class OrderUpdateRequest(_CamelModel):
    """Admin order patch. A status change goes through the state machine."""
    status: Optional[str] = None
    tracking_number: Optional[str] = None
    notes: Optional[str] = None
    payment_status: Optional[str] = None
