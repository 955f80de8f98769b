"""
Pydantic models for catalog records.

Rows come back from Supabase in snake_case, while the storefront and the
admin panel post camelCase bodies. Every model accepts both spellings and
fills optional fields with defaults, so the scoring and search layers can
read attributes without None checks.
"""

import re
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from config.constants import color_name_to_hex
from core.utils import coerce_number, split_csv


# ============================================================================
# Enums
# ============================================================================

class ProductStatus(str, Enum):
    """Product visibility status."""
    DRAFT = "draft"
    PUBLISHED = "published"


class CategoryStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class MetaObjectType(str, Enum):
    """Admin-managed attribute vocabularies."""
    COLOR = "color"
    SIZE = "size"
    MATERIAL = "material"
    FABRIC = "fabric"


class CouponType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"
    FREE_SHIPPING = "free_shipping"


class CatalogModel(BaseModel):
    """Base for models that accept snake_case and camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        use_enum_values=True,
    )


_FRACTION = re.compile(r"(\d{2}:\d{2}:\d{2})\.(\d+)")


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO timestamp; returns None for missing or unparseable values."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    text = str(value).strip().replace("Z", "+00:00")
    # fromisoformat before 3.11 only takes 3 or 6 fractional digits
    text = _FRACTION.sub(lambda m: f"{m.group(1)}.{(m.group(2) + '000000')[:6]}", text)
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


# ============================================================================
# Product
# ============================================================================

class ProductColor(CatalogModel):
    """A color swatch: display name plus hex code."""
    name: str
    hex: str = "#000000"


def normalize_colors(value: Any) -> List[Dict[str, str]]:
    """
    Accept colors as {name, hex} dicts, bare names, or a comma list of names.

    Bare names get their hex from the color table.
    """
    if not value:
        return []
    if isinstance(value, str):
        value = split_csv(value)
    colors = []
    for color in value:
        if isinstance(color, ProductColor):
            colors.append(color.model_dump())
        elif isinstance(color, str) and color.strip():
            colors.append({"name": color.strip(), "hex": color_name_to_hex(color)})
        elif isinstance(color, dict) and color.get("name"):
            colors.append({"name": color["name"], "hex": color.get("hex") or color_name_to_hex(color["name"])})
    return colors


class Product(CatalogModel):
    """
    A catalog product as read from the database.

    Counters and flags default to zero/False and lists to empty, so a
    freshly inserted row with sparse columns still scores cleanly.
    """
    id: Optional[str] = None
    name: str = ""
    slug: str = ""
    description: str = ""
    category: str = ""

    # Pricing and stock
    price: float = 0.0
    compare_at_price: Optional[float] = None
    stock: int = 0
    in_stock: bool = False

    # Attributes
    colors: List[ProductColor] = Field(default_factory=list)
    sizes: List[str] = Field(default_factory=list)
    material: str = ""
    brand: str = ""
    collection: str = ""
    tags: List[str] = Field(default_factory=list)
    images: List[str] = Field(default_factory=list)
    features: List[str] = Field(default_factory=list)
    care: List[str] = Field(default_factory=list)
    sku: Optional[str] = None
    ean13: Optional[str] = None
    status: ProductStatus = ProductStatus.PUBLISHED
    seo_title: Optional[str] = None
    seo_description: Optional[str] = None

    # Engagement counters
    sold_count: int = 0
    views: int = 0
    wishlist_count: int = 0
    rating: Optional[float] = None
    review_count: int = 0

    # Merchandising flags
    is_on_sale: bool = False
    is_best_seller: bool = False
    is_new: bool = False

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("price", mode="before")
    @classmethod
    def _coerce_price(cls, v):
        return max(0.0, coerce_number(v))

    @field_validator("compare_at_price", "rating", mode="before")
    @classmethod
    def _coerce_optional_number(cls, v):
        if v is None or v == "":
            return None
        number = coerce_number(v, default=-1)
        return number if number >= 0 else None

    @field_validator("stock", "sold_count", "views", "wishlist_count", "review_count", mode="before")
    @classmethod
    def _coerce_count(cls, v):
        return max(0, int(coerce_number(v)))

    @field_validator("in_stock", "is_on_sale", "is_best_seller", "is_new", mode="before")
    @classmethod
    def _coerce_flag(cls, v):
        return bool(v) if v is not None else False

    @field_validator(
        "name", "slug", "description", "category", "material", "brand", "collection",
        mode="before",
    )
    @classmethod
    def _coerce_text(cls, v):
        return "" if v is None else str(v)

    @field_validator("sizes", "tags", "images", "features", "care", mode="before")
    @classmethod
    def _coerce_list(cls, v):
        return split_csv(v)

    @field_validator("colors", mode="before")
    @classmethod
    def _coerce_colors(cls, v):
        return normalize_colors(v)

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, v):
        return None if v is None else str(v)

    @field_validator("status", mode="before")
    @classmethod
    def _coerce_status(cls, v):
        return v or ProductStatus.PUBLISHED

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def _coerce_timestamp(cls, v):
        return parse_timestamp(v)

    @property
    def color_names(self) -> List[str]:
        return [c.name for c in self.colors]

    def to_api(self) -> Dict[str, Any]:
        """JSON-safe dict in the storefront's camelCase shape."""
        return self.model_dump(mode="json", by_alias=True)


def product_from_row(row: Dict[str, Any]) -> Product:
    """Build a Product from a Supabase row (or any camel/snake dict)."""
    return Product.model_validate(row)


def products_from_rows(rows: Optional[List[Dict[str, Any]]]) -> List[Product]:
    return [product_from_row(row) for row in rows or []]


class ProductInput(CatalogModel):
    """Admin create/update body. Validation here is strict, unlike Product."""
    name: str = Field(..., min_length=1, max_length=200)
    slug: Optional[str] = None
    description: str = ""
    category: str = Field(..., min_length=1)
    price: float = Field(..., ge=0)
    compare_at_price: Optional[float] = Field(None, ge=0)
    stock: int = Field(0, ge=0)
    colors: List[ProductColor] = Field(default_factory=list)
    sizes: List[str] = Field(default_factory=list)
    material: str = ""
    brand: str = ""
    collection: str = ""
    tags: List[str] = Field(default_factory=list)
    images: List[str] = Field(default_factory=list)
    features: List[str] = Field(default_factory=list)
    care: List[str] = Field(default_factory=list)
    sku: Optional[str] = None
    ean13: Optional[str] = None
    status: ProductStatus = ProductStatus.DRAFT
    seo_title: Optional[str] = None
    seo_description: Optional[str] = None
    is_on_sale: bool = False
    is_best_seller: bool = False
    is_new: bool = False

    @field_validator("colors", mode="before")
    @classmethod
    def _coerce_colors(cls, v):
        return normalize_colors(v)

    def to_row(self) -> Dict[str, Any]:
        """Database row (snake_case) with in_stock derived from stock."""
        row = self.model_dump(mode="json")
        row["in_stock"] = self.stock > 0
        return row


# ============================================================================
# Category
# ============================================================================

class Category(CatalogModel):
    """A product category; parent_id nests categories to any depth."""
    id: Optional[str] = None
    name: str
    slug: str = ""
    description: Optional[str] = None
    image: Optional[str] = None
    parent_id: Optional[str] = None
    status: CategoryStatus = CategoryStatus.ACTIVE
    sort_order: int = 0
    product_count: int = 0
    seo_title: Optional[str] = None
    seo_description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("sort_order", "product_count", mode="before")
    @classmethod
    def _coerce_int(cls, v):
        return int(coerce_number(v))

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def _coerce_timestamp(cls, v):
        return parse_timestamp(v)


def category_from_row(row: Dict[str, Any]) -> Category:
    """Map a categories row (is_active flag, image_url column) to a Category."""
    data = dict(row)
    if "status" not in data and "is_active" in data:
        data["status"] = CategoryStatus.ACTIVE if data.get("is_active") else CategoryStatus.INACTIVE
    if "image" not in data and "image_url" in data:
        data["image"] = data.pop("image_url")
    return Category.model_validate(data)


# ============================================================================
# MetaObject
# ============================================================================

class MetaObject(CatalogModel):
    """An admin-managed attribute value (a color, size, material or fabric)."""
    id: Optional[str] = None
    type: MetaObjectType
    code: str = ""
    name: str = Field(..., min_length=1)
    value: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    is_active: bool = True
    sort_order: int = 999

    @field_validator("metadata", mode="before")
    @classmethod
    def _coerce_metadata(cls, v):
        return v or {}

    @field_validator("sort_order", mode="before")
    @classmethod
    def _coerce_sort_order(cls, v):
        return int(coerce_number(v, default=999))


# ============================================================================
# Coupon
# ============================================================================

class Coupon(CatalogModel):
    """A discount code row from the coupons table."""
    id: Optional[str] = None
    code: str
    type: CouponType
    value: float = 0.0
    min_order_value: float = 0.0
    max_uses: Optional[int] = None
    uses_count: int = 0
    valid_from: Optional[datetime] = None
    valid_until: Optional[datetime] = None
    is_active: bool = True
    description: Optional[str] = None

    @field_validator("value", "min_order_value", mode="before")
    @classmethod
    def _coerce_amount(cls, v):
        return coerce_number(v)

    @field_validator("uses_count", mode="before")
    @classmethod
    def _coerce_uses(cls, v):
        return int(coerce_number(v))

    @field_validator("valid_from", "valid_until", mode="before")
    @classmethod
    def _coerce_timestamp(cls, v):
        return parse_timestamp(v)
