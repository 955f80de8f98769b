"""
Catalog filtering for the shop page.

All filters combine with AND; list filters match when the product has
any of the selected values.
"""

from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, Field, model_validator

from catalog.models import Product
from config.constants import BRANDS, CATALOG_CATEGORIES, MATERIALS, SIZES
from core.utils import normalize_string_set


class ProductFilters(BaseModel):
    """Shop filter state. Empty lists mean "no filter"."""
    min_price: Optional[float] = Field(None, ge=0)
    max_price: Optional[float] = Field(None, ge=0)
    colors: List[str] = Field(default_factory=list)
    sizes: List[str] = Field(default_factory=list)
    brands: List[str] = Field(default_factory=list)
    categories: List[str] = Field(default_factory=list)
    collections: List[str] = Field(default_factory=list)
    materials: List[str] = Field(default_factory=list)
    in_stock_only: bool = False
    on_sale_only: bool = False

    @model_validator(mode="after")
    def validate_price_range(self):
        """Ensure min_price <= max_price when both are set."""
        if self.min_price is not None and self.max_price is not None:
            if self.min_price > self.max_price:
                raise ValueError(f"min_price ({self.min_price}) must be <= max_price ({self.max_price})")
        return self

    def active_count(self) -> int:
        """Number of active filters (for the filter badge)."""
        count = sum(
            1 for values in (
                self.colors, self.sizes, self.brands,
                self.categories, self.collections, self.materials,
            ) if values
        )
        count += int(self.min_price is not None or self.max_price is not None)
        count += int(self.in_stock_only) + int(self.on_sale_only)
        return count


def matches_filters(product: Product, filters: ProductFilters) -> bool:
    if filters.min_price is not None and product.price < filters.min_price:
        return False
    if filters.max_price is not None and product.price > filters.max_price:
        return False

    if filters.colors:
        wanted = normalize_string_set(filters.colors)
        if not any(name.lower() in wanted for name in product.color_names):
            return False

    if filters.sizes and not set(product.sizes) & set(filters.sizes):
        return False

    if filters.brands and product.brand not in filters.brands:
        return False

    if filters.categories and product.category not in filters.categories:
        return False

    if filters.collections and product.collection not in filters.collections:
        return False

    if filters.materials:
        material = _material_key(product.material)
        if not material or not any(_material_key(m) in material for m in filters.materials):
            return False

    if filters.in_stock_only and not product.in_stock:
        return False

    if filters.on_sale_only and not product.is_on_sale:
        return False

    return True


def filter_products(products: List[Product], filters: Optional[ProductFilters]) -> List[Product]:
    """Products matching every active filter, in input order."""
    if filters is None:
        return list(products)
    return [p for p in products if matches_filters(p, filters)]


def _material_key(value: str) -> str:
    # "organic-cotton" and "Organic Cotton" select the same products
    return (value or "").replace("-", " ").lower().strip()


def _merged(fixed: Iterable[str], found: Iterable[str]) -> List[str]:
    """Fixed values in their order, then catalog values not already listed."""
    values = list(fixed)
    seen = normalize_string_set(values)
    for value in sorted(v for v in found if v):
        if value.lower().strip() not in seen:
            seen.add(value.lower().strip())
            values.append(value)
    return values


def filter_options(products: List[Product]) -> Dict[str, Any]:
    """
    Choices for the shop filter sidebar.

    Sizes, brands and materials start from the store's fixed lists and
    gain any extra value found in the catalog. Colors and collections
    come from the catalog only.
    """
    colors: Dict[str, str] = {}
    for product in products:
        for color in product.colors:
            colors.setdefault(color.name, color.hex)

    prices = [p.price for p in products]
    return {
        "sizes": _merged(SIZES, (size for p in products for size in p.sizes)),
        "brands": _merged(BRANDS, (p.brand for p in products)),
        "materials": _merged(MATERIALS, (p.material for p in products)),
        "colors": [{"name": name, "hex": hex_code} for name, hex_code in sorted(colors.items())],
        "collections": sorted({p.collection for p in products if p.collection}),
        "categories": [{"slug": slug, "name": name} for slug, name in CATALOG_CATEGORIES.items()],
        "priceRange": {
            "min": min(prices) if prices else 0,
            "max": max(prices) if prices else 0,
        },
    }
