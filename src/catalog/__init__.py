"""
Catalog models, filters and keyword search.
"""

from catalog.models import (
    Category,
    Coupon,
    MetaObject,
    Product,
    ProductColor,
    ProductInput,
    product_from_row,
    products_from_rows,
)
from catalog.filters import ProductFilters, filter_options, filter_products
from catalog.search import get_search_suggestions, search_products

__all__ = [
    "Category",
    "Coupon",
    "MetaObject",
    "Product",
    "ProductColor",
    "ProductInput",
    "product_from_row",
    "products_from_rows",
    "ProductFilters",
    "filter_options",
    "filter_products",
    "get_search_suggestions",
    "search_products",
]
