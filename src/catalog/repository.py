"""
Product reads from Supabase.

Scoring and filtering run in Python over the rows fetched here, so the
queries stay simple: published products, optionally one category.
"""

from typing import List, Optional

from catalog.models import Product, ProductStatus, product_from_row, products_from_rows
from config.settings import get_settings

PRODUCTS_TABLE = "products"


def fetch_products(
    db,
    category: Optional[str] = None,
    published_only: bool = True,
    limit: Optional[int] = None,
) -> List[Product]:
    """Products newest first, capped at ``catalog_max_products``."""
    query = db.table(PRODUCTS_TABLE).select("*")
    if published_only:
        query = query.eq("status", ProductStatus.PUBLISHED.value)
    if category:
        query = query.eq("category", category)
    cap = limit or get_settings().catalog_max_products
    rows = query.order("created_at", desc=True).limit(cap).execute().data
    return products_from_rows(rows)


def fetch_product(db, column: str, value: str, published_only: bool = False) -> Optional[Product]:
    query = db.table(PRODUCTS_TABLE).select("*").eq(column, value)
    if published_only:
        query = query.eq("status", ProductStatus.PUBLISHED.value)
    rows = query.limit(1).execute().data or []
    return product_from_row(rows[0]) if rows else None
