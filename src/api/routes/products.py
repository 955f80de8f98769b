"""
Public catalog endpoints: the shop listing and the product page.

Usage:
    GET /api/products?category=hoodies&sort=price-asc&colors=black,cream
    GET /api/products/filters
    GET /api/products/organic-cotton-hoodie
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import ValidationError

from api.errors import http_error, not_found
from catalog.filters import ProductFilters, filter_options, filter_products
from catalog.repository import fetch_product, fetch_products
from config.database import get_db
from core.logging import get_logger
from core.utils import split_csv
from scoring.ranking import advanced_sort_products, normalize_sort_option
from scoring.similarity import get_related_by_category, get_related_products, get_you_may_also_like

logger = get_logger(__name__)

router = APIRouter(prefix="/api/products", tags=["Products"])


@router.get("")
def list_products(
    category: Optional[str] = Query(None, description="Category slug"),
    sort: Optional[str] = Query(None, description="recommended, popular, trending, newest, price-asc, ..."),
    min_price: Optional[float] = Query(None, ge=0),
    max_price: Optional[float] = Query(None, ge=0),
    colors: Optional[str] = Query(None, description="Comma separated color names"),
    sizes: Optional[str] = Query(None),
    brands: Optional[str] = Query(None),
    collections: Optional[str] = Query(None),
    materials: Optional[str] = Query(None),
    in_stock: bool = Query(False),
    on_sale: bool = Query(False),
    limit: int = Query(48, ge=1, le=500),
    db=Depends(get_db),
) -> Dict[str, Any]:
    """Published products, filtered then sorted."""
    try:
        filters = ProductFilters(
            min_price=min_price,
            max_price=max_price,
            colors=split_csv(colors),
            sizes=split_csv(sizes),
            brands=split_csv(brands),
            collections=split_csv(collections),
            materials=split_csv(materials),
            in_stock_only=in_stock,
            on_sale_only=on_sale,
        )
    except ValidationError as e:
        raise http_error(400, "Invalid filters", e.errors()[0].get("msg"))

    products = fetch_products(db, category=category)
    products = filter_products(products, filters)
    products = advanced_sort_products(products, normalize_sort_option(sort))

    logger.debug("Products listed", category=category, sort=sort, count=len(products))
    return {
        "products": [p.to_api() for p in products[:limit]],
        "total": len(products),
        "activeFilters": filters.active_count(),
    }


@router.get("/filters")
def get_filter_options(db=Depends(get_db)) -> Dict[str, Any]:
    """Size, brand, material, color and price choices for the filter sidebar."""
    return filter_options(fetch_products(db))


@router.get("/{slug}")
def get_product(slug: str, db=Depends(get_db)) -> Dict[str, Any]:
    """One product plus its related, same-category and also-like shelves."""
    product = fetch_product(db, "slug", slug, published_only=True)
    if product is None:
        raise not_found("Product")

    catalog = fetch_products(db)
    return {
        "product": product.to_api(),
        "related": [p.to_api() for p in get_related_products(product, catalog)],
        "sameCategory": [p.to_api() for p in get_related_by_category(product, catalog)],
        "youMayAlsoLike": [p.to_api() for p in get_you_may_also_like(product, catalog)],
    }
