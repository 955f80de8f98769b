"""Public category endpoints."""

from typing import Any, Dict

from fastapi import APIRouter, Depends, Query

from api.errors import not_found
from catalog.models import CategoryStatus
from catalog.repository import fetch_products
from config.database import get_db
from scoring.ranking import advanced_sort_products
from services.category_service import CategoryService, build_category_tree

router = APIRouter(prefix="/api/categories", tags=["Categories"])


@router.get("")
def list_categories(
    tree: bool = Query(False, description="Nest subcategories under their parents"),
    db=Depends(get_db),
) -> Dict[str, Any]:
    categories = CategoryService(db).list(active_only=True)
    if tree:
        return {"categories": build_category_tree(categories)}
    return {"categories": [c.model_dump(mode="json", by_alias=True) for c in categories]}


@router.get("/{slug}")
def get_category(
    slug: str,
    sort: str = Query("recommended"),
    db=Depends(get_db),
) -> Dict[str, Any]:
    """A category with its subcategories and published products."""
    service = CategoryService(db)
    category = service.get_by_slug(slug)
    if category is None or category.status != CategoryStatus.ACTIVE.value:
        raise not_found("Category")

    products = advanced_sort_products(fetch_products(db, category=category.slug), sort)
    children = service.get_children(category.id) if category.id else []
    return {
        "category": category.model_dump(mode="json", by_alias=True),
        "children": [c.model_dump(mode="json", by_alias=True) for c in children],
        "products": [p.to_api() for p in products],
        "total": len(products),
    }
