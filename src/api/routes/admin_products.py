"""
Admin product management.

Drafts are included everywhere here. DELETE is a soft delete (status ->
draft) so order item snapshots keep pointing at a real row.
"""

from datetime import date, datetime, timezone
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from fastapi.responses import Response

from api.errors import domain_error, http_error, not_found
from catalog.models import ProductInput, ProductStatus, products_from_rows
from catalog.repository import PRODUCTS_TABLE, fetch_product, fetch_products
from config.database import get_db
from core.auth import SupabaseUser, require_admin
from core.logging import get_logger
from core.utils import chunk_list, generate_slug, ilike_any
from scoring.ranking import advanced_sort_products, get_product_scores
from services.excel_service import (
    XLSX_MEDIA_TYPE,
    ExcelImportError,
    export_products_workbook,
    parse_products_workbook,
    products_template_workbook,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/api/admin/products", tags=["Admin"])

IMPORT_BATCH_SIZE = 100


def _xlsx(content: bytes, filename: str) -> Response:
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


def _ensure_slug_free(db, slug: str, product_id: Optional[str] = None) -> None:
    """409 when another product already uses ``slug``."""
    query = db.table(PRODUCTS_TABLE).select("id").eq("slug", slug)
    if product_id:
        query = query.neq("id", product_id)
    if query.limit(1).execute().data:
        raise http_error(409, f'Slug "{slug}" is already in use')


@router.get("")
def admin_list_products(
    status_filter: Optional[str] = Query(None, alias="status"),
    category: Optional[str] = None,
    search: Optional[str] = None,
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    admin: SupabaseUser = Depends(require_admin),
    db=Depends(get_db),
) -> Dict[str, Any]:
    query = db.table(PRODUCTS_TABLE).select("*").order("created_at", desc=True)
    if status_filter:
        query = query.eq("status", status_filter)
    if category:
        query = query.eq("category", category)
    if search and search.strip():
        query = query.or_(ilike_any(("name", "sku"), search))
    rows = query.range(offset, offset + limit - 1).execute().data
    products = products_from_rows(rows)
    return {"products": [p.to_api() for p in products], "count": len(products)}


@router.get("/scores")
def admin_product_scores(
    sort: str = Query("recommended"),
    admin: SupabaseUser = Depends(require_admin),
    db=Depends(get_db),
) -> Dict[str, Any]:
    """Popularity, trending and relevance scores for every product."""
    products = advanced_sort_products(fetch_products(db, published_only=False), sort)
    return {
        "products": [
            {"id": p.id, "name": p.name, "slug": p.slug, "scores": get_product_scores(p)}
            for p in products
        ]
    }


@router.get("/export")
def admin_export_products(
    admin: SupabaseUser = Depends(require_admin),
    db=Depends(get_db),
) -> Response:
    products = fetch_products(db, published_only=False)
    logger.info("Products exported", count=len(products), admin_id=admin.id)
    return _xlsx(export_products_workbook(products), f"products-{date.today().isoformat()}.xlsx")


@router.get("/import/template")
def admin_import_template(admin: SupabaseUser = Depends(require_admin)) -> Response:
    return _xlsx(products_template_workbook(), "product-import-template.xlsx")


@router.post("/import")
def admin_import_products(
    file: UploadFile = File(...),
    admin: SupabaseUser = Depends(require_admin),
    db=Depends(get_db),
) -> Dict[str, Any]:
    """Upsert products (by slug) from an .xlsx upload."""
    if not (file.filename or "").lower().endswith(".xlsx"):
        raise http_error(400, "Only .xlsx files are supported")
    try:
        parsed = parse_products_workbook(file.file.read())
    except ExcelImportError as e:
        raise domain_error(e)

    if not parsed.valid:
        raise http_error(400, "No valid rows found", f"{len(parsed.invalid)} invalid rows")

    imported = 0
    for batch in chunk_list(parsed.valid, IMPORT_BATCH_SIZE):
        result = db.table(PRODUCTS_TABLE).upsert(batch, on_conflict="slug").execute()
        imported += len(result.data or [])

    logger.info("Products imported", imported=imported, invalid=len(parsed.invalid), admin_id=admin.id)
    return {"success": True, "imported": imported, **parsed.to_api()}


@router.get("/{product_id}")
def admin_get_product(
    product_id: str,
    admin: SupabaseUser = Depends(require_admin),
    db=Depends(get_db),
) -> Dict[str, Any]:
    product = fetch_product(db, "id", product_id)
    if product is None:
        raise not_found("Product")
    return {"product": product.to_api(), "scores": get_product_scores(product)}


@router.post("", status_code=status.HTTP_201_CREATED)
def admin_create_product(
    product: ProductInput,
    admin: SupabaseUser = Depends(require_admin),
    db=Depends(get_db),
) -> Dict[str, Any]:
    row = product.to_row()
    row["slug"] = product.slug or generate_slug(product.name)
    _ensure_slug_free(db, row["slug"])

    result = db.table(PRODUCTS_TABLE).insert(row).execute()
    if not result.data:
        raise http_error(500, "Failed to create product")
    logger.info("Product created", product_id=result.data[0].get("id"), admin_id=admin.id)
    return {"success": True, "product": result.data[0]}


@router.put("/{product_id}")
def admin_update_product(
    product_id: str,
    product: ProductInput,
    admin: SupabaseUser = Depends(require_admin),
    db=Depends(get_db),
) -> Dict[str, Any]:
    row = product.to_row()
    row["slug"] = product.slug or generate_slug(product.name)
    _ensure_slug_free(db, row["slug"], product_id)
    row["updated_at"] = datetime.now(timezone.utc).isoformat()

    result = db.table(PRODUCTS_TABLE).update(row).eq("id", product_id).execute()
    if not result.data:
        raise not_found("Product")
    logger.info("Product updated", product_id=product_id, admin_id=admin.id)
    return {"success": True, "product": result.data[0]}


@router.delete("/{product_id}")
def admin_delete_product(
    product_id: str,
    admin: SupabaseUser = Depends(require_admin),
    db=Depends(get_db),
) -> Dict[str, Any]:
    """Soft delete: the product goes back to draft."""
    result = (
        db.table(PRODUCTS_TABLE)
        .update({"status": ProductStatus.DRAFT.value, "updated_at": datetime.now(timezone.utc).isoformat()})
        .eq("id", product_id)
        .execute()
    )
    if not result.data:
        raise not_found("Product")
    logger.info("Product unpublished", product_id=product_id, admin_id=admin.id)
    return {"success": True}
