"""Admin metaobject and category management."""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from api.errors import domain_error
from catalog.models import CategoryStatus, MetaObjectType
from config.database import get_db
from core.auth import SupabaseUser, require_admin
from core.logging import get_logger
from services.category_service import CategoryError, CategoryService, build_category_tree
from services.metaobject_service import MetaObjectError, MetaObjectService, template_csv, to_csv

logger = get_logger(__name__)

router = APIRouter(prefix="/api/admin", tags=["Admin"])


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class MetaObjectInput(_CamelModel):
    type: MetaObjectType
    code: Optional[str] = None
    name: str = Field(..., min_length=1)
    value: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    is_active: bool = True
    sort_order: int = 999


class MetaObjectUpdate(_CamelModel):
    id: str
    type: Optional[MetaObjectType] = None
    code: Optional[str] = None
    name: Optional[str] = None
    value: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
    is_active: Optional[bool] = None
    sort_order: Optional[int] = None


class CategoryInput(_CamelModel):
    name: str = Field(..., min_length=1)
    slug: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    parent_id: Optional[str] = None
    status: CategoryStatus = CategoryStatus.ACTIVE
    sort_order: int = 0
    seo_title: Optional[str] = None
    seo_description: Optional[str] = None


class CategoryUpdate(_CamelModel):
    id: str
    name: Optional[str] = None
    slug: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    parent_id: Optional[str] = None
    status: Optional[CategoryStatus] = None
    sort_order: Optional[int] = None
    seo_title: Optional[str] = None
    seo_description: Optional[str] = None


class CategoryReorder(BaseModel):
    ids: List[str] = Field(..., min_length=1)


# =============================================================================
# MetaObjects
# =============================================================================

@router.get("/metaobjects")
def admin_list_metaobjects(
    type_filter: Optional[MetaObjectType] = Query(None, alias="type"),
    admin: SupabaseUser = Depends(require_admin),
    db=Depends(get_db),
) -> Dict[str, Any]:
    return MetaObjectService(db).list_grouped(type_filter.value if type_filter else None)


@router.post("/metaobjects", status_code=status.HTTP_201_CREATED)
def admin_create_metaobject(
    body: MetaObjectInput,
    admin: SupabaseUser = Depends(require_admin),
    db=Depends(get_db),
) -> Dict[str, Any]:
    try:
        created = MetaObjectService(db).create(body.model_dump(mode="json"))
    except MetaObjectError as e:
        raise domain_error(e)
    return {"success": True, "data": created.model_dump(mode="json", by_alias=True)}


@router.put("/metaobjects")
def admin_update_metaobject(
    body: MetaObjectUpdate,
    admin: SupabaseUser = Depends(require_admin),
    db=Depends(get_db),
) -> Dict[str, Any]:
    changes = body.model_dump(mode="json", exclude={"id"}, exclude_none=True)
    try:
        updated = MetaObjectService(db).update(body.id, changes)
    except MetaObjectError as e:
        raise domain_error(e)
    return {"success": True, "data": updated.model_dump(mode="json", by_alias=True)}


@router.delete("/metaobjects")
def admin_delete_metaobject(
    id: str = Query(..., min_length=1),
    admin: SupabaseUser = Depends(require_admin),
    db=Depends(get_db),
) -> Dict[str, Any]:
    MetaObjectService(db).delete(id)
    return {"success": True}


@router.get("/metaobjects/bulk", response_class=PlainTextResponse)
def admin_metaobjects_csv(
    action: str = Query("template", pattern="^(template|export)$"),
    admin: SupabaseUser = Depends(require_admin),
    db=Depends(get_db),
) -> PlainTextResponse:
    """CSV template, or every metaobject in the import layout."""
    if action == "export":
        content, filename = to_csv(MetaObjectService(db).list()), "metaobjects-export.csv"
    else:
        content, filename = template_csv(), "metaobjects-template.csv"
    return PlainTextResponse(
        content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/metaobjects/bulk")
def admin_metaobjects_bulk(
    file: UploadFile = File(...),
    admin: SupabaseUser = Depends(require_admin),
    db=Depends(get_db),
) -> Dict[str, Any]:
    try:
        result = MetaObjectService(db).bulk_import(file.file.read(), file.filename or "")
    except MetaObjectError as e:
        raise domain_error(e)
    return result.to_api()


# =============================================================================
# Categories
# =============================================================================

@router.get("/categories")
def admin_list_categories(
    tree: bool = Query(False),
    admin: SupabaseUser = Depends(require_admin),
    db=Depends(get_db),
) -> Dict[str, Any]:
    categories = CategoryService(db).list()
    if tree:
        return {"categories": build_category_tree(categories)}
    return {"categories": [c.model_dump(mode="json", by_alias=True) for c in categories]}


@router.post("/categories", status_code=status.HTTP_201_CREATED)
def admin_create_category(
    body: CategoryInput,
    admin: SupabaseUser = Depends(require_admin),
    db=Depends(get_db),
) -> Dict[str, Any]:
    try:
        category = CategoryService(db).create(body.model_dump(mode="json"))
    except CategoryError as e:
        raise domain_error(e)
    return {"success": True, "category": category.model_dump(mode="json", by_alias=True)}


@router.put("/categories")
def admin_update_category(
    body: CategoryUpdate,
    admin: SupabaseUser = Depends(require_admin),
    db=Depends(get_db),
) -> Dict[str, Any]:
    changes = body.model_dump(mode="json", exclude={"id"}, exclude_none=True)
    try:
        category = CategoryService(db).update(body.id, changes)
    except CategoryError as e:
        raise domain_error(e)
    return {"success": True, "category": category.model_dump(mode="json", by_alias=True)}


@router.put("/categories/reorder")
def admin_reorder_categories(
    body: CategoryReorder,
    admin: SupabaseUser = Depends(require_admin),
    db=Depends(get_db),
) -> Dict[str, Any]:
    CategoryService(db).reorder(body.ids)
    return {"success": True}


@router.delete("/categories")
def admin_delete_category(
    id: str = Query(..., min_length=1),
    admin: SupabaseUser = Depends(require_admin),
    db=Depends(get_db),
) -> Dict[str, Any]:
    try:
        CategoryService(db).delete(id)
    except CategoryError as e:
        raise domain_error(e)
    logger.info("Category deleted by admin", category_id=id, admin_id=admin.id)
    return {"success": True}
