"""
Services module for admin-side persistence.

Provides category, metaobject and Excel import/export services.
"""

from services.category_service import CategoryError, CategoryService, build_category_tree
from services.excel_service import (
    ExcelImportError,
    export_products_workbook,
    parse_products_workbook,
)
from services.metaobject_service import (
    MetaObjectConflictError,
    MetaObjectError,
    MetaObjectService,
    derive_code,
)

__all__ = [
    "CategoryError",
    "CategoryService",
    "build_category_tree",
    "ExcelImportError",
    "export_products_workbook",
    "parse_products_workbook",
    "MetaObjectConflictError",
    "MetaObjectError",
    "MetaObjectService",
    "derive_code",
]
