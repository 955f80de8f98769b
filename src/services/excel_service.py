"""
Product import/export as Excel workbooks.

Reads the first sheet of an uploaded .xlsx with pandas (openpyxl engine),
validates each row and converts valid ones to ``products`` table rows.
Export writes the same column layout back so a sheet round-trips through
the admin panel.

Columns:
    SKU, Name, Description, Category, Price, ComparePrice, Stock, Colors,
    Sizes, Material, CareInstructions, Features, ImageURLs, SEOTitle,
    SEODescription, Tags, Collection, Status, IsNew, IsOnSale

List columns (Colors, Sizes, CareInstructions, Features, ImageURLs, Tags)
are comma separated. Colors are names; the hex comes from the color table.
"""

import io
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import pandas as pd

from catalog.models import Product, ProductStatus, normalize_colors
from core.logging import get_logger
from core.utils import generate_slug, split_csv

logger = get_logger(__name__)

PRODUCT_COLUMNS = (
    "SKU", "Name", "Description", "Category", "Price", "ComparePrice", "Stock",
    "Colors", "Sizes", "Material", "CareInstructions", "Features", "ImageURLs",
    "SEOTitle", "SEODescription", "Tags", "Collection", "Status", "IsNew", "IsOnSale",
)

SHEET_NAME = "Products"
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


class ExcelImportError(Exception):
    """The upload could not be read as a product workbook (HTTP 400)."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


@dataclass
class InvalidRow:
    row: int
    errors: List[str]


@dataclass
class ParseResult:
    valid: List[Dict[str, Any]] = field(default_factory=list)
    invalid: List[InvalidRow] = field(default_factory=list)
    total_rows: int = 0

    def to_api(self) -> Dict[str, Any]:
        return {
            "totalRows": self.total_rows,
            "validCount": len(self.valid),
            "invalid": [{"row": r.row, "errors": r.errors} for r in self.invalid],
        }


# ============================================================================
# Cell helpers
# ============================================================================

def _cell(row: pd.Series, column: str) -> str:
    value = row.get(column)
    if value is None or pd.isna(value):
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def _number(text: str) -> Optional[float]:
    """Finite float or None; "nan" and "inf" cells count as missing."""
    try:
        number = float(text)
    except (TypeError, ValueError):
        return None
    if pd.isna(number) or number in (float("inf"), float("-inf")):
        return None
    return number


def _yes(text: str) -> bool:
    return text.upper() == "YES"


# ============================================================================
# Validation and conversion
# ============================================================================

def validate_row(row: pd.Series) -> List[str]:
    """Problems with one sheet row; empty when the row is importable."""
    errors = []
    if not _cell(row, "Name"):
        errors.append("Name is required")
    if not _cell(row, "Category"):
        errors.append("Category is required")

    price = _number(_cell(row, "Price"))
    if price is None or price <= 0:
        errors.append("Valid Price is required")

    compare = _cell(row, "ComparePrice")
    if compare and price is not None:
        compare_value = _number(compare)
        if compare_value is None or compare_value <= price:
            errors.append("ComparePrice must be greater than Price")

    stock = _cell(row, "Stock")
    if stock:
        stock_value = _number(stock)
        if stock_value is None or stock_value < 0:
            errors.append("Stock must be a positive number")

    status = _cell(row, "Status")
    if status and status.lower() not in (ProductStatus.DRAFT.value, ProductStatus.PUBLISHED.value):
        errors.append('Status must be "draft" or "published"')
    return errors


def row_to_product(row: pd.Series) -> Dict[str, Any]:
    """Convert a validated sheet row to a ``products`` table row."""
    name = _cell(row, "Name")
    stock = int(_number(_cell(row, "Stock")) or 0)
    compare = _cell(row, "ComparePrice")
    return {
        "sku": _cell(row, "SKU") or None,
        "name": name,
        "slug": generate_slug(name),
        "description": _cell(row, "Description"),
        "category": generate_slug(_cell(row, "Category")),
        "price": _number(_cell(row, "Price")),
        "compare_at_price": _number(compare) if compare else None,
        "stock": stock,
        "in_stock": stock > 0,
        "colors": normalize_colors(_cell(row, "Colors")),
        "sizes": split_csv(_cell(row, "Sizes")),
        "material": _cell(row, "Material"),
        "care": split_csv(_cell(row, "CareInstructions")),
        "features": split_csv(_cell(row, "Features")),
        "images": split_csv(_cell(row, "ImageURLs")),
        "seo_title": _cell(row, "SEOTitle") or None,
        "seo_description": _cell(row, "SEODescription") or None,
        "tags": split_csv(_cell(row, "Tags")),
        "collection": _cell(row, "Collection"),
        "status": (_cell(row, "Status") or ProductStatus.DRAFT.value).lower(),
        "is_new": _yes(_cell(row, "IsNew")),
        "is_on_sale": _yes(_cell(row, "IsOnSale")),
    }


def parse_products_workbook(content: bytes) -> ParseResult:
    """
    Parse an uploaded workbook.

    Raises ExcelImportError when the bytes are not a readable workbook or
    the sheet has no rows. Row-level problems are reported in
    ``ParseResult.invalid`` (row numbers count the header as row 1).
    """
    try:
        df = pd.read_excel(io.BytesIO(content), sheet_name=0, dtype=object, engine="openpyxl")
    except Exception as e:
        logger.warning("Workbook could not be read", error=str(e))
        raise ExcelImportError(f"Could not read Excel file: {e}") from e

    df = df.dropna(how="all")
    if df.empty:
        raise ExcelImportError("Excel file has no product rows")

    result = ParseResult(total_rows=len(df))
    for position, (_, row) in enumerate(df.iterrows()):
        row_number = position + 2
        errors = validate_row(row)
        if errors:
            result.invalid.append(InvalidRow(row=row_number, errors=errors))
        else:
            result.valid.append(row_to_product(row))

    logger.info(
        "Workbook parsed",
        total_rows=result.total_rows,
        valid=len(result.valid),
        invalid=len(result.invalid),
    )
    return result


# ============================================================================
# Export
# ============================================================================

def product_to_sheet_row(product: Product) -> Dict[str, Any]:
    return {
        "SKU": product.sku or "",
        "Name": product.name,
        "Description": product.description,
        "Category": product.category,
        "Price": product.price,
        "ComparePrice": product.compare_at_price,
        "Stock": product.stock,
        "Colors": ",".join(product.color_names),
        "Sizes": ",".join(product.sizes),
        "Material": product.material,
        "CareInstructions": ",".join(product.care),
        "Features": ",".join(product.features),
        "ImageURLs": ",".join(product.images),
        "SEOTitle": product.seo_title,
        "SEODescription": product.seo_description,
        "Tags": ",".join(product.tags),
        "Collection": product.collection,
        "Status": ProductStatus(product.status or ProductStatus.PUBLISHED).value,
        "IsNew": "YES" if product.is_new else "NO",
        "IsOnSale": "YES" if product.is_on_sale else "NO",
    }


def _workbook_bytes(rows: List[Dict[str, Any]]) -> bytes:
    df = pd.DataFrame(rows, columns=list(PRODUCT_COLUMNS))
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name=SHEET_NAME, index=False)
    return buffer.getvalue()


def export_products_workbook(products: List[Product]) -> bytes:
    """Serialize products to .xlsx bytes in the import column layout."""
    return _workbook_bytes([product_to_sheet_row(p) for p in products])


def products_template_workbook() -> bytes:
    """Empty-ish workbook with one example row for admins to fill in."""
    example = {
        "SKU": "NOW-001",
        "Name": "Organic Cotton Hoodie",
        "Description": "Soft organic cotton hoodie",
        "Category": "hoodies",
        "Price": 899,
        "ComparePrice": 1099,
        "Stock": 25,
        "Colors": "Black,Cream",
        "Sizes": "XS,S,M,L",
        "Material": "Organic Cotton",
        "CareInstructions": "Machine wash cold,Do not bleach",
        "Features": "Kangaroo pocket,Relaxed fit",
        "ImageURLs": "",
        "SEOTitle": "",
        "SEODescription": "",
        "Tags": "hoodie,organic",
        "Collection": "Essentials",
        "Status": "draft",
        "IsNew": "YES",
        "IsOnSale": "NO",
    }
    return _workbook_bytes([example])
