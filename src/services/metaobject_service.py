"""
MetaObject management: admin-defined colors, sizes, materials and fabrics.

``(type, code)`` is unique. A missing code is derived from the name
(uppercase, alphanumerics only, first 5 characters), so "Navy Blue"
becomes ``NAVYB``.

Bulk import accepts CSV or .xlsx with the columns
``Type, Code, Name, Value, Active, SortOrder`` and upserts each valid
row by type plus code or name.

Usage:
    service = MetaObjectService(db)
    service.create({"type": "color", "name": "Navy", "value": "#1E3A8A"})
    summary = service.bulk_import(content, "colors.csv")
"""

import io
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from catalog.models import MetaObject, MetaObjectType
from core.logging import LoggerMixin

METAOBJECTS_TABLE = "metaobjects"
DEFAULT_SORT_ORDER = 999
CODE_LENGTH = 5
MAX_REPORTED_ERRORS = 10

CSV_HEADERS = ("Type", "Code", "Name", "Value", "Active", "SortOrder")

_NON_CODE = re.compile(r"[^A-Z0-9]")
_HEX_COLOR = re.compile(r"^#[0-9A-Fa-f]{6}$")

TEMPLATE_ROWS = (
    ("color", "BLK", "Black", "#000000", "TRUE", "1"),
    ("color", "WHT", "White", "#FFFFFF", "TRUE", "2"),
    ("color", "GRY", "Gray", "#808080", "TRUE", "3"),
    ("size", "XS", "Extra Small", "", "TRUE", "1"),
    ("size", "SM", "Small", "", "TRUE", "2"),
    ("size", "MD", "Medium", "", "TRUE", "3"),
    ("material", "COT", "Cotton", "", "TRUE", "1"),
    ("fabric", "FLC", "Fleece", "", "TRUE", "1"),
)


class MetaObjectError(Exception):
    """Rejected metaobject change."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class MetaObjectConflictError(MetaObjectError):
    """The (type, code) pair is already taken (HTTP 409)."""

    def __init__(self, code: str, type_: str):
        super().__init__(f'Code "{code}" already exists for {type_}', status_code=409)


def derive_code(name: str) -> str:
    return _NON_CODE.sub("", (name or "").upper())[:CODE_LENGTH]


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class BulkImportResult:
    total: int = 0
    inserted: int = 0
    updated: int = 0
    errors: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)

    def to_api(self) -> Dict[str, Any]:
        return {
            "success": True,
            "summary": {
                "total": self.total,
                "inserted": self.inserted,
                "updated": self.updated,
                "skipped": len(self.skipped),
            },
            "errors": self.errors[:MAX_REPORTED_ERRORS] or None,
            "skipped": self.skipped[:MAX_REPORTED_ERRORS] or None,
        }


# ============================================================================
# Row parsing
# ============================================================================

def read_rows(content: bytes, filename: str = "") -> List[Dict[str, str]]:
    """Read a CSV or .xlsx upload into dicts keyed by lowercase header."""
    buffer = io.BytesIO(content)
    try:
        if filename.lower().endswith((".xlsx", ".xls")):
            df = pd.read_excel(buffer, sheet_name=0, dtype=str, engine="openpyxl")
        else:
            df = pd.read_csv(buffer, dtype=str, skipinitialspace=True)
    except Exception as e:
        raise MetaObjectError(f"Could not read file: {e}") from e

    df = df.fillna("")
    df.columns = [str(c).strip().strip('"').lower() for c in df.columns]
    return [
        {key: str(value).strip() for key, value in row.items()}
        for _, row in df.iterrows()
        if any(str(value).strip() for value in row.values)
    ]


def validate_row(row: Dict[str, str]) -> Tuple[Optional[Dict[str, Any]], Optional[str]]:
    """Return ``(data, None)`` for an importable row or ``(None, error)``."""
    type_ = row.get("type", "").lower()
    name = row.get("name", "")
    if not type_:
        return None, "Type is required"
    if not name:
        return None, "Name is required"

    valid_types = {t.value for t in MetaObjectType}
    if type_ not in valid_types:
        return None, f"Invalid type: {row.get('type')}"

    value = row.get("value", "")
    if type_ == MetaObjectType.COLOR.value and value and not _HEX_COLOR.match(value):
        return None, f"Invalid hex color: {value}"

    active = row.get("active", "")
    try:
        sort_order = int(float(row.get("sortorder") or row.get("sort_order") or DEFAULT_SORT_ORDER))
    except ValueError:
        sort_order = DEFAULT_SORT_ORDER

    return {
        "type": type_,
        "code": row.get("code", "").upper() or derive_code(name),
        "name": name,
        "value": value or None,
        "is_active": active.upper() == "TRUE" or active == "1",
        "sort_order": sort_order or DEFAULT_SORT_ORDER,
    }, None


def to_csv(objects: List[MetaObject]) -> str:
    df = pd.DataFrame(
        [
            (o.type, o.code, o.name, o.value or "", "TRUE" if o.is_active else "FALSE", o.sort_order)
            for o in objects
        ],
        columns=list(CSV_HEADERS),
    )
    return df.to_csv(index=False)


def template_csv() -> str:
    return pd.DataFrame(list(TEMPLATE_ROWS), columns=list(CSV_HEADERS)).to_csv(index=False)


# ============================================================================
# Service
# ============================================================================

class MetaObjectService(LoggerMixin):
    """CRUD and bulk import over the metaobjects table."""

    def __init__(self, db) -> None:
        self._db = db

    def list(self, type_: Optional[str] = None, active_only: bool = False) -> List[MetaObject]:
        query = self._db.table(METAOBJECTS_TABLE).select("*")
        if type_:
            query = query.eq("type", type_)
        if active_only:
            query = query.eq("is_active", True)
        rows = query.order("type").order("sort_order").execute().data or []
        return [MetaObject.model_validate(row) for row in rows]

    def list_grouped(self, type_: Optional[str] = None) -> Dict[str, Any]:
        """Objects grouped by type plus per-type and active counts."""
        objects = self.list(type_)
        grouped: Dict[str, List[Dict[str, Any]]] = {t.value: [] for t in MetaObjectType}
        for obj in objects:
            grouped.setdefault(obj.type, []).append(obj.model_dump(mode="json", by_alias=True))
        stats = {
            "total": len(objects),
            "active": sum(1 for o in objects if o.is_active),
            "byType": {t: len(items) for t, items in grouped.items()},
        }
        data = [o.model_dump(mode="json", by_alias=True) for o in objects]
        return {"data": data, "grouped": grouped, "stats": stats}

    def _code_taken(self, type_: str, code: str, exclude_id: Optional[str] = None) -> bool:
        query = self._db.table(METAOBJECTS_TABLE).select("id").eq("type", type_).eq("code", code)
        if exclude_id:
            query = query.neq("id", exclude_id)
        return bool(query.limit(1).execute().data)

    def create(self, data: Dict[str, Any]) -> MetaObject:
        obj = MetaObject.model_validate({k: v for k, v in data.items() if v is not None})
        obj.code = (obj.code or "").strip().upper() or derive_code(obj.name)
        if self._code_taken(obj.type, obj.code):
            raise MetaObjectConflictError(obj.code, obj.type)

        row = obj.model_dump(mode="json", exclude={"id"})
        result = self._db.table(METAOBJECTS_TABLE).insert(row).execute()
        if not result.data:
            raise MetaObjectError("Failed to create metaobject", status_code=500)
        created = MetaObject.model_validate(result.data[0])
        self.logger.info("MetaObject created", type=created.type, code=created.code)
        return created

    def update(self, object_id: str, data: Dict[str, Any]) -> MetaObject:
        """Partial update; the code is re-derived when the name changes without one."""
        existing = self._db.table(METAOBJECTS_TABLE).select("*").eq("id", object_id).limit(1).execute().data
        if not existing:
            raise MetaObjectError("MetaObject not found", status_code=404)
        current = MetaObject.model_validate(existing[0])

        changes = {k: v for k, v in data.items() if v is not None and k != "id"}
        if "code" in changes:
            changes["code"] = str(changes["code"]).strip().upper() or derive_code(changes.get("name", current.name))
        elif "name" in changes and not current.code:
            changes["code"] = derive_code(changes["name"])

        type_ = changes.get("type", current.type)
        code = changes.get("code", current.code)
        if (type_, code) != (current.type, current.code) and self._code_taken(type_, code, exclude_id=object_id):
            raise MetaObjectConflictError(code, type_)

        changes["updated_at"] = _now_iso()
        result = self._db.table(METAOBJECTS_TABLE).update(changes).eq("id", object_id).execute()
        rows = result.data or []
        return MetaObject.model_validate(rows[0]) if rows else current.model_copy(update=changes)

    def delete(self, object_id: str) -> None:
        self._db.table(METAOBJECTS_TABLE).delete().eq("id", object_id).execute()
        self.logger.info("MetaObject deleted", object_id=object_id)

    def bulk_import(self, content: bytes, filename: str = "") -> BulkImportResult:
        """
        Validate and upsert every row of an upload.

        Raises MetaObjectError when nothing in the file is importable.
        """
        rows = read_rows(content, filename)
        if not rows:
            raise MetaObjectError("Empty file")

        valid: List[Dict[str, Any]] = []
        result = BulkImportResult()
        for index, row in enumerate(rows):
            data, error = validate_row(row)
            if error:
                result.errors.append(f"Line {index + 2}: {error}")
            else:
                valid.append(data)

        if not valid:
            raise MetaObjectError("No valid rows found")
        result.total = len(valid)

        existing = self._db.table(METAOBJECTS_TABLE).select("id, type, code, name").execute().data or []
        by_code = {(r["type"], r.get("code")): r["id"] for r in existing}
        by_name = {(r["type"], r.get("name")): r["id"] for r in existing}

        for data in valid:
            key_type = data["type"]
            match_id = by_code.get((key_type, data["code"])) or by_name.get((key_type, data["name"]))
            try:
                if match_id:
                    changes = {k: v for k, v in data.items() if k != "type"}
                    changes["updated_at"] = _now_iso()
                    self._db.table(METAOBJECTS_TABLE).update(changes).eq("id", match_id).execute()
                    result.updated += 1
                else:
                    inserted = self._db.table(METAOBJECTS_TABLE).insert(data).execute().data or []
                    if inserted:
                        by_code[(key_type, data["code"])] = inserted[0].get("id")
                    result.inserted += 1
            except Exception as e:
                self.logger.warning("Bulk row skipped", type=key_type, name=data["name"], error=str(e))
                result.skipped.append(f"{key_type}/{data['name']}: {e}")

        self.logger.info(
            "MetaObject bulk import finished",
            total=result.total,
            inserted=result.inserted,
            updated=result.updated,
            skipped=len(result.skipped),
        )
        return result
