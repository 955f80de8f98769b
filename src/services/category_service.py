"""
Category persistence and tree building.

Categories live in the ``categories`` table with an ``is_active`` flag and
an ``image_url`` column; the API speaks ``status`` and ``image``. This
service translates between the two.

Usage:
    service = CategoryService(db)
    tree = build_category_tree(service.list())
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Set

from catalog.models import Category, CategoryStatus, category_from_row
from core.logging import LoggerMixin
from core.utils import generate_slug

CATEGORIES_TABLE = "categories"


class CategoryError(Exception):
    """Rejected category change (HTTP 400 unless status_code says otherwise)."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def build_category_tree(categories: List[Category]) -> List[Dict[str, Any]]:
    """
    Nest categories under their parents, siblings ordered by sort_order.

    A category whose parent_id is unknown is treated as a root. So is the
    first member of a parent cycle, so every category appears in the tree.
    """
    ordered = sorted(categories, key=lambda c: (c.sort_order, c.name))
    nodes: Dict[str, Dict[str, Any]] = {c.id: _node(c) for c in ordered if c.id}

    roots: List[Dict[str, Any]] = []
    parent_ids: Dict[str, str] = {}
    for category in ordered:
        node = nodes.get(category.id) or _node(category)
        parent = nodes.get(category.parent_id) if category.parent_id != category.id else None
        if parent is not None:
            parent["children"].append(node)
            parent_ids[category.id] = category.parent_id
        else:
            roots.append(node)

    # Cycles never hang off a root; cut each one at its first member
    reached = _reachable_ids(roots)
    for category in ordered:
        if category.id in reached or category.id not in parent_ids:
            continue
        node = nodes[category.id]
        parent = nodes[parent_ids.pop(category.id)]
        parent["children"] = [child for child in parent["children"] if child is not node]
        roots.append(node)
        reached |= _reachable_ids([node])
    return roots


def _reachable_ids(roots: List[Dict[str, Any]]) -> Set[Optional[str]]:
    seen: Set[Optional[str]] = set()
    stack = list(roots)
    while stack:
        node = stack.pop()
        if node["id"] in seen:
            continue
        seen.add(node["id"])
        stack.extend(node["children"])
    return seen


def _node(category: Category) -> Dict[str, Any]:
    return {**category.model_dump(mode="json", by_alias=True), "children": []}


def _to_row(data: Dict[str, Any]) -> Dict[str, Any]:
    """API fields -> categories columns."""
    row = dict(data)
    if "status" in row:
        status = row.pop("status")
        row["is_active"] = CategoryStatus(status) == CategoryStatus.ACTIVE
    if "image" in row:
        row["image_url"] = row.pop("image")
    for key in ("id", "product_count", "created_at", "updated_at"):
        row.pop(key, None)
    return row


class CategoryService(LoggerMixin):
    """CRUD over the categories table."""

    def __init__(self, db) -> None:
        self._db = db

    def list(self, active_only: bool = False) -> List[Category]:
        query = self._db.table(CATEGORIES_TABLE).select("*").order("sort_order")
        if active_only:
            query = query.eq("is_active", True)
        return [category_from_row(row) for row in query.execute().data or []]

    def get_by_slug(self, slug: str) -> Optional[Category]:
        rows = self._db.table(CATEGORIES_TABLE).select("*").eq("slug", slug).limit(1).execute().data
        return category_from_row(rows[0]) if rows else None

    def get_children(self, parent_id: str) -> List[Category]:
        rows = (
            self._db.table(CATEGORIES_TABLE)
            .select("*")
            .eq("parent_id", parent_id)
            .order("sort_order")
            .execute()
            .data
        )
        return [category_from_row(row) for row in rows or []]

    def create(self, data: Dict[str, Any]) -> Category:
        """Insert a category; the slug is generated from the name when omitted."""
        name = (data.get("name") or "").strip()
        if not name:
            raise CategoryError("Category name is required")
        payload = dict(data, name=name)
        payload["slug"] = payload.get("slug") or generate_slug(name)
        payload.setdefault("status", CategoryStatus.ACTIVE.value)

        result = self._db.table(CATEGORIES_TABLE).insert(_to_row(payload)).execute()
        if not result.data:
            raise CategoryError("Failed to create category", status_code=500)
        category = category_from_row(result.data[0])
        self.logger.info("Category created", category_id=category.id, slug=category.slug)
        return category

    def update(self, category_id: str, data: Dict[str, Any]) -> Category:
        payload = {k: v for k, v in data.items() if v is not None}
        if payload.get("name") and "slug" not in payload:
            payload["slug"] = generate_slug(payload["name"])
        parent_id = payload.get("parent_id")
        if parent_id == category_id:
            raise CategoryError("A category cannot be its own parent")
        if parent_id and category_id in self._ancestor_ids(parent_id):
            raise CategoryError("A category cannot be moved under its own subcategory")
        row = _to_row(payload)
        row["updated_at"] = datetime.now(timezone.utc).isoformat()

        result = self._db.table(CATEGORIES_TABLE).update(row).eq("id", category_id).execute()
        if not result.data:
            raise CategoryError("Category not found", status_code=404)
        return category_from_row(result.data[0])

    def _ancestor_ids(self, category_id: str) -> List[str]:
        """``category_id`` followed by its parent, grandparent, ... up to a root."""
        rows = self._db.table(CATEGORIES_TABLE).select("id, parent_id").execute().data or []
        parents = {row["id"]: row.get("parent_id") for row in rows if row.get("id")}

        chain: List[str] = []
        current: Optional[str] = category_id
        while current and current not in chain:
            chain.append(current)
            current = parents.get(current)
        return chain

    def delete(self, category_id: str) -> None:
        """Hard delete. Refused while the category still has subcategories."""
        if self.get_children(category_id):
            raise CategoryError("Cannot delete category with subcategories")
        self._db.table(CATEGORIES_TABLE).delete().eq("id", category_id).execute()
        self.logger.info("Category deleted", category_id=category_id)

    def reorder(self, ordered_ids: List[str]) -> None:
        """Persist sort_order as each id's position in ``ordered_ids``."""
        for position, category_id in enumerate(ordered_ids):
            self._db.table(CATEGORIES_TABLE).update({"sort_order": position}).eq("id", category_id).execute()
