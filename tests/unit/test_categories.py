"""
Tests for category persistence and tree building.
"""

import pytest

from catalog.models import category_from_row
from services.category_service import CategoryError, CategoryService, build_category_tree


def cat(id_, name, parent_id=None, sort_order=0):
    return category_from_row({
        "id": id_,
        "name": name,
        "slug": name.lower(),
        "parent_id": parent_id,
        "sort_order": sort_order,
        "is_active": True,
    })


class TestCategoryTree:
    """Tests for build_category_tree."""

    def test_nests_children_in_sort_order(self):
        categories = [
            cat("c1", "Women", sort_order=1),
            cat("c2", "Tops", parent_id="c1", sort_order=2),
            cat("c3", "Hoodies", parent_id="c2"),
            cat("c4", "Dresses", parent_id="c1", sort_order=1),
        ]

        tree = build_category_tree(categories)

        assert [n["name"] for n in tree] == ["Women"]
        assert [n["name"] for n in tree[0]["children"]] == ["Dresses", "Tops"]
        assert tree[0]["children"][1]["children"][0]["name"] == "Hoodies"

    def test_orphans_and_self_parents_are_roots(self):
        categories = [
            cat("c1", "Lost", parent_id="missing"),
            cat("c2", "Loop", parent_id="c2", sort_order=1),
        ]

        assert [n["name"] for n in build_category_tree(categories)] == ["Lost", "Loop"]

    def test_parent_cycle_is_cut_into_a_root(self):
        categories = [
            cat("a", "A", parent_id="b"),
            cat("b", "B", parent_id="a"),
            cat("c", "C", parent_id="a"),
            cat("r", "Root"),
        ]

        tree = build_category_tree(categories)

        assert [n["name"] for n in tree] == ["Root", "A"]
        assert [n["name"] for n in tree[1]["children"]] == ["B", "C"]
        assert tree[1]["children"][0]["children"] == []

    def test_nodes_use_api_field_names(self):
        node = build_category_tree([cat("c1", "Women")])[0]

        assert node["parentId"] is None
        assert node["status"] == "active"
        assert node["children"] == []

    def test_empty(self):
        assert build_category_tree([]) == []


class TestCategoryService:
    """Tests for CategoryService against the mock client."""

    def test_create_defaults(self, mock_supabase_client):
        table = mock_supabase_client.seed("categories", [{"id": "c1", "name": "Pajama Sets", "slug": "pajama-sets"}])

        created = CategoryService(mock_supabase_client).create({"name": " Pajama Sets ", "image": "p.jpg"})

        row = table.insert.call_args[0][0]
        assert row["name"] == "Pajama Sets"
        assert row["slug"] == "pajama-sets"
        assert row["is_active"] is True
        assert row["image_url"] == "p.jpg"
        assert "status" not in row
        assert created.id == "c1"

    def test_create_requires_name(self, mock_supabase_client):
        with pytest.raises(CategoryError, match="name is required"):
            CategoryService(mock_supabase_client).create({"name": "  "})

    def test_update_regenerates_slug(self, mock_supabase_client):
        table = mock_supabase_client.seed("categories", [{"id": "c1", "name": "Loungewear"}])

        CategoryService(mock_supabase_client).update("c1", {"name": "Loungewear", "status": "inactive", "description": None})

        row = table.update.call_args[0][0]
        assert row["slug"] == "loungewear"
        assert row["is_active"] is False
        assert "description" not in row

    def test_update_self_parent(self, mock_supabase_client):
        with pytest.raises(CategoryError, match="own parent"):
            CategoryService(mock_supabase_client).update("c1", {"parent_id": "c1"})

    def test_update_rejects_move_under_descendant(self, mock_supabase_client):
        table = mock_supabase_client.seed("categories", [
            {"id": "a", "name": "A", "parent_id": "b"},
            {"id": "b", "name": "B", "parent_id": None},
        ])

        with pytest.raises(CategoryError, match="own subcategory"):
            CategoryService(mock_supabase_client).update("b", {"parent_id": "a"})

        table.update.assert_not_called()

    def test_update_allows_move_to_unrelated_parent(self, mock_supabase_client):
        table = mock_supabase_client.seed("categories", [
            {"id": "a", "name": "A", "parent_id": None},
            {"id": "b", "name": "B", "parent_id": None},
        ])

        CategoryService(mock_supabase_client).update("b", {"parent_id": "a"})

        assert table.update.call_args[0][0]["parent_id"] == "a"

    def test_update_missing(self, mock_supabase_client):
        with pytest.raises(CategoryError) as exc_info:
            CategoryService(mock_supabase_client).update("nope", {"name": "X"})

        assert exc_info.value.status_code == 404

    def test_delete_refused_with_children(self, mock_supabase_client):
        table = mock_supabase_client.seed("categories", [{"id": "c2", "name": "Hoodies", "parent_id": "c1"}])

        with pytest.raises(CategoryError, match="subcategories"):
            CategoryService(mock_supabase_client).delete("c1")

        table.delete.assert_not_called()

    def test_delete(self, mock_supabase_client):
        table = mock_supabase_client.seed("categories", [])

        CategoryService(mock_supabase_client).delete("c1")

        table.delete.assert_called_once()

    def test_reorder(self, mock_supabase_client):
        table = mock_supabase_client.seed("categories", [])

        CategoryService(mock_supabase_client).reorder(["c3", "c1"])

        assert [c[0][0] for c in table.update.call_args_list] == [{"sort_order": 0}, {"sort_order": 1}]
        table.eq.assert_any_call("id", "c3")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
