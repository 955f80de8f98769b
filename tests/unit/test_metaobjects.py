"""
Tests for metaobject validation, CRUD and bulk import.
"""

from unittest.mock import MagicMock

import pytest

from services.metaobject_service import (
    CSV_HEADERS,
    MetaObjectConflictError,
    MetaObjectError,
    MetaObjectService,
    derive_code,
    read_rows,
    template_csv,
    to_csv,
    validate_row,
)
from catalog.models import MetaObject

CSV_UPLOAD = (
    b"Type,Code,Name,Value,Active,SortOrder\n"
    b"color,,Navy,#1E3A8A,TRUE,1\n"
    b",,,,,\n"
    b"size,SM,Small,,1,2\n"
    b"pattern,,Stripes,,TRUE,3\n"
)


class TestDeriveCode:
    def test_examples(self):
        assert derive_code("Navy Blue") == "NAVYB"
        assert derive_code("x-1") == "X1"
        assert derive_code("") == ""


class TestValidateRow:
    """Tests for validate_row."""

    def test_valid_color(self):
        data, error = validate_row({"type": "Color", "name": "Navy", "value": "#1e3a8a", "active": "true", "sortorder": "2"})

        assert error is None
        assert data == {
            "type": "color",
            "code": "NAVY",
            "name": "Navy",
            "value": "#1e3a8a",
            "is_active": True,
            "sort_order": 2,
        }

    def test_explicit_code_uppercased(self):
        data, _ = validate_row({"type": "size", "code": "sm", "name": "Small"})

        assert data["code"] == "SM"
        assert data["value"] is None
        assert data["is_active"] is False

    @pytest.mark.parametrize("row,message", [
        ({"name": "Navy"}, "Type is required"),
        ({"type": "color"}, "Name is required"),
        ({"type": "pattern", "name": "Stripes"}, "Invalid type: pattern"),
        ({"type": "color", "name": "Blue", "value": "blue"}, "Invalid hex color: blue"),
    ])
    def test_errors(self, row, message):
        data, error = validate_row(row)

        assert data is None
        assert error == message

    def test_bad_or_zero_sort_order_defaults(self):
        assert validate_row({"type": "size", "name": "M", "sortorder": "abc"})[0]["sort_order"] == 999
        assert validate_row({"type": "size", "name": "M", "sortorder": "0"})[0]["sort_order"] == 999


class TestReadRows:
    def test_csv_skips_blank_rows_and_lowercases_headers(self):
        rows = read_rows(CSV_UPLOAD, "colors.csv")

        assert len(rows) == 3
        assert rows[0]["name"] == "Navy"
        assert rows[0]["code"] == ""
        assert rows[1]["sortorder"] == "2"

    def test_unreadable_xlsx(self):
        with pytest.raises(MetaObjectError, match="Could not read file"):
            read_rows(b"not a workbook", "colors.xlsx")


class TestCsvExport:
    def test_template_header(self):
        assert template_csv().splitlines()[0] == ",".join(CSV_HEADERS)

    def test_to_csv(self):
        obj = MetaObject(type="color", code="BLK", name="Black", value="#000000", is_active=False, sort_order=1)

        lines = to_csv([obj]).splitlines()

        assert lines[1] == "color,BLK,Black,#000000,FALSE,1"


class TestMetaObjectService:
    """Tests for MetaObjectService against the mock client."""

    def test_create_derives_code(self, mock_supabase_client):
        table = mock_supabase_client.seed("metaobjects")
        table.execute.side_effect = [
            MagicMock(data=[]),
            MagicMock(data=[{"id": "m1", "type": "color", "code": "NAVYB", "name": "Navy Blue"}]),
        ]

        created = MetaObjectService(mock_supabase_client).create({"type": "color", "name": "Navy Blue", "code": None})

        assert created.code == "NAVYB"
        row = table.insert.call_args[0][0]
        assert row["code"] == "NAVYB"
        assert "id" not in row

    def test_create_conflict(self, mock_supabase_client):
        table = mock_supabase_client.seed("metaobjects", [{"id": "m1"}])

        with pytest.raises(MetaObjectConflictError) as exc_info:
            MetaObjectService(mock_supabase_client).create({"type": "color", "name": "Navy"})

        assert exc_info.value.status_code == 409
        assert exc_info.value.message == 'Code "NAVY" already exists for color'
        table.insert.assert_not_called()

    def test_update_missing(self, mock_supabase_client):
        with pytest.raises(MetaObjectError) as exc_info:
            MetaObjectService(mock_supabase_client).update("nope", {"name": "X"})

        assert exc_info.value.status_code == 404

    def test_update_code_conflict(self, mock_supabase_client):
        table = mock_supabase_client.seed("metaobjects")
        table.execute.side_effect = [
            MagicMock(data=[{"id": "m1", "type": "color", "code": "NAVY", "name": "Navy"}]),
            MagicMock(data=[{"id": "m2"}]),
        ]

        with pytest.raises(MetaObjectConflictError):
            MetaObjectService(mock_supabase_client).update("m1", {"code": "blk"})

        table.neq.assert_called_once_with("id", "m1")
        table.update.assert_not_called()

    def test_list_grouped(self, mock_supabase_client):
        mock_supabase_client.seed("metaobjects", [
            {"id": "m1", "type": "color", "code": "BLK", "name": "Black", "is_active": True},
            {"id": "m2", "type": "color", "code": "WHT", "name": "White", "is_active": False},
            {"id": "m3", "type": "size", "code": "SM", "name": "Small", "is_active": True},
        ])

        result = MetaObjectService(mock_supabase_client).list_grouped()

        assert result["stats"] == {
            "total": 3,
            "active": 2,
            "byType": {"color": 2, "size": 1, "material": 0, "fabric": 0},
        }
        assert result["grouped"]["color"][0]["code"] == "BLK"
        assert result["data"][2]["isActive"] is True


class TestBulkImport:
    """Tests for MetaObjectService.bulk_import."""

    def test_updates_existing_and_inserts_new(self, mock_supabase_client):
        table = mock_supabase_client.seed("metaobjects", [
            {"id": "m1", "type": "color", "code": "NAVY", "name": "Navy"},
        ])

        result = MetaObjectService(mock_supabase_client).bulk_import(CSV_UPLOAD, "upload.csv")

        assert result.to_api() == {
            "success": True,
            "summary": {"total": 2, "inserted": 1, "updated": 1, "skipped": 0},
            "errors": ["Line 4: Invalid type: pattern"],
            "skipped": None,
        }
        table.eq.assert_any_call("id", "m1")
        assert table.insert.call_args[0][0]["code"] == "SM"

    def test_failed_row_is_skipped(self, mock_supabase_client):
        table = mock_supabase_client.seed("metaobjects", [])
        table.insert.side_effect = RuntimeError("duplicate key")

        result = MetaObjectService(mock_supabase_client).bulk_import(CSV_UPLOAD, "upload.csv")

        summary = result.to_api()
        assert summary["summary"]["skipped"] == 2
        assert summary["skipped"][0] == "color/Navy: duplicate key"

    def test_empty_file(self, mock_supabase_client):
        with pytest.raises(MetaObjectError, match="Empty file"):
            MetaObjectService(mock_supabase_client).bulk_import(b"Type,Code,Name\n", "empty.csv")

    def test_no_valid_rows(self, mock_supabase_client):
        content = b"Type,Name\npattern,Stripes\n"

        with pytest.raises(MetaObjectError, match="No valid rows found"):
            MetaObjectService(mock_supabase_client).bulk_import(content, "bad.csv")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
