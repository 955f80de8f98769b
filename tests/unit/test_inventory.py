"""
Tests for stock levels: status thresholds, adjustments and the admin
inventory endpoints.
"""

from unittest.mock import MagicMock

import pytest

from catalog.inventory import (
    DEFAULT_ALERT_LEVEL,
    InventoryError,
    InventoryService,
    InventoryStatus,
    clamp_stock,
    inventory_status,
)


@pytest.fixture
def stock_rows():
    return [
        {"id": "p1", "sku": "NOW-001", "name": "Tee", "stock": 0, "alert_level": 5, "price": 100},
        {"id": "p2", "sku": "NOW-002", "name": "Hoodie", "stock": 3, "alert_level": None, "price": 900},
        {"id": "p3", "sku": "NOW-003", "name": "Dress", "stock": 8, "alert_level": 10, "price": 1500},
        {"id": "p4", "sku": "NOW-004", "name": "Polo", "stock": 40, "alert_level": 5, "price": 500},
    ]


class TestInventoryStatus:
    """Tests for inventory_status thresholds."""

    @pytest.mark.parametrize("stock,alert_level,expected", [
        (0, 5, InventoryStatus.OUT_OF_STOCK),
        (1, 5, InventoryStatus.LOW_STOCK),
        (5, 5, InventoryStatus.LOW_STOCK),
        (6, 5, InventoryStatus.IN_STOCK),
        (0, 0, InventoryStatus.OUT_OF_STOCK),
        (1, 0, InventoryStatus.IN_STOCK),
    ])
    def test_thresholds(self, stock, alert_level, expected):
        assert inventory_status(stock, alert_level) == expected

    def test_default_alert_level(self):
        assert inventory_status(DEFAULT_ALERT_LEVEL) == InventoryStatus.LOW_STOCK
        assert inventory_status(DEFAULT_ALERT_LEVEL + 1) == InventoryStatus.IN_STOCK

    def test_clamp(self):
        assert clamp_stock(-4) == 0
        assert clamp_stock(7) == 7


class TestInventoryService:
    """Tests for InventoryService."""

    def test_list_with_summary(self, mock_supabase_client, stock_rows):
        products = mock_supabase_client.seed("products", stock_rows)

        report = InventoryService(mock_supabase_client).list_inventory()

        assert [i["inventory_status"] for i in report["inventory"]] == [
            "out_of_stock", "low_stock", "low_stock", "in_stock",
        ]
        assert report["summary"] == {
            "total": 4,
            "in_stock": 1,
            "low_stock": 2,
            "out_of_stock": 1,
            "total_value": 34700.0,
        }
        products.order.assert_called_once_with("stock")

    def test_low_stock_only(self, mock_supabase_client, stock_rows):
        mock_supabase_client.seed("products", stock_rows)

        report = InventoryService(mock_supabase_client).list_inventory(low_stock_only=True)

        assert [i["id"] for i in report["inventory"]] == ["p1", "p2", "p3"]

    def test_adjust_clamps_at_zero(self, mock_supabase_client):
        products = mock_supabase_client.seed("products", [{"id": "p2", "sku": "NOW-002", "stock": 3}])

        InventoryService(mock_supabase_client).adjust_stock("p2", -10, reason="Recount")

        written = products.update.call_args[0][0]
        assert written["stock"] == 0
        assert written["in_stock"] is False
        products.eq.assert_called_with("id", "p2")

    def test_adjust_adds(self, mock_supabase_client):
        products = mock_supabase_client.seed("products")
        products.execute.side_effect = [
            MagicMock(data=[{"id": "p2", "stock": 3}]),
            MagicMock(data=[{"id": "p2", "stock": 8}]),
        ]

        product = InventoryService(mock_supabase_client).adjust_stock("p2", 5)

        assert product["stock"] == 8
        assert products.update.call_args[0][0]["stock"] == 8

    def test_adjust_missing_product(self, mock_supabase_client):
        mock_supabase_client.seed("products", [])

        with pytest.raises(InventoryError) as exc:
            InventoryService(mock_supabase_client).adjust_stock("nope", 1)

        assert exc.value.status_code == 404

    def test_bulk_update(self, mock_supabase_client):
        products = mock_supabase_client.seed("products")
        products.execute.side_effect = [
            MagicMock(data=[{"sku": "NOW-001"}]),
            MagicMock(data=[]),
        ]

        result = InventoryService(mock_supabase_client).bulk_update([
            {"sku": "NOW-001", "stock": -2},
            {"sku": "NOW-404", "stock": 4},
            {"sku": "NOW-005", "stock": "many"},
            {"stock": 1},
        ])

        assert result.success == ["NOW-001"]
        assert result.failed == [
            {"sku": "NOW-404", "error": "Product not found"},
            {"sku": "NOW-005", "error": "Stock must be a number"},
            {"sku": "", "error": "SKU is required"},
        ]
        assert products.update.call_args_list[0][0][0]["stock"] == 0


class TestAdminInventoryRoutes:
    """Tests for /api/admin/inventory."""

    def test_requires_admin(self, client):
        assert client.get("/api/admin/inventory").status_code == 401

    def test_low_stock_query(self, admin_client, mock_supabase_client, stock_rows):
        mock_supabase_client.seed("products", stock_rows)

        data = admin_client.get("/api/admin/inventory?lowStock=true").json()

        assert data["summary"]["total"] == 3
        assert data["summary"]["in_stock"] == 0

    def test_adjust(self, admin_client, mock_supabase_client):
        products = mock_supabase_client.seed("products")
        products.execute.side_effect = [
            MagicMock(data=[{"id": "p1", "stock": 2}]),
            MagicMock(data=[{"id": "p1", "stock": 0}]),
        ]

        response = admin_client.post(
            "/api/admin/inventory",
            json={"productId": "p1", "adjustment": -5, "reason": "Damaged"},
        )

        assert response.status_code == 200
        assert response.json()["message"] == "Stock updated to 0"

    def test_adjust_requires_fields(self, admin_client):
        response = admin_client.post("/api/admin/inventory", json={"productId": "p1"})

        assert response.status_code == 422

    def test_adjust_missing_product(self, admin_client, mock_supabase_client):
        mock_supabase_client.seed("products", [])

        response = admin_client.post("/api/admin/inventory", json={"productId": "p9", "adjustment": 1})

        assert response.status_code == 404
        assert response.json()["detail"]["error"] == "Product not found"

    def test_bulk(self, admin_client, mock_supabase_client):
        mock_supabase_client.seed("products", [{"sku": "NOW-001"}])

        response = admin_client.put("/api/admin/inventory", json={"updates": [{"sku": "NOW-001", "stock": 12}]})

        assert response.json() == {"success": ["NOW-001"], "failed": []}

    def test_bulk_requires_list(self, admin_client):
        response = admin_client.put("/api/admin/inventory", json={"updates": "NOW-001"})

        assert response.status_code == 422


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
