"""
Tests for the public catalog endpoints: products, search, categories,
size advisor and health.
"""

import pytest


class TestHealth:
    """Tests for the health endpoints."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_live_and_ready(self, client):
        assert client.get("/live").status_code == 200
        assert client.get("/ready").status_code == 200

    def test_request_id_header(self, client):
        response = client.get("/health", headers={"X-Request-ID": "req-123"})

        assert response.headers.get("X-Request-ID") == "req-123"

    def test_detailed(self, client, mock_supabase_client):
        mock_supabase_client.seed("products", [{"id": "prod-001"}])

        data = client.get("/health/detailed").json()

        assert data["status"] == "healthy"
        assert data["checks"]["database"] == {"status": "connected", "error": None}

    def test_database_down(self, client, mock_supabase_client):
        mock_supabase_client.seed("products").execute.side_effect = RuntimeError("connection refused")

        assert client.get("/health/detailed").json()["status"] == "degraded"
        assert client.get("/ready").json() == {"status": "not_ready", "reason": "database_unreachable"}


class TestProductList:
    """Tests for GET /api/products."""

    @pytest.fixture(autouse=True)
    def seed_products(self, mock_supabase_client, sample_products):
        self.products = mock_supabase_client.seed("products", sample_products)

    def test_lists_published(self, client):
        response = client.get("/api/products")

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 6
        assert data["activeFilters"] == 0
        self.products.eq.assert_any_call("status", "published")

    def test_sort_price_low_high(self, client):
        response = client.get("/api/products?sort=price-low-high")

        prices = [p["price"] for p in response.json()["products"]]
        assert prices == sorted(prices)

    def test_price_filter(self, client):
        response = client.get("/api/products?min_price=900&max_price=1000&sort=price-desc")

        data = response.json()
        assert [p["id"] for p in data["products"]] == ["prod-001", "prod-006", "prod-002"]
        assert data["activeFilters"] == 1

    def test_bad_price_range(self, client):
        response = client.get("/api/products?min_price=100&max_price=10")

        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "Invalid filters"

    def test_in_stock_and_limit(self, client):
        response = client.get("/api/products?in_stock=true&limit=2")

        data = response.json()
        assert data["total"] == 5
        assert len(data["products"]) == 2

    def test_category_query(self, client):
        client.get("/api/products?category=hoodies")

        self.products.eq.assert_any_call("category", "hoodies")


class TestProductPage:
    """Tests for GET /api/products/{slug}."""

    def test_product_with_shelves(self, client, mock_supabase_client, sample_products):
        mock_supabase_client.seed("products", sample_products)

        response = client.get("/api/products/organic-cotton-hoodie")

        assert response.status_code == 200
        data = response.json()
        assert data["product"]["id"] == "prod-001"
        assert "prod-001" not in [p["id"] for p in data["related"]]
        assert [p["id"] for p in data["sameCategory"]] == ["prod-002"]
        assert [p["id"] for p in data["youMayAlsoLike"]] == ["prod-003", "prod-004"]

    def test_filter_options(self, client, mock_supabase_client, sample_products):
        mock_supabase_client.seed("products", sample_products)

        response = client.get("/api/products/filters")

        assert response.status_code == 200
        data = response.json()
        assert data["sizes"][:3] == ["XS", "S", "M"]
        assert data["brands"][0] == "NOWIHT"
        assert data["materials"][0] == "Organic Cotton"
        assert data["priceRange"] == {"min": 800.0, "max": 3000.0}

    def test_missing_product(self, client):
        response = client.get("/api/products/nope")

        assert response.status_code == 404
        assert response.json()["detail"]["error"] == "Product not found"


class TestSearchRoutes:
    """Tests for /api/search."""

    def test_short_query_skips_database(self, client, mock_supabase_client):
        response = client.get("/api/search?q=h")

        assert response.json() == {"query": "h", "results": [], "total": 0}
        mock_supabase_client.table.assert_not_called()

    def test_search(self, client, mock_supabase_client, sample_products):
        mock_supabase_client.seed("products", sample_products)

        response = client.get("/api/search?q=hoodie&limit=3")

        data = response.json()
        assert data["total"] == 3
        assert {r["id"] for r in data["results"]} == {"prod-001", "prod-002", "prod-006"}

    def test_suggestions(self, client, mock_supabase_client, sample_products):
        mock_supabase_client.seed("products", sample_products)

        response = client.get("/api/search/suggestions?q=pajama")

        assert response.json()["suggestions"] == ["Linen Pajama Set", "Silk Pajama Set", "Pajama Sets"]
        assert "popularSearches" not in response.json()

    def test_suggestions_fall_back_to_popular_searches(self, client, mock_supabase_client, sample_products):
        mock_supabase_client.seed("products", sample_products)

        response = client.get("/api/search/suggestions?q=zzzz")

        data = response.json()
        assert data["suggestions"] == []
        assert data["popularSearches"][:2] == ["Tracksuits", "Hoodies"]

    def test_empty_query_gets_popular_searches(self, client, mock_supabase_client):
        data = client.get("/api/search/suggestions").json()

        assert "Leggings" in data["popularSearches"]
        mock_supabase_client.table.assert_not_called()


class TestCategoryRoutes:
    """Tests for /api/categories."""

    @pytest.fixture
    def category_rows(self):
        return [
            {"id": "c1", "name": "Tops", "slug": "tops", "is_active": True, "sort_order": 1},
            {"id": "c2", "name": "Hoodies", "slug": "hoodies", "parent_id": "c1", "is_active": True, "sort_order": 0},
        ]

    def test_flat_list(self, client, mock_supabase_client, category_rows):
        categories = mock_supabase_client.seed("categories", category_rows)

        response = client.get("/api/categories")

        assert [c["slug"] for c in response.json()["categories"]] == ["tops", "hoodies"]
        categories.eq.assert_any_call("is_active", True)

    def test_tree(self, client, mock_supabase_client, category_rows):
        mock_supabase_client.seed("categories", category_rows)

        tree = client.get("/api/categories?tree=true").json()["categories"]

        assert len(tree) == 1
        assert tree[0]["slug"] == "tops"
        assert tree[0]["children"][0]["slug"] == "hoodies"

    def test_tree_keeps_cycle_members(self, client, mock_supabase_client):
        mock_supabase_client.seed("categories", [
            {"id": "a", "name": "A", "slug": "a", "parent_id": "b", "is_active": True},
            {"id": "b", "name": "B", "slug": "b", "parent_id": "a", "is_active": True},
            {"id": "r", "name": "Root", "slug": "root", "is_active": True},
        ])

        response = client.get("/api/categories?tree=true")

        assert response.status_code == 200
        tree = response.json()["categories"]
        assert [n["name"] for n in tree] == ["Root", "A"]
        assert tree[1]["children"][0]["name"] == "B"

    def test_category_page(self, client, mock_supabase_client, sample_products):
        mock_supabase_client.seed("categories", [{"id": "c2", "name": "Hoodies", "slug": "hoodies", "is_active": True}])
        mock_supabase_client.seed("products", sample_products)

        response = client.get("/api/categories/hoodies?sort=price-asc")

        assert response.status_code == 200
        data = response.json()
        assert data["category"]["slug"] == "hoodies"
        assert data["total"] == 6

    def test_inactive_category_hidden(self, client, mock_supabase_client):
        mock_supabase_client.seed("categories", [{"id": "c9", "name": "Old", "slug": "old", "is_active": False}])

        assert client.get("/api/categories/old").status_code == 404


class TestSizeRoutes:
    """Tests for /api/size."""

    def test_recommend(self, client):
        response = client.post("/api/size/recommend", json={
            "height": 165,
            "weight": 60,
            "bodyType": "average",
            "fitPreference": "regular",
            "category": "hoodies",
        })

        assert response.status_code == 200
        data = response.json()
        assert data["recommended_size"] == "XS"
        assert data["confidence"] == 63
        assert data["alternatives"] == ["S"]

    def test_recommend_validates_ranges(self, client):
        response = client.post("/api/size/recommend", json={"height": 90, "weight": 60})

        assert response.status_code == 422

    def test_recommend_rejects_unknown_body_type(self, client):
        response = client.post("/api/size/recommend", json={"height": 165, "weight": 60, "bodyType": "pear"})

        assert response.status_code == 422

    def test_chart(self, client):
        data = client.get("/api/size/chart/hoodies").json()

        assert data["unit"] == "in"
        assert data["sizes"][0] == {"size": "XS", "bust": [34, 36], "waist": [26, 28], "hips": [36, 38]}


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
