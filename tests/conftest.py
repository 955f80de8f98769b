"""
Pytest configuration and shared fixtures for the storefront API tests.
"""
import os
import sys
import time
from typing import Generator, List, Optional
from unittest.mock import MagicMock

import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(__file__)), "src"))

# Load environment variables
from dotenv import load_dotenv
load_dotenv(os.path.join(os.path.dirname(os.path.dirname(__file__)), ".env"))

# Unit tests never reach Supabase; settings only need placeholder values
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("RESEND_API_KEY", "")


# ============================================================================
# Fixtures: Test Data Factories
# ============================================================================

@pytest.fixture
def sample_product_dict() -> dict:
    """Sample product row as returned by Supabase."""
    return {
        "id": "prod-001",
        "name": "Organic Cotton Hoodie",
        "slug": "organic-cotton-hoodie",
        "description": "Soft organic cotton hoodie with a relaxed fit",
        "category": "hoodies",
        "price": 1000.0,
        "compare_at_price": 1200.0,
        "stock": 12,
        "in_stock": True,
        "colors": [{"name": "Black", "hex": "#000000"}, {"name": "Cream", "hex": "#FFFDD0"}],
        "sizes": ["S", "M", "L"],
        "material": "Organic Cotton",
        "brand": "NOWIHT",
        "collection": "Essentials",
        "tags": ["hoodie", "organic", "cozy"],
        "images": ["https://cdn.example.com/hoodie-1.jpg"],
        "status": "published",
        "sold_count": 40,
        "views": 900,
        "wishlist_count": 25,
        "rating": 4.6,
        "is_on_sale": True,
        "is_best_seller": False,
        "is_new": False,
        "created_at": "2025-01-01T00:00:00+00:00",
    }


@pytest.fixture
def sample_products(sample_product_dict: dict) -> List[dict]:
    """A small catalog across three categories and price points."""
    rows = []
    specs = [
        ("prod-002", "Cotton Zip Hoodie", "hoodies", 900.0, True),
        ("prod-003", "Relaxed Sweatpants", "sweatpants", 800.0, True),
        ("prod-004", "Linen Pajama Set", "pajama-sets", 1100.0, True),
        ("prod-005", "Silk Pajama Set", "pajama-sets", 3000.0, True),
        ("prod-006", "Fleece Hoodie", "hoodies", 950.0, False),
    ]
    rows.append(dict(sample_product_dict))
    for i, (pid, name, category, price, in_stock) in enumerate(specs):
        row = dict(sample_product_dict)
        row.update({
            "id": pid,
            "name": name,
            "slug": name.lower().replace(" ", "-"),
            "category": category,
            "price": price,
            "in_stock": in_stock,
            "stock": 5 if in_stock else 0,
            "sold_count": 10 * i,
            "tags": [category],
        })
        rows.append(row)
    return rows


@pytest.fixture
def sample_order() -> dict:
    """A pending order row."""
    return {
        "id": "order-001",
        "order_number": "NOW-2025-01-15-AB12CD",
        "customer_email": "ayse@example.com",
        "customer_name": "Ayşe Yılmaz",
        "status": "pending",
        "payment_status": "paid",
        "subtotal": 1000.0,
        "shipping_cost": 0.0,
        "tax": 0.0,
        "discount": 0.0,
        "total": 1000.0,
        "created_at": "2025-01-15T10:00:00+00:00",
        "updated_at": "2025-01-15T10:00:00+00:00",
    }


# ============================================================================
# Fixtures: Mock Services
# ============================================================================

QUERY_METHODS = (
    "select", "eq", "neq", "or_", "ilike", "in_", "order", "limit", "range",
    "insert", "update", "upsert", "delete",
)


def make_query(data: Optional[list] = None) -> MagicMock:
    """
    Chainable stand-in for a postgrest query builder.

    Every builder method returns the same mock, and ``execute().data`` is
    ``data``, so assertions can inspect ``query.update.call_args`` etc.
    """
    query = MagicMock()
    for method in QUERY_METHODS:
        getattr(query, method).return_value = query
    query.execute.return_value = MagicMock(data=data if data is not None else [])
    return query


@pytest.fixture
def mock_supabase_client() -> MagicMock:
    """
    Mock Supabase client with one query mock per table.

    Seed a table with ``client.seed("orders", [...])``; the returned query
    mock (also at ``client.tables["orders"]``) records the calls made on it.
    """
    tables = {}

    def table(name: str) -> MagicMock:
        if name not in tables:
            tables[name] = make_query()
        return tables[name]

    def seed(name: str, data: Optional[list] = None) -> MagicMock:
        tables[name] = make_query(data)
        return tables[name]

    client = MagicMock()
    client.table.side_effect = table
    client.tables = tables
    client.seed = seed
    return client


@pytest.fixture
def email_notifier() -> MagicMock:
    """Notifier double; every send reports success."""
    from orders.notifications import EmailNotifier

    notifier = MagicMock(spec=EmailNotifier)
    for method in (
        "send_order_confirmation",
        "send_shipping_notification",
        "send_order_cancellation",
        "send_return_confirmation",
        "send_payment_failed",
    ):
        getattr(notifier, method).return_value = True
    return notifier


# ============================================================================
# Fixtures: FastAPI Test Client
# ============================================================================

@pytest.fixture
def admin_user():
    from core.auth import SupabaseUser
    return SupabaseUser(
        id="admin-001",
        email="admin@nowiht.com",
        app_metadata={"role": "admin"},
    )


@pytest.fixture
def app(mock_supabase_client, email_notifier):
    """FastAPI application wired to the mock database and notifier."""
    from api.app import create_app
    from config.database import get_db
    from orders.notifications import get_email_notifier

    application = create_app()
    application.dependency_overrides[get_db] = lambda: mock_supabase_client
    application.dependency_overrides[get_email_notifier] = lambda: email_notifier
    return application


@pytest.fixture
def client(app) -> Generator:
    from fastapi.testclient import TestClient

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin_client(app, admin_user) -> Generator:
    """Client whose requests pass require_admin."""
    from fastapi.testclient import TestClient
    from core.auth import require_admin

    app.dependency_overrides[require_admin] = lambda: admin_user
    with TestClient(app) as test_client:
        yield test_client


# ============================================================================
# Markers auto-use
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "supabase: marks tests that require Supabase")


# ============================================================================
# JWT Token Generation
# ============================================================================

def generate_test_jwt(
    user_id: str = "test-user-001",
    exp_hours: int = 24,
    email: Optional[str] = None,
    app_metadata: Optional[dict] = None,
) -> str:
    """
    Generate a Supabase-style HS256 access token.

    Args:
        user_id: The user ID to include in the token
        exp_hours: Hours until token expires (negative for an expired token)
        email: Email claim (defaults to <user_id>@test.com)
        app_metadata: Server-side metadata, e.g. {"role": "admin"}

    Returns:
        JWT token string
    """
    import jwt

    now = int(time.time())
    payload = {
        "sub": user_id,
        "aud": "authenticated",
        "role": "authenticated",
        "email": email or f"{user_id}@test.com",
        "aal": "aal1",
        "exp": now + (exp_hours * 3600),
        "iat": now,
        "is_anonymous": False,
        "app_metadata": app_metadata or {},
    }

    return jwt.encode(payload, os.environ["SUPABASE_JWT_SECRET"], algorithm="HS256")


@pytest.fixture
def test_jwt_token() -> str:
    """Fixture providing a valid test JWT token."""
    return generate_test_jwt()


@pytest.fixture
def auth_headers(test_jwt_token: str) -> dict:
    """Fixture providing auth headers with Bearer token."""
    return {"Authorization": f"Bearer {test_jwt_token}"}


@pytest.fixture
def make_auth_headers():
    """Factory for auth headers; takes the same arguments as generate_test_jwt."""
    def _make(**kwargs) -> dict:
        return {"Authorization": f"Bearer {generate_test_jwt(**kwargs)}"}
    return _make


# ============================================================================
# Skip conditions
# ============================================================================

def pytest_collection_modifyitems(config, items):
    """Auto-skip Supabase tests if no real project is configured."""
    skip_supabase = pytest.mark.skip(reason="Supabase tests require credentials")

    supabase_url = os.getenv("SUPABASE_URL", "")

    for item in items:
        if "supabase" in item.keywords and "test.supabase.co" in supabase_url:
            item.add_marker(skip_supabase)
