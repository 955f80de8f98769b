"""
Route modules for the API.

Each module exports a FastAPI APIRouter with endpoints
for a specific domain/feature.
"""

from api.routes import account
from api.routes import admin_catalog
from api.routes import admin_orders
from api.routes import admin_products
from api.routes import categories
from api.routes import checkout
from api.routes import health
from api.routes import orders
from api.routes import products
from api.routes import search
from api.routes import size

__all__ = [
    "account",
    "admin_catalog",
    "admin_orders",
    "admin_products",
    "categories",
    "checkout",
    "health",
    "orders",
    "products",
    "search",
    "size",
]
