"""
Supabase client for the storefront.

Products, categories, orders, metaobjects, coupons, addresses and
preferences all live in Supabase; route handlers receive the one shared
client through the ``get_db`` dependency so tests can swap it out.
"""

from functools import lru_cache

from supabase import Client, create_client

from config.settings import get_settings
from core.logging import get_logger

logger = get_logger(__name__)

# Table used by connectivity probes; every deployment has it.
PROBE_TABLE = "products"


class SupabaseClientError(Exception):
    """The Supabase client could not be created from the current settings."""


@lru_cache(maxsize=1)
def get_supabase_client() -> Client:
    """Shared service-role client, created on first use."""
    settings = get_settings()
    try:
        return create_client(settings.supabase_url, settings.supabase_service_key)
    except Exception as e:
        raise SupabaseClientError(f"Failed to create Supabase client: {e}") from e


def probe_database(client: Client) -> str:
    """
    One-row read against the products table.

    Returns "connected" (rows came back) or "empty" (query ran, table is
    empty). Query errors propagate to the caller.
    """
    result = client.table(PROBE_TABLE).select("id").limit(1).execute()
    return "connected" if result.data else "empty"


def get_db() -> Client:
    """
    FastAPI dependency for the Supabase client.

    Usage:
        @router.get("/api/products")
        def list_products(db=Depends(get_db)):
            ...
    """
    return get_supabase_client()
