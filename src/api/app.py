"""
FastAPI application factory for the NOWIHT storefront.

Usage:
    # Development
    uvicorn api.app:create_app --factory --reload

    # Production
    uvicorn api.app:app --host 0.0.0.0 --port 8000 --workers 4
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routes import (
    account,
    admin_catalog,
    admin_inventory,
    admin_orders,
    admin_products,
    categories,
    checkout,
    health,
    orders,
    products,
    search,
    size,
    webhooks,
)
from config.settings import get_settings
from core.logging import configure_logging_from_settings, get_logger
from core.middleware import RequestTracingMiddleware

logger = get_logger(__name__)

# Storefront first, then the customer area, the admin panel and provider webhooks
ROUTE_MODULES = (
    health,
    products,
    search,
    categories,
    size,
    checkout,
    orders,
    account,
    admin_products,
    admin_orders,
    admin_catalog,
    admin_inventory,
    webhooks,
)

DESCRIPTION = """
Backend for the NOWIHT women's fashion storefront.

- **Catalog**: filtering, popularity/trending/relevance sorting, keyword search
- **Product pages**: related products and size recommendations
- **Checkout**: shipping zones, tax rules, coupons, order lifecycle
- **Payments**: Stripe PaymentIntents and the signed payment webhook
- **Admin**: products, orders, inventory, categories, metaobjects, Excel import/export
"""


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings = get_settings()
    configure_logging_from_settings(settings)
    logger.info(
        "Starting storefront API",
        environment=settings.environment,
        currency=settings.store_currency,
        email_enabled=settings.email_enabled,
    )
    yield
    logger.info("Shutting down storefront API")


def create_app() -> FastAPI:
    """Build the app: CORS for the storefront origins, request tracing, routers."""
    settings = get_settings()

    app = FastAPI(
        title="NOWIHT Storefront API",
        description=DESCRIPTION,
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
    )

    # Added last = outermost, so tracing sees CORS preflights too
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestTracingMiddleware)

    for module in ROUTE_MODULES:
        app.include_router(module.router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run(
        "api.app:app",
        host=_settings.host,
        port=_settings.port,
        workers=1 if _settings.debug else _settings.workers,
        reload=_settings.debug,
    )
