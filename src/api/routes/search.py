"""Keyword search over published products."""

from typing import Any, Dict

from fastapi import APIRouter, Depends, Query

from catalog.repository import fetch_products
from catalog.search import get_search_suggestions, search_products
from config.constants import POPULAR_SEARCHES
from config.database import get_db
from core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/search", tags=["Search"])


@router.get("")
def search(
    q: str = Query("", description="Search text (2+ characters)"),
    limit: int = Query(20, ge=1, le=100),
    db=Depends(get_db),
) -> Dict[str, Any]:
    if len(q.strip()) < 2:
        return {"query": q, "results": [], "total": 0}

    results = search_products(q, fetch_products(db), limit=limit)
    logger.info("Search", query=q, results=len(results))
    return {
        "query": q,
        "results": [r.to_api() for r in results],
        "total": len(results),
    }


@router.get("/suggestions")
def suggestions(
    q: str = Query(""),
    limit: int = Query(5, ge=1, le=20),
    db=Depends(get_db),
) -> Dict[str, Any]:
    """Suggestions for the search box; popular searches when there are none."""
    found = []
    if len(q.strip()) >= 2:
        found = get_search_suggestions(q, fetch_products(db), limit=limit)
    response: Dict[str, Any] = {"query": q, "suggestions": found}
    if not found:
        response["popularSearches"] = list(POPULAR_SEARCHES)
    return response
