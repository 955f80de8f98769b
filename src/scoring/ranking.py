"""
Multi-factor product ranking.

Three independent scores in ``[0, 100]`` drive the catalog sort options:

- popularity: sales, views, wishlist adds and rating
- trending: new-product boost, sales velocity, sale and best-seller badges
- relevance: stock, discount depth and listing completeness

``recommended`` blends all three. Every scorer is pure and never raises;
missing numbers were already defaulted by the Product model.

Usage::

    from scoring.ranking import advanced_sort_products

    ordered = advanced_sort_products(products, "recommended")
"""

from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from catalog.models import Product
from config.constants import (
    DEFAULT_POPULARITY_WEIGHTS,
    DEFAULT_RECOMMENDED_WEIGHTS,
    DEFAULT_RELEVANCE_WEIGHTS,
    DEFAULT_TRENDING_WEIGHTS,
    PopularityWeights,
    RelevanceWeights,
    TrendingWeights,
)

MAX_SCORE = 100.0

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _clamp(score: float) -> float:
    return max(0.0, min(MAX_SCORE, score))


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def days_since_created(product: Product, now: Optional[datetime] = None) -> int:
    """Whole days since ``created_at``; a missing date counts as created now."""
    if product.created_at is None:
        return 0
    now = _as_utc(now or datetime.now(timezone.utc))
    delta = now - _as_utc(product.created_at)
    return int(delta.total_seconds() // 86400)


# =============================================================================
# Scores
# =============================================================================

def calculate_popularity_score(
    product: Product,
    weights: PopularityWeights = DEFAULT_POPULARITY_WEIGHTS,
) -> float:
    """Popularity from sales, views, wishlist count and rating."""
    sales = min(product.sold_count / weights.SALES_DIVISOR, MAX_SCORE)
    views = min(product.views / weights.VIEWS_DIVISOR, MAX_SCORE)
    wishlist = min(product.wishlist_count / weights.WISHLIST_DIVISOR, MAX_SCORE)
    # 5-star scale to 0-100; unrated products count as DEFAULT_RATING
    rating = (product.rating or weights.DEFAULT_RATING) * 20

    return _clamp(
        sales * weights.SALES
        + views * weights.VIEWS
        + wishlist * weights.WISHLIST
        + rating * weights.RATING
    )


def calculate_trending_score(
    product: Product,
    now: Optional[datetime] = None,
    weights: TrendingWeights = DEFAULT_TRENDING_WEIGHTS,
) -> float:
    """Trending from age decay, sales velocity and merchandising badges."""
    days = days_since_created(product, now)

    new_product_boost = max(0.0, MAX_SCORE - (days / weights.NEW_PRODUCT_WINDOW_DAYS) * MAX_SCORE)
    velocity = (product.sold_count / days) * weights.VELOCITY_MULTIPLIER if days > 0 else 0.0
    sale_boost = weights.ON_SALE_BOOST if product.is_on_sale else 0.0
    best_seller_boost = weights.BEST_SELLER_BOOST if product.is_best_seller else 0.0

    return _clamp(
        new_product_boost * weights.NEW_PRODUCT
        + velocity * weights.SALES_VELOCITY
        + sale_boost
        + best_seller_boost
    )


def calculate_relevance_score(
    product: Product,
    weights: RelevanceWeights = DEFAULT_RELEVANCE_WEIGHTS,
) -> float:
    """Relevance from stock status, discount depth and listing completeness."""
    stock_score = MAX_SCORE if product.in_stock else 0.0

    compare = product.compare_at_price
    if compare:
        price_score = (compare - product.price) / compare * MAX_SCORE
    else:
        price_score = weights.NEUTRAL_PRICE_SCORE

    completeness = 0
    if len(product.images) > 1:
        completeness += 33
    if len(product.description) > weights.MIN_DESCRIPTION_LENGTH:
        completeness += 33
    if product.features:
        completeness += 34

    return _clamp(
        stock_score * weights.STOCK
        + price_score * weights.PRICE
        + completeness * weights.COMPLETENESS
    )


def calculate_recommended_score(product: Product, now: Optional[datetime] = None) -> float:
    w = DEFAULT_RECOMMENDED_WEIGHTS
    return (
        calculate_popularity_score(product) * w.POPULARITY
        + calculate_trending_score(product, now) * w.TRENDING
        + calculate_relevance_score(product) * w.RELEVANCE
    )


def get_product_scores(product: Product, now: Optional[datetime] = None) -> Dict[str, float]:
    """All three scores for one product (admin/debugging)."""
    return {
        "popularity": round(calculate_popularity_score(product), 2),
        "trending": round(calculate_trending_score(product, now), 2),
        "relevance": round(calculate_relevance_score(product), 2),
    }


# =============================================================================
# Sorting
# =============================================================================

SORT_OPTIONS = (
    "newest",
    "price-asc",
    "price-desc",
    "name-asc",
    "name-desc",
    "popular",
    "trending",
    "recommended",
)

# Labels used by the storefront's sort dropdown
SORT_ALIASES = {
    "price-low-high": "price-asc",
    "price-high-low": "price-desc",
    "name-a-z": "name-asc",
    "name-z-a": "name-desc",
}


def normalize_sort_option(sort_by: Optional[str]) -> Optional[str]:
    if not sort_by:
        return None
    key = sort_by.strip().lower()
    return SORT_ALIASES.get(key, key)


def advanced_sort_products(
    products: List[Product],
    sort_by: Optional[str],
    now: Optional[datetime] = None,
) -> List[Product]:
    """
    Return a new list sorted by ``sort_by``.

    Unknown or empty options keep the input order. All sorts are stable,
    so ties keep their input order too.
    """
    option = normalize_sort_option(sort_by)
    key: Optional[Callable[[Product], object]] = None
    reverse = False

    if option == "price-asc":
        key = lambda p: p.price
    elif option == "price-desc":
        key, reverse = (lambda p: p.price), True
    elif option == "name-asc":
        key = lambda p: p.name.casefold()
    elif option == "name-desc":
        key, reverse = (lambda p: p.name.casefold()), True
    elif option == "newest":
        key, reverse = (lambda p: _as_utc(p.created_at) if p.created_at else _EPOCH), True
    elif option == "popular":
        key, reverse = calculate_popularity_score, True
    elif option == "trending":
        key, reverse = (lambda p: calculate_trending_score(p, now)), True
    elif option == "recommended":
        key, reverse = (lambda p: calculate_recommended_score(p, now)), True

    if key is None:
        return list(products)
    # sorted(reverse=True) preserves the relative order of equal keys
    return sorted(products, key=key, reverse=reverse)
