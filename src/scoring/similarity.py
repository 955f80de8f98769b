"""
Related-product similarity.

Additive point scoring between a base product and a candidate. The price
band is computed around the *base* price only, so the score is not
symmetric: ``similarity(a, b)`` and ``similarity(b, a)`` differ whenever
one price falls inside the other's band but not the reverse.
"""

from dataclasses import dataclass
from typing import List

from catalog.models import Product
from config.constants import DEFAULT_SIMILARITY_POINTS, SimilarityPoints


@dataclass(frozen=True)
class SimilarityOptions:
    """Toggles for the related-products query."""
    include_same_category: bool = True
    include_similar_price: bool = True
    price_range_percent: float = DEFAULT_SIMILARITY_POINTS.DEFAULT_PRICE_RANGE_PERCENT


DEFAULT_SIMILARITY_OPTIONS = SimilarityOptions()


def _in_price_band(base_price: float, price: float, percent: float) -> bool:
    low = base_price * (1 - percent / 100)
    high = base_price * (1 + percent / 100)
    return low <= price <= high


def calculate_similarity_score(
    product: Product,
    candidate: Product,
    options: SimilarityOptions = DEFAULT_SIMILARITY_OPTIONS,
    points: SimilarityPoints = DEFAULT_SIMILARITY_POINTS,
) -> int:
    """Score how closely ``candidate`` resembles ``product``."""
    score = 0

    if options.include_same_category and product.category == candidate.category:
        score += points.SAME_CATEGORY

    if options.include_similar_price:
        percent = options.price_range_percent or points.DEFAULT_PRICE_RANGE_PERCENT
        if _in_price_band(product.price, candidate.price, percent):
            score += points.SIMILAR_PRICE

    base_colors = {name.lower() for name in product.color_names}
    shared_colors = [name for name in candidate.color_names if name.lower() in base_colors]
    if shared_colors:
        score += min(points.MAX_COLORS, len(shared_colors) * points.PER_SHARED_COLOR)

    base_sizes = set(product.sizes)
    shared_sizes = [size for size in candidate.sizes if size in base_sizes]
    if shared_sizes:
        score += min(points.MAX_SIZES, len(shared_sizes) * points.PER_SHARED_SIZE)

    if product.material and candidate.material:
        a, b = product.material.lower(), candidate.material.lower()
        if a in b or b in a:
            score += points.MATERIAL_OVERLAP

    if product.brand and product.brand == candidate.brand:
        score += points.SAME_BRAND

    if product.is_on_sale == candidate.is_on_sale:
        score += points.SAME_SALE_STATUS

    return score


def _candidates(product: Product, catalog: List[Product]) -> List[Product]:
    return [p for p in catalog if p is not None and p.id and p.id != product.id]


def get_related_products(
    product: Product,
    catalog: List[Product],
    limit: int = DEFAULT_SIMILARITY_POINTS.DEFAULT_RELATED_LIMIT,
    options: SimilarityOptions = DEFAULT_SIMILARITY_OPTIONS,
) -> List[Product]:
    """
    Top ``limit`` products by similarity to ``product``.

    The base product and rows without an id are excluded. Out-of-stock
    candidates are kept. Ties keep catalog order.
    """
    if product is None or not catalog:
        return []

    scored = [
        (calculate_similarity_score(product, candidate, options), candidate)
        for candidate in _candidates(product, catalog)
    ]
    scored.sort(key=lambda pair: pair[0], reverse=True)
    return [candidate for _, candidate in scored[:limit]]


def get_related_by_category(
    product: Product,
    catalog: List[Product],
    limit: int = DEFAULT_SIMILARITY_POINTS.DEFAULT_SHELF_LIMIT,
) -> List[Product]:
    """In-stock products from the same category, in catalog order."""
    if product is None or not catalog:
        return []
    return [
        p for p in _candidates(product, catalog)
        if p.category == product.category and p.in_stock
    ][:limit]


def get_you_may_also_like(
    product: Product,
    catalog: List[Product],
    limit: int = DEFAULT_SIMILARITY_POINTS.DEFAULT_SHELF_LIMIT,
) -> List[Product]:
    """In-stock products from other categories within ±30% of the base price."""
    if product is None or not catalog:
        return []
    percent = DEFAULT_SIMILARITY_POINTS.ALSO_LIKE_PRICE_RANGE_PERCENT
    return [
        p for p in _candidates(product, catalog)
        if p.category != product.category
        and p.in_stock
        and _in_price_band(product.price, p.price, percent)
    ][:limit]
