"""
Shared Scoring Module.

Pure scoring used by the catalog, product detail and size advisor routes.

Quick start::

    from scoring import (
        UserMeasurements,
        advanced_sort_products,
        get_related_products,
        recommend_size,
    )

    ordered = advanced_sort_products(products, "trending")
    related = get_related_products(product, products, limit=8)
    rec = recommend_size(UserMeasurements(height=170, weight=62), "dresses")
"""

from scoring.ranking import (
    advanced_sort_products,
    calculate_popularity_score,
    calculate_relevance_score,
    calculate_trending_score,
    get_product_scores,
)
from scoring.similarity import (
    SimilarityOptions,
    calculate_similarity_score,
    get_related_by_category,
    get_related_products,
    get_you_may_also_like,
)
from scoring.size_advisor import (
    SizeRecommendation,
    UserMeasurements,
    get_size_chart,
    recommend_size,
)

__all__ = [
    "advanced_sort_products",
    "calculate_popularity_score",
    "calculate_relevance_score",
    "calculate_trending_score",
    "get_product_scores",
    "SimilarityOptions",
    "calculate_similarity_score",
    "get_related_by_category",
    "get_related_products",
    "get_you_may_also_like",
    "SizeRecommendation",
    "UserMeasurements",
    "get_size_chart",
    "recommend_size",
]
