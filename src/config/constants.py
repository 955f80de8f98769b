"""
Application constants and algorithm configuration.

These are values that don't change based on environment but may need
to be tuned or referenced across the codebase.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Tuple


# =============================================================================
# Ranking Configuration
# =============================================================================

@dataclass(frozen=True)
class PopularityWeights:
    """Linear weights and normalisation divisors for the popularity score."""

    SALES: float = 0.40
    VIEWS: float = 0.25
    WISHLIST: float = 0.20
    RATING: float = 0.15

    # Raw counts are divided by these before capping at 100
    SALES_DIVISOR: float = 10.0
    VIEWS_DIVISOR: float = 50.0
    WISHLIST_DIVISOR: float = 20.0

    # Missing rating is treated as a 4-star product
    DEFAULT_RATING: float = 4.0


@dataclass(frozen=True)
class TrendingWeights:
    """Weights for the trending score (age decay + velocity + flags)."""

    NEW_PRODUCT_WINDOW_DAYS: int = 30
    NEW_PRODUCT: float = 0.30
    SALES_VELOCITY: float = 0.40
    VELOCITY_MULTIPLIER: float = 10.0
    ON_SALE_BOOST: float = 20.0
    BEST_SELLER_BOOST: float = 30.0


@dataclass(frozen=True)
class RelevanceWeights:
    """Weights for the relevance score (stock, discount depth, completeness)."""

    STOCK: float = 0.40
    PRICE: float = 0.30
    COMPLETENESS: float = 0.30
    NEUTRAL_PRICE_SCORE: float = 50.0
    MIN_DESCRIPTION_LENGTH: int = 50


@dataclass(frozen=True)
class RecommendedWeights:
    """Blend of the three scores used by the ``recommended`` sort."""

    POPULARITY: float = 0.35
    TRENDING: float = 0.35
    RELEVANCE: float = 0.30


DEFAULT_POPULARITY_WEIGHTS = PopularityWeights()
DEFAULT_TRENDING_WEIGHTS = TrendingWeights()
DEFAULT_RELEVANCE_WEIGHTS = RelevanceWeights()
DEFAULT_RECOMMENDED_WEIGHTS = RecommendedWeights()


# =============================================================================
# Similarity (Related Products) Configuration
# =============================================================================

@dataclass(frozen=True)
class SimilarityPoints:
    """Additive point values for related-product similarity."""

    SAME_CATEGORY: int = 40
    SIMILAR_PRICE: int = 25
    PER_SHARED_COLOR: int = 5
    MAX_COLORS: int = 15
    PER_SHARED_SIZE: int = 2
    MAX_SIZES: int = 10
    MATERIAL_OVERLAP: int = 5
    SAME_BRAND: int = 3
    SAME_SALE_STATUS: int = 2

    DEFAULT_PRICE_RANGE_PERCENT: float = 20.0
    ALSO_LIKE_PRICE_RANGE_PERCENT: float = 30.0

    DEFAULT_RELATED_LIMIT: int = 8
    DEFAULT_SHELF_LIMIT: int = 4


DEFAULT_SIMILARITY_POINTS = SimilarityPoints()


# =============================================================================
# Catalog
# =============================================================================

# Storefront categories (slug -> display name)
CATALOG_CATEGORIES: Mapping[str, str] = MappingProxyType({
    "polo-shirts": "Polo Shirts",
    "hoodies": "Hoodies",
    "sweatshirts": "Sweatshirts",
    "t-shirts": "T-Shirts",
    "dresses": "Dresses",
    "pajama-sets": "Pajama Sets",
    "tracksuits": "Tracksuits",
})

SIZES: Tuple[str, ...] = ("XS", "S", "M", "L", "XL", "XXL")

BRANDS: Tuple[str, ...] = ("NOWIHT", "NOWIHT BASICS", "NOWIHT ACTIVE", "NOWIHT STUDIO")

MATERIALS: Tuple[str, ...] = (
    "Organic Cotton", "Linen", "Silk", "Recycled Polyester",
    "Modal", "Bamboo", "Wool", "Cashmere",
)

# Color name -> hex, used when imports only carry a color name
COLOR_HEX: Mapping[str, str] = MappingProxyType({
    "black": "#000000",
    "white": "#FFFFFF",
    "gray": "#808080",
    "grey": "#808080",
    "red": "#DC2626",
    "blue": "#3B82F6",
    "green": "#10B981",
    "yellow": "#F59E0B",
    "pink": "#EC4899",
    "purple": "#8B5CF6",
    "orange": "#F97316",
    "brown": "#92400E",
    "beige": "#D4A574",
    "navy": "#1E3A8A",
    "olive": "#6B7280",
    "burgundy": "#800020",
    "champagne": "#F7E7CE",
    "natural": "#F5F5DC",
    "terracotta": "#E07A5F",
    "forest": "#2D5016",
})

DEFAULT_COLOR_HEX = "#000000"

POPULAR_SEARCHES: Tuple[str, ...] = (
    "Tracksuits",
    "Hoodies",
    "T-Shirts",
    "Polo Shirts",
    "Sweatshirts",
    "Pajama Sets",
    "Sports Bras",
    "Leggings",
)


def color_name_to_hex(name: str) -> str:
    """Look up a hex code for a color name, falling back to black."""
    return COLOR_HEX.get((name or "").strip().lower(), DEFAULT_COLOR_HEX)
