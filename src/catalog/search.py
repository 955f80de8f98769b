"""
Keyword search over the in-memory catalog.

Relevance is a weighted sum of fuzzy string similarities (name, category
slug, category display name, description, tags) plus per-word bonuses
for multi-word queries. Results below the relevance threshold are dropped.

Usage::

    from catalog.search import search_products

    results = search_products("polo shirt", products, limit=20)
"""

import re
from dataclasses import dataclass
from typing import List, Mapping

from catalog.models import Product
from config.constants import CATALOG_CATEGORIES

MIN_QUERY_LENGTH = 2
MIN_RELEVANCE = 1.0

NAME_WEIGHT = 10
CATEGORY_WEIGHT = 8
DESCRIPTION_WEIGHT = 5
TAG_MATCH_POINTS = 3
TAG_MATCH_THRESHOLD = 0.5

_NON_ALNUM = re.compile(r"[^a-z0-9\s]")
_SPACES = re.compile(r"\s+")


@dataclass
class SearchResult:
    product: Product
    relevance: float

    def to_api(self) -> dict:
        data = self.product.to_api()
        data["relevance"] = round(self.relevance, 3)
        return data


def normalize_text(text: str) -> str:
    """Lowercase, strip punctuation and collapse whitespace."""
    text = _NON_ALNUM.sub("", (text or "").lower().strip())
    return _SPACES.sub(" ", text)


def text_similarity(a: str, b: str) -> float:
    """
    Similarity in [0, 1] between two strings.

    1.0 exact, 0.8 containment, 0.5-0.8 shared words, otherwise up to 0.3
    from positional character overlap. Empty strings never match.
    """
    s1, s2 = normalize_text(a), normalize_text(b)
    if not s1 or not s2:
        return 0.0

    if s1 == s2:
        return 1.0

    if s1 in s2 or s2 in s1:
        return 0.8

    words1, words2 = s1.split(" "), s2.split(" ")
    matching = [w for w in words1 if any(w in w2 or w2 in w for w2 in words2)]
    if matching:
        return 0.5 + len(matching) / max(len(words1), len(words2)) * 0.3

    overlap = sum(1 for c1, c2 in zip(s1, s2) if c1 == c2)
    return overlap / max(len(s1), len(s2)) * 0.3


def score_product(
    product: Product,
    query: str,
    category_names: Mapping[str, str] = CATALOG_CATEGORIES,
) -> float:
    relevance = text_similarity(product.name, query) * NAME_WEIGHT
    relevance += text_similarity(product.category, query) * CATEGORY_WEIGHT

    category_name = category_names.get(product.category)
    if category_name:
        relevance += text_similarity(category_name, query) * CATEGORY_WEIGHT

    relevance += text_similarity(product.description, query) * DESCRIPTION_WEIGHT

    tag_matches = [t for t in product.tags if text_similarity(t, query) > TAG_MATCH_THRESHOLD]
    relevance += len(tag_matches) * TAG_MATCH_POINTS

    name = normalize_text(product.name)
    category = normalize_text(product.category)
    description = normalize_text(product.description)
    for word in normalize_text(query).split(" "):
        if len(word) <= 2:
            continue
        if word in name:
            relevance += 2
        if word in category:
            relevance += 2
        if word in description:
            relevance += 1

    return relevance


def search_products(
    query: str,
    products: List[Product],
    limit: int = 20,
    category_names: Mapping[str, str] = CATALOG_CATEGORIES,
) -> List[SearchResult]:
    """Products ranked by relevance to ``query``; empty for queries under 2 chars."""
    if not query or len(query.strip()) < MIN_QUERY_LENGTH:
        return []

    results = [
        SearchResult(product=p, relevance=score_product(p, query, category_names))
        for p in products
    ]
    results = [r for r in results if r.relevance > MIN_RELEVANCE]
    results.sort(key=lambda r: r.relevance, reverse=True)
    return results[:limit]


def get_search_suggestions(
    query: str,
    products: List[Product],
    limit: int = 5,
    category_names: Mapping[str, str] = CATALOG_CATEGORIES,
) -> List[str]:
    """Autocomplete: product names, then category names, containing the query."""
    if not query or len(query.strip()) < MIN_QUERY_LENGTH:
        return []

    needle = normalize_text(query)
    suggestions: List[str] = []
    candidates = [p.name for p in products] + list(category_names.values())
    for text in candidates:
        if text and needle in normalize_text(text) and text not in suggestions:
            suggestions.append(text)
            if len(suggestions) >= limit:
                break
    return suggestions
