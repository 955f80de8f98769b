"""
Size charts by garment group (inches, inclusive ranges).

Each band is (size, bust, waist, hips) with (low, high) ranges, ordered
from smallest to largest.
"""

from types import MappingProxyType
from typing import Mapping, NamedTuple, Tuple


class SizeBand(NamedTuple):
    size: str
    bust: Tuple[int, int]
    waist: Tuple[int, int]
    hips: Tuple[int, int]


# fmt: off
_STANDARD: Tuple[SizeBand, ...] = (
    SizeBand("XS", (32, 34), (24, 26), (34, 36)),
    SizeBand("S",  (34, 36), (26, 28), (36, 38)),
    SizeBand("M",  (36, 38), (28, 30), (38, 40)),
    SizeBand("L",  (38, 40), (30, 32), (40, 42)),
    SizeBand("XL", (40, 42), (32, 34), (42, 44)),
)

# Hoodies and sweatshirts run one band roomier
_OUTERWEAR: Tuple[SizeBand, ...] = (
    SizeBand("XS", (34, 36), (26, 28), (36, 38)),
    SizeBand("S",  (36, 38), (28, 30), (38, 40)),
    SizeBand("M",  (38, 40), (30, 32), (40, 42)),
    SizeBand("L",  (40, 42), (32, 34), (42, 44)),
    SizeBand("XL", (42, 44), (34, 36), (44, 46)),
)
# fmt: on

SIZE_CHARTS: Mapping[str, Tuple[SizeBand, ...]] = MappingProxyType({
    "tops": _STANDARD,
    "outerwear": _OUTERWEAR,
    "dresses": _STANDARD,
    "bottoms": _STANDARD,
})

# Catalog category slug -> chart group
CATEGORY_CHART_GROUP: Mapping[str, str] = MappingProxyType({
    "t-shirts": "tops",
    "polo-shirts": "tops",
    "pajama-sets": "tops",
    "hoodies": "outerwear",
    "sweatshirts": "outerwear",
    "dresses": "dresses",
    "tracksuits": "bottoms",
})

DEFAULT_CHART_GROUP = "tops"

# Index of M, used when no band matches at all
DEFAULT_BAND_INDEX = 2
