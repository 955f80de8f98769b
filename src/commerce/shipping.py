"""
Shipping zones, costs and delivery estimates.

Five zones (Turkey, Europe, North America, Asia, rest of world), each with
a standard and an express method. Standard shipping becomes free above a
per-zone subtotal; express is never free.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from types import MappingProxyType
from typing import FrozenSet, List, Mapping, Optional, Tuple


class ShippingMethod(str, Enum):
    STANDARD = "standard"
    EXPRESS = "express"


@dataclass(frozen=True)
class MethodRate:
    cost: float
    days: Tuple[int, int]
    free_threshold: Optional[float] = None

    @property
    def days_label(self) -> str:
        return f"{self.days[0]}-{self.days[1]}"


@dataclass(frozen=True)
class ShippingZone:
    code: str
    name: str
    standard: MethodRate
    express: MethodRate

    def rate_for(self, method: ShippingMethod) -> MethodRate:
        return self.express if ShippingMethod(method) == ShippingMethod.EXPRESS else self.standard


@dataclass(frozen=True)
class ShippingQuote:
    method: ShippingMethod
    name: str
    cost: float
    is_free: bool
    zone: str
    estimated_days: str

    @property
    def description(self) -> str:
        return f"Delivered in {self.estimated_days} business days"


SHIPPING_ZONES: Mapping[str, ShippingZone] = MappingProxyType({
    "TR": ShippingZone("TR", "Türkiye", MethodRate(25, (2, 4), 500), MethodRate(50, (1, 2))),
    "EU": ShippingZone("EU", "Europe", MethodRate(15, (5, 7), 100), MethodRate(30, (2, 3))),
    "NA": ShippingZone("NA", "North America", MethodRate(20, (7, 10), 150), MethodRate(40, (3, 5))),
    "AS": ShippingZone("AS", "Asia", MethodRate(18, (7, 12), 120), MethodRate(35, (3, 5))),
    "ROW": ShippingZone("ROW", "Rest of World", MethodRate(25, (10, 15), 200), MethodRate(50, (5, 7))),
})

DEFAULT_ZONE = "ROW"

_EUROPE = (
    "Austria", "Belgium", "Bulgaria", "Croatia", "Cyprus", "Czech Republic",
    "Denmark", "Estonia", "Finland", "France", "Germany", "Greece", "Hungary",
    "Ireland", "Italy", "Latvia", "Lithuania", "Luxembourg", "Malta",
    "Netherlands", "Poland", "Portugal", "Romania", "Slovakia", "Slovenia",
    "Spain", "Sweden", "United Kingdom", "Norway", "Switzerland", "Iceland",
)
_NORTH_AMERICA = ("United States", "Canada", "Mexico")
_ASIA = (
    "Japan", "South Korea", "China", "Hong Kong", "Taiwan", "Singapore",
    "Malaysia", "Thailand", "Indonesia", "Philippines", "Vietnam", "India",
    "United Arab Emirates", "Saudi Arabia", "Qatar", "Kuwait", "Israel",
)

COUNTRY_TO_ZONE: Mapping[str, str] = MappingProxyType({
    "Turkey": "TR",
    "Türkiye": "TR",
    **{country: "EU" for country in _EUROPE},
    **{country: "NA" for country in _NORTH_AMERICA},
    **{country: "AS" for country in _ASIA},
})

# Countries we do not ship to (none at present)
RESTRICTED_COUNTRIES: FrozenSet[str] = frozenset()

_METHOD_NAMES = {
    ShippingMethod.STANDARD: "Standard Shipping",
    ShippingMethod.EXPRESS: "Express Shipping",
}

_TR_MONTHS = (
    "Ocak", "Şubat", "Mart", "Nisan", "Mayıs", "Haziran",
    "Temmuz", "Ağustos", "Eylül", "Ekim", "Kasım", "Aralık",
)


def get_shipping_zone(country: str) -> ShippingZone:
    return SHIPPING_ZONES[COUNTRY_TO_ZONE.get(country, DEFAULT_ZONE)]


def calculate_shipping_cost(
    country: str,
    subtotal: float,
    method: ShippingMethod = ShippingMethod.STANDARD,
) -> ShippingQuote:
    method = ShippingMethod(method)
    zone = get_shipping_zone(country)
    rate = zone.rate_for(method)
    is_free = rate.free_threshold is not None and subtotal >= rate.free_threshold
    return ShippingQuote(
        method=method,
        name=_METHOD_NAMES[method],
        cost=0.0 if is_free else float(rate.cost),
        is_free=is_free,
        zone=zone.name,
        estimated_days=rate.days_label,
    )


def get_shipping_options(country: str, subtotal: float) -> List[ShippingQuote]:
    """Standard and express quotes for a destination, standard first."""
    return [calculate_shipping_cost(country, subtotal, m) for m in ShippingMethod]


def calculate_delivery_date(
    country: str,
    method: ShippingMethod = ShippingMethod.STANDARD,
    order_date: Optional[date] = None,
) -> Tuple[date, date, str]:
    """Earliest and latest delivery dates plus a Turkish display string."""
    rate = get_shipping_zone(country).rate_for(method)
    order_date = order_date or date.today()
    earliest = order_date + timedelta(days=rate.days[0])
    latest = order_date + timedelta(days=rate.days[1])
    formatted = (
        f"{earliest.day} {_TR_MONTHS[earliest.month - 1]} - "
        f"{latest.day} {_TR_MONTHS[latest.month - 1]} {latest.year}"
    )
    return earliest, latest, formatted


def can_ship_to_country(country: str) -> bool:
    return country not in RESTRICTED_COUNTRIES


@dataclass(frozen=True)
class ShippingRecommendation:
    recommended_method: ShippingMethod
    message: str
    savings: Optional[float] = None


def get_shipping_recommendations(
    country: str,
    subtotal: float,
    currency: str = "TRY",
) -> ShippingRecommendation:
    """Nudge toward the free-shipping threshold of the standard method."""
    standard = get_shipping_zone(country).standard
    threshold = standard.free_threshold

    if threshold and subtotal < threshold:
        return ShippingRecommendation(
            recommended_method=ShippingMethod.STANDARD,
            savings=float(standard.cost),
            message=f"Ücretsiz kargo için sepete {threshold - subtotal:.2f} {currency} daha ekleyin!",
        )
    if threshold:
        return ShippingRecommendation(
            recommended_method=ShippingMethod.STANDARD,
            message="Tebrikler! Ücretsiz kargo kazandınız!",
        )
    return ShippingRecommendation(
        recommended_method=ShippingMethod.STANDARD,
        message="Standard kargo önerilir",
    )
