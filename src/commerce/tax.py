"""
Tax tables and calculations by shipping country.

VAT-style taxes (Turkey KDV, EU/UK VAT, GST, consumption tax) are already
included in shelf prices; US sales tax and Canadian HST are added on top.
Countries missing from the table use the DEFAULT entry.
"""

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Pattern


@dataclass(frozen=True)
class TaxRate:
    rate: float
    name: str
    included: bool


@dataclass(frozen=True)
class TaxResult:
    amount: float
    rate: float
    name: str
    included: bool


@dataclass(frozen=True)
class TaxBreakdown:
    subtotal_excluding_tax: float
    tax_amount: float
    subtotal_including_tax: float
    tax_name: str
    tax_rate: float
    tax_included: bool


def _vat(rate: float) -> TaxRate:
    return TaxRate(rate, "VAT", True)


DEFAULT_TAX_KEY = "DEFAULT"

TAX_RATES: Mapping[str, TaxRate] = MappingProxyType({
    "Turkey": TaxRate(0.20, "KDV", True),
    "Türkiye": TaxRate(0.20, "KDV", True),

    # European Union
    "Austria": _vat(0.20),
    "Belgium": _vat(0.21),
    "Bulgaria": _vat(0.20),
    "Croatia": _vat(0.25),
    "Cyprus": _vat(0.19),
    "Czech Republic": _vat(0.21),
    "Denmark": _vat(0.25),
    "Estonia": _vat(0.20),
    "Finland": _vat(0.24),
    "France": _vat(0.20),
    "Germany": _vat(0.19),
    "Greece": _vat(0.24),
    "Hungary": _vat(0.27),
    "Ireland": _vat(0.23),
    "Italy": _vat(0.22),
    "Latvia": _vat(0.21),
    "Lithuania": _vat(0.21),
    "Luxembourg": _vat(0.17),
    "Malta": _vat(0.18),
    "Netherlands": _vat(0.21),
    "Poland": _vat(0.23),
    "Portugal": _vat(0.23),
    "Romania": _vat(0.19),
    "Slovakia": _vat(0.20),
    "Slovenia": _vat(0.22),
    "Spain": _vat(0.21),
    "Sweden": _vat(0.25),

    # Rest of Europe
    "United Kingdom": _vat(0.20),
    "Switzerland": _vat(0.077),
    "Norway": _vat(0.25),

    # Varies by state/province; averages
    "United States": TaxRate(0.08, "Sales Tax", False),
    "Canada": TaxRate(0.13, "HST", False),

    "Australia": TaxRate(0.10, "GST", True),
    "Japan": TaxRate(0.10, "Consumption Tax", True),

    DEFAULT_TAX_KEY: TaxRate(0.08, "Tax", False),
})

# Simplified VAT number formats (country prefix included)
VAT_NUMBER_FORMATS: Mapping[str, Pattern] = MappingProxyType({
    country: re.compile(pattern) for country, pattern in {
        "Austria": r"^ATU\d{8}$",
        "Belgium": r"^BE0\d{9}$",
        "Bulgaria": r"^BG\d{9,10}$",
        "Croatia": r"^HR\d{11}$",
        "Cyprus": r"^CY\d{8}[A-Z]$",
        "Czech Republic": r"^CZ\d{8,10}$",
        "Denmark": r"^DK\d{8}$",
        "Estonia": r"^EE\d{9}$",
        "Finland": r"^FI\d{8}$",
        "France": r"^FR[A-Z0-9]{2}\d{9}$",
        "Germany": r"^DE\d{9}$",
        "Greece": r"^EL\d{9}$",
        "Hungary": r"^HU\d{8}$",
        "Ireland": r"^IE\d[A-Z0-9]\d{5}[A-Z]$",
        "Italy": r"^IT\d{11}$",
        "Latvia": r"^LV\d{11}$",
        "Lithuania": r"^LT\d{9,12}$",
        "Luxembourg": r"^LU\d{8}$",
        "Malta": r"^MT\d{8}$",
        "Netherlands": r"^NL\d{9}B\d{2}$",
        "Poland": r"^PL\d{10}$",
        "Portugal": r"^PT\d{9}$",
        "Romania": r"^RO\d{2,10}$",
        "Slovakia": r"^SK\d{10}$",
        "Slovenia": r"^SI\d{8}$",
        "Spain": r"^ES[A-Z0-9]\d{7}[A-Z0-9]$",
        "Sweden": r"^SE\d{12}$",
        "United Kingdom": r"^GB\d{9}$|^GB\d{12}$|^GBGD\d{3}$|^GBHA\d{3}$",
    }.items()
})


def get_tax_rate(country: str) -> TaxRate:
    return TAX_RATES.get(country, TAX_RATES[DEFAULT_TAX_KEY])


def calculate_tax(subtotal: float, country: str, include_in_price: bool = False) -> TaxResult:
    """
    Tax to add to an order.

    When the country's tax is included in shelf prices and the caller
    says prices already carry it, nothing is added.
    """
    info = get_tax_rate(country)
    if info.included and include_in_price:
        return TaxResult(amount=0.0, rate=info.rate, name=info.name, included=True)
    return TaxResult(amount=subtotal * info.rate, rate=info.rate, name=info.name, included=False)


def price_excluding_tax(price_including_tax: float, country: str) -> TaxResult:
    """Net price for a tax-inclusive price; ``amount`` is the net price."""
    info = get_tax_rate(country)
    if not info.included:
        return TaxResult(amount=price_including_tax, rate=info.rate, name=info.name, included=False)
    return TaxResult(amount=price_including_tax / (1 + info.rate), rate=info.rate, name=info.name, included=True)


def price_including_tax(price_excluding: float, country: str) -> TaxResult:
    """Gross price for a net price; ``amount`` is the gross price."""
    info = get_tax_rate(country)
    return TaxResult(amount=price_excluding * (1 + info.rate), rate=info.rate, name=info.name, included=info.included)


def get_tax_breakdown(subtotal: float, country: str) -> TaxBreakdown:
    """Order-summary tax lines for a subtotal in shelf prices."""
    info = get_tax_rate(country)
    if info.included:
        net = subtotal / (1 + info.rate)
        return TaxBreakdown(
            subtotal_excluding_tax=net,
            tax_amount=subtotal - net,
            subtotal_including_tax=subtotal,
            tax_name=info.name,
            tax_rate=info.rate,
            tax_included=True,
        )

    amount = subtotal * info.rate
    return TaxBreakdown(
        subtotal_excluding_tax=subtotal,
        tax_amount=amount,
        subtotal_including_tax=subtotal + amount,
        tax_name=info.name,
        tax_rate=info.rate,
        tax_included=False,
    )


def format_tax_info(subtotal: float, country: str, currency: str = "TRY") -> str:
    info = get_tax_rate(country)
    percent = f"{info.rate * 100:.0f}%"
    if info.included:
        return f"{info.name} dahil ({percent})"
    return f"{info.name} ({percent}): {subtotal * info.rate:.2f} {currency}"


def is_business_tax_exempt(country: str, has_valid_vat_number: bool) -> bool:
    """B2B buyers with a valid VAT number are exempt from VAT."""
    return get_tax_rate(country).name == "VAT" and has_valid_vat_number


def validate_vat_number(vat_number: str, country: str) -> bool:
    """Basic format check; countries without a known format always pass."""
    pattern = VAT_NUMBER_FORMATS.get(country)
    if pattern is None:
        return True
    cleaned = re.sub(r"\s", "", vat_number or "").upper()
    return bool(pattern.match(cleaned))
