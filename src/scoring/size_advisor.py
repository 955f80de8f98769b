"""
Size recommendation from height, weight, body type and fit preference.

The advisor estimates bust/waist/hip measurements (inches) from BMI and
body type, matches them against the category's size chart, then shifts
one band for a tight or loose fit preference.

Usage::

    from scoring.size_advisor import UserMeasurements, recommend_size

    rec = recommend_size(
        UserMeasurements(height=165, weight=60, body_type="average", fit_preference="regular"),
        "hoodies",
    )
    rec.recommended_size, rec.confidence
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Tuple

from scoring.constants.size_charts import (
    CATEGORY_CHART_GROUP,
    DEFAULT_BAND_INDEX,
    DEFAULT_CHART_GROUP,
    SIZE_CHARTS,
    SizeBand,
)


class BodyType(str, Enum):
    SLIM = "slim"
    AVERAGE = "average"
    ATHLETIC = "athletic"
    CURVY = "curvy"


class FitPreference(str, Enum):
    TIGHT = "tight"
    REGULAR = "regular"
    LOOSE = "loose"


# Inches added to the BMI-based bust estimate
BUST_ADJUSTMENT: Dict[BodyType, int] = {
    BodyType.SLIM: -2,
    BodyType.AVERAGE: 0,
    BodyType.ATHLETIC: 1,
    BodyType.CURVY: 3,
}

# waist = bust - offset
WAIST_OFFSET: Dict[BodyType, int] = {
    BodyType.SLIM: 6,
    BodyType.AVERAGE: 4,
    BodyType.ATHLETIC: 3,
    BodyType.CURVY: 8,
}

# hips = bust + offset
HIPS_OFFSET: Dict[BodyType, int] = {
    BodyType.SLIM: 2,
    BodyType.AVERAGE: 2,
    BodyType.ATHLETIC: 1,
    BodyType.CURVY: 4,
}

BUST_POINTS = 3
WAIST_POINTS = 3
HIPS_POINTS = 2
MAX_MATCH_SCORE = BUST_POINTS + WAIST_POINTS + HIPS_POINTS
MAX_CONFIDENCE = 95


@dataclass
class UserMeasurements:
    """Height in cm, weight in kg."""
    height: float
    weight: float
    body_type: BodyType = BodyType.AVERAGE
    fit_preference: FitPreference = FitPreference.REGULAR

    def __post_init__(self):
        self.body_type = BodyType(self.body_type)
        self.fit_preference = FitPreference(self.fit_preference)


@dataclass
class SizeRecommendation:
    recommended_size: str
    confidence: int
    reason: str
    alternatives: List[str] = field(default_factory=list)


def calculate_bmi(height_cm: float, weight_kg: float) -> float:
    meters = height_cm / 100
    return weight_kg / (meters * meters)


def estimate_measurements(measurements: UserMeasurements) -> Tuple[int, int, int]:
    """Estimated (bust, waist, hips) in inches."""
    bmi = calculate_bmi(measurements.height, measurements.weight)
    if bmi < 18.5:
        bust = 32
    elif bmi < 25:
        bust = 34
    elif bmi < 30:
        bust = 38
    else:
        bust = 42

    body = measurements.body_type
    bust += BUST_ADJUSTMENT[body]
    return bust, bust - WAIST_OFFSET[body], bust + HIPS_OFFSET[body]


def get_size_chart(category: str) -> Tuple[SizeBand, ...]:
    """Size chart for a catalog category; unknown categories use the tops chart."""
    group = CATEGORY_CHART_GROUP.get((category or "").lower(), DEFAULT_CHART_GROUP)
    return SIZE_CHARTS[group]


def _in_range(value: float, bounds: Tuple[int, int]) -> bool:
    return bounds[0] <= value <= bounds[1]


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def match_size(bust: float, waist: float, hips: float, chart: Tuple[SizeBand, ...]) -> Tuple[int, int]:
    """
    Index of the best band and its confidence.

    The first band with the strictly highest score wins; when nothing
    matches the default is M with zero confidence.
    """
    best_index = DEFAULT_BAND_INDEX
    best_score = 0

    for index, band in enumerate(chart):
        score = 0
        if _in_range(bust, band.bust):
            score += BUST_POINTS
        if _in_range(waist, band.waist):
            score += WAIST_POINTS
        if _in_range(hips, band.hips):
            score += HIPS_POINTS
        if score > best_score:
            best_score, best_index = score, index

    confidence = min(MAX_CONFIDENCE, _round_half_up(best_score / MAX_MATCH_SCORE * 100))
    return best_index, confidence


def _apply_fit_preference(index: int, fit: FitPreference, chart_len: int) -> int:
    if fit == FitPreference.TIGHT and index > 0:
        return index - 1
    if fit == FitPreference.LOOSE and index < chart_len - 1:
        return index + 1
    return index


def _alternatives(index: int, chart: Tuple[SizeBand, ...]) -> List[str]:
    alternatives = []
    if index > 0:
        alternatives.append(chart[index - 1].size)
    if index < len(chart) - 1:
        alternatives.append(chart[index + 1].size)
    return alternatives


def _format_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def build_reason(measurements: UserMeasurements, confidence: int) -> str:
    reason = (
        f"Based on your height ({_format_number(measurements.height)}cm), "
        f"weight ({_format_number(measurements.weight)}kg), "
        f"{measurements.body_type.value} body type, and "
        f"{measurements.fit_preference.value} fit preference. "
    )
    if confidence >= 90:
        return reason + "Highly confident match!"
    if confidence >= 75:
        return reason + "Good match based on your measurements."
    return reason + "Consider trying on before purchasing."


def recommend_size(measurements: UserMeasurements, category: str) -> SizeRecommendation:
    """Recommend a size (plus neighbouring alternatives) for a category."""
    chart = get_size_chart(category)
    bust, waist, hips = estimate_measurements(measurements)

    index, confidence = match_size(bust, waist, hips, chart)
    index = _apply_fit_preference(index, measurements.fit_preference, len(chart))

    return SizeRecommendation(
        recommended_size=chart[index].size,
        confidence=confidence,
        reason=build_reason(measurements, confidence),
        alternatives=_alternatives(index, chart),
    )
