"""Size advisor endpoints."""

from typing import Any, Dict, List

from fastapi import APIRouter
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from core.logging import get_logger
from scoring.size_advisor import (
    BodyType,
    FitPreference,
    UserMeasurements,
    get_size_chart,
    recommend_size,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/api/size", tags=["Size"])


class SizeRecommendRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    height: float = Field(..., gt=100, lt=250, description="Height in cm")
    weight: float = Field(..., gt=30, lt=250, description="Weight in kg")
    body_type: BodyType = BodyType.AVERAGE
    fit_preference: FitPreference = FitPreference.REGULAR
    category: str = Field("tops", min_length=1)


class SizeRecommendResponse(BaseModel):
    recommended_size: str
    confidence: int
    reason: str
    alternatives: List[str]


@router.post("/recommend", response_model=SizeRecommendResponse)
def recommend(request: SizeRecommendRequest) -> SizeRecommendResponse:
    measurements = UserMeasurements(
        height=request.height,
        weight=request.weight,
        body_type=request.body_type,
        fit_preference=request.fit_preference,
    )
    result = recommend_size(measurements, request.category)
    logger.info(
        "Size recommended",
        category=request.category,
        size=result.recommended_size,
        confidence=result.confidence,
    )
    return SizeRecommendResponse(
        recommended_size=result.recommended_size,
        confidence=result.confidence,
        reason=result.reason,
        alternatives=result.alternatives,
    )


@router.get("/chart/{category}")
def size_chart(category: str) -> Dict[str, Any]:
    """Chart rows in inches: size plus bust/waist/hips ranges."""
    return {
        "category": category,
        "unit": "in",
        "sizes": [
            {"size": band.size, "bust": list(band.bust), "waist": list(band.waist), "hips": list(band.hips)}
            for band in get_size_chart(category)
        ],
    }
