"""
Tests for the size advisor.
"""

import pytest

from scoring.constants.size_charts import SIZE_CHARTS
from scoring.size_advisor import (
    BodyType,
    FitPreference,
    UserMeasurements,
    build_reason,
    calculate_bmi,
    estimate_measurements,
    get_size_chart,
    match_size,
    recommend_size,
)


class TestMeasurements:
    """Tests for BMI and body measurement estimates."""

    def test_bmi(self):
        assert calculate_bmi(165, 60) == pytest.approx(22.04, abs=0.01)

    def test_average_estimate(self):
        assert estimate_measurements(UserMeasurements(165, 60)) == (34, 30, 36)

    def test_curvy_estimate(self):
        m = UserMeasurements(165, 75, body_type="curvy")

        # BMI 27.5 -> bust 38, curvy +3
        assert estimate_measurements(m) == (41, 33, 45)

    def test_string_enums_accepted(self):
        m = UserMeasurements(170, 65, body_type="athletic", fit_preference="loose")

        assert m.body_type is BodyType.ATHLETIC
        assert m.fit_preference is FitPreference.LOOSE

    def test_invalid_body_type_rejected(self):
        with pytest.raises(ValueError):
            UserMeasurements(170, 65, body_type="triangle")


class TestSizeChart:
    def test_hoodies_use_outerwear_chart(self):
        assert get_size_chart("hoodies") is SIZE_CHARTS["outerwear"]

    def test_unknown_category_uses_tops(self):
        assert get_size_chart("scarves") is SIZE_CHARTS["tops"]
        assert get_size_chart("") is SIZE_CHARTS["tops"]

    def test_no_match_defaults_to_m(self):
        chart = SIZE_CHARTS["tops"]

        assert match_size(60, 60, 60, chart) == (2, 0)

    def test_first_best_band_wins(self):
        # XS and S both score bust + hips on the standard chart
        index, confidence = match_size(34, 30, 36, SIZE_CHARTS["tops"])

        assert index == 0
        assert confidence == 63


class TestRecommendSize:
    """Tests for recommend_size."""

    def test_hoodie_example(self):
        rec = recommend_size(UserMeasurements(165, 60), "hoodies")

        assert rec.recommended_size == "XS"
        assert rec.confidence == 63
        assert rec.alternatives == ["S"]
        assert rec.reason.endswith("Consider trying on before purchasing.")
        assert "height (165cm)" in rec.reason

    def test_loose_fit_moves_up(self):
        rec = recommend_size(UserMeasurements(165, 60, fit_preference="loose"), "hoodies")

        assert rec.recommended_size == "S"
        assert rec.alternatives == ["XS", "M"]

    def test_tight_fit_stays_at_smallest(self):
        rec = recommend_size(UserMeasurements(165, 60, fit_preference="tight"), "hoodies")

        assert rec.recommended_size == "XS"

    @pytest.mark.parametrize("height,weight", [(150, 40), (165, 60), (175, 80), (160, 110), (200, 45)])
    @pytest.mark.parametrize("body_type", list(BodyType))
    def test_size_always_on_chart(self, height, weight, body_type):
        for category in ("t-shirts", "hoodies", "dresses", "unknown"):
            rec = recommend_size(UserMeasurements(height, weight, body_type=body_type), category)
            sizes = [band.size for band in get_size_chart(category)]

            assert rec.recommended_size in sizes
            assert 0 <= rec.confidence <= 95
            assert rec.recommended_size not in rec.alternatives

    def test_reason_tiers(self):
        m = UserMeasurements(170.5, 62)

        assert build_reason(m, 95).endswith("Highly confident match!")
        assert build_reason(m, 75).endswith("Good match based on your measurements.")
        assert "height (170.5cm)" in build_reason(m, 10)


class TestPackageQuickStart:
    """The names used in the scoring package docstring are importable from it."""

    def test_quick_start_runs(self, sample_products):
        from catalog.models import products_from_rows
        from scoring import (
            SizeRecommendation,
            UserMeasurements,
            advanced_sort_products,
            get_related_products,
            recommend_size,
        )

        products = products_from_rows(sample_products)
        ordered = advanced_sort_products(products, "trending")
        related = get_related_products(ordered[0], products, limit=8)
        rec = recommend_size(UserMeasurements(height=170, weight=62), "dresses")

        assert len(ordered) == len(products)
        assert ordered[0].id not in [p.id for p in related]
        assert isinstance(rec, SizeRecommendation)
        assert rec.recommended_size in [band.size for band in get_size_chart("dresses")]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
