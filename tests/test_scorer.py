"""Unit tests for the match scorer."""

import math

import pytest

from reconciler.config.models import MatchingConfig, SourceTag
from reconciler.domain.models import NormalizedRecord
from reconciler.matching.scorer import MatchScorer, percent_difference


def make_pair(
    booli_final=3_010_000,
    hemnet_final=3_000_000,
    booli_asking=2_910_000,
    hemnet_asking=2_900_000,
    booli_date="2024-05-03",
    hemnet_date="3 maj 2024",
    booli_change=None,
    hemnet_change=None,
):
    def change(asking, final, explicit):
        if explicit is not None:
            return explicit
        return (final - asking) / asking * 100 if asking and final else 0.0

    booli = NormalizedRecord(
        id="b1",
        source=SourceTag.BOOLI,
        address="Vasagatan 12",
        asking_price=booli_asking,
        final_price=booli_final,
        percent_change=change(booli_asking, booli_final, booli_change),
        sold_date=booli_date,
    )
    hemnet = NormalizedRecord(
        id="h1",
        source=SourceTag.HEMNET,
        address="Vasagatan 12",
        asking_price=hemnet_asking,
        final_price=hemnet_final,
        percent_change=change(hemnet_asking, hemnet_final, hemnet_change),
        sold_date=hemnet_date,
    )
    return booli, hemnet


@pytest.fixture
def scorer():
    """MatchScorer with default tolerances."""
    return MatchScorer()


class TestPercentDifference:
    """Test suite for percent_difference."""

    def test_relative_to_mean(self):
        assert percent_difference(3_000_000, 3_010_000) == pytest.approx(10_000 / 3_005_000 * 100)

    def test_symmetric(self):
        assert percent_difference(100, 120) == percent_difference(120, 100)

    def test_equal_values(self):
        assert percent_difference(2_500_000, 2_500_000) == 0

    def test_both_zero_is_infinite(self):
        assert percent_difference(0, 0) == math.inf

    def test_one_zero(self):
        assert percent_difference(0, 100) == pytest.approx(200.0)

    def test_opposite_signs_fall_back_to_larger_magnitude(self):
        assert percent_difference(-2, 2) == pytest.approx(200.0)

    @pytest.mark.parametrize("x,y", [(math.nan, 1), (1, math.inf), (-math.inf, math.inf)])
    def test_non_finite_is_infinite(self, x, y):
        assert percent_difference(x, y) == math.inf

    def test_too_large_for_a_float_is_infinite(self):
        assert percent_difference(10**400, 1) == math.inf
        assert percent_difference(10**400, 10**400) == math.inf

    def test_near_float_limit(self):
        assert percent_difference(1.7e308, 1.7e308) == 0
        assert percent_difference(1.7e308, 1.5e308) == pytest.approx(0.2 / 1.6 * 100)


class TestMatchScorer:
    """Test suite for MatchScorer.score."""

    def test_oversized_final_price_rejected(self, scorer):
        booli, hemnet = make_pair()
        booli = booli.model_copy(update={"final_price": 10**400})

        assert scorer.score(booli, hemnet) is None

    def test_close_pair_scores_low(self, scorer):
        booli, hemnet = make_pair()

        result = scorer.score(booli, hemnet)

        assert result is not None
        assert result.date_diff_days == 0
        assert result.final_price_diff_pct == pytest.approx(0.3328, abs=1e-3)
        assert result.asking_price_diff_pct == pytest.approx(0.3442, abs=1e-3)
        assert result.score < 1

    def test_composite_formula(self, scorer):
        booli, hemnet = make_pair(booli_date="2024-05-04")

        result = scorer.score(booli, hemnet)

        expected = (
            1 * 2
            + result.final_price_diff_pct
            + result.asking_price_diff_pct / 3
            + result.percent_change_diff_pct / 4
        )
        assert result.date_diff_days == pytest.approx(1.0)
        assert result.score == pytest.approx(expected)

    def test_final_price_beyond_tolerance_rejected(self, scorer):
        booli, hemnet = make_pair(booli_final=3_200_000)

        assert scorer.score(booli, hemnet) is None

    def test_dates_beyond_tolerance_rejected(self, scorer):
        booli, hemnet = make_pair(booli_date="2024-05-06")

        assert scorer.score(booli, hemnet) is None

    def test_two_days_apart_is_not_rejected_outright(self):
        scorer = MatchScorer(MatchingConfig(max_score=10))
        booli, hemnet = make_pair(booli_date="2024-05-05")

        result = scorer.score(booli, hemnet)

        assert result is not None
        assert result.date_diff_days == pytest.approx(2.0)

    @pytest.mark.parametrize("booli_date", ["", "okänt", "snart"])
    def test_unparseable_date_rejected(self, scorer, booli_date):
        booli, hemnet = make_pair(booli_date=booli_date)

        assert scorer.score(booli, hemnet) is None

    def test_missing_final_prices_rejected(self, scorer):
        booli, hemnet = make_pair(booli_final=0, hemnet_final=0)

        assert scorer.score(booli, hemnet) is None

    def test_missing_asking_prices_use_penalty(self, scorer):
        booli, hemnet = make_pair(
            booli_asking=0, hemnet_asking=0, booli_final=3_000_000, booli_change=0.0, hemnet_change=0.0
        )

        result = scorer.score(booli, hemnet)

        assert result.asking_price_diff_pct is None
        assert result.percent_change_diff_pct is None
        assert result.score == pytest.approx(1.0 / 3 + 0.5 / 4)

    def test_custom_penalties_and_weights(self):
        config = MatchingConfig(
            missing_asking_price_penalty=3.0,
            missing_percent_change_penalty=4.0,
            date_weight=0.5,
        )
        scorer = MatchScorer(config)
        booli, hemnet = make_pair(
            booli_asking=0,
            hemnet_asking=0,
            booli_final=3_000_000,
            booli_change=0.0,
            hemnet_change=0.0,
            booli_date="2024-05-05",
        )

        result = scorer.score(booli, hemnet)

        assert result.score == pytest.approx(2 * 0.5 + 1.0 + 1.0)

    def test_percent_change_difference_counts(self, scorer):
        booli, hemnet = make_pair(booli_change=5.0, hemnet_change=3.0)

        result = scorer.score(booli, hemnet)

        assert result.percent_change_diff_pct == pytest.approx(50.0)
        assert result.score > 3

    def test_one_sided_unknown_asking_price_uses_penalty(self, scorer):
        booli, hemnet = make_pair(hemnet_asking=0, hemnet_change=3.4)

        result = scorer.score(booli, hemnet)

        assert result is not None
        assert result.asking_price_diff_pct is None
        assert result.score < 3
