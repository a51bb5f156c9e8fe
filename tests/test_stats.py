import math

import pytest

from qei.core import stats


def test_z_score_clamps_to_three_sigma():
    assert stats.z_score(100.0, 0.0, 1.0) == 3.0
    assert stats.z_score(-100.0, 0.0, 1.0) == -3.0
    assert stats.z_score(12.0, 10.0, 2.0) == pytest.approx(1.0)


def test_z_score_inverts_lower_is_better():
    assert stats.z_score(8.0, 10.0, 2.0, invert=True) == pytest.approx(1.0)


@pytest.mark.parametrize(
    "value, mean_value, std_dev",
    [
        (5.0, 5.0, 0.0),
        (float("nan"), 0.0, 1.0),
        (None, 0.0, 1.0),
        (3.0, float("inf"), 1.0),
    ],
)
def test_z_score_degenerate_inputs_are_neutral(value, mean_value, std_dev):
    assert stats.z_score(value, mean_value, std_dev) == 0.0


def test_mean_and_standard_deviation_skip_non_finite_values():
    values = [2.0, 4.0, float("nan"), None, 6.0]
    assert stats.mean(values) == pytest.approx(4.0)
    assert stats.standard_deviation(values) == pytest.approx(math.sqrt(8.0 / 3.0))
    assert stats.mean([]) == 0.0
    assert stats.standard_deviation([]) == 0.0


def test_percentile_mapping():
    assert stats.z_score_to_percentile(0) == 50.0
    assert stats.z_score_to_percentile(1.0) == pytest.approx(84.13, abs=0.01)
    assert stats.z_score_to_percentile(-1.0) == pytest.approx(15.87, abs=0.01)
    assert stats.z_score_to_percentile(float("nan")) == 0.0
    assert 0.0 <= stats.z_score_to_percentile(10.0) <= 100.0


def test_erf_is_odd_and_accurate():
    for x in (0.1, 0.5, 1.0, 2.0):
        assert stats.erf(x) == pytest.approx(math.erf(x), abs=2e-7)
        assert stats.erf(-x) == pytest.approx(-stats.erf(x))


def test_variance_returns_sentinel_for_degenerate_samples():
    assert stats.variance([]) == stats.NEUTRAL_VARIANCE
    assert stats.variance([1.5]) == stats.NEUTRAL_VARIANCE
    assert stats.variance([2.0, 2.0, 2.0]) == stats.NEUTRAL_VARIANCE
    assert stats.variance([1.0, 3.0]) == pytest.approx(1.0)
    assert stats.variance([0.0, 4.0]) == pytest.approx(4.0)


def test_normalize_z_score_variance_rescales_to_target():
    assert stats.normalize_z_score_variance(2.0, 4.0) == pytest.approx(1.0)
    assert stats.normalize_z_score_variance(2.0, 4.0, target_variance=16.0) == pytest.approx(4.0)
    assert stats.normalize_z_score_variance(2.0, 0.0) == 2.0
    assert stats.normalize_z_score_variance(float("nan"), 4.0) == 0.0


def test_normalize_category_scores_uses_neutral_variance_for_unknown_categories():
    result = stats.normalize_category_scores({"team": 2.0, "stats": 1.0}, {"team": 4.0})
    assert result == {"team": pytest.approx(1.0), "stats": pytest.approx(1.0)}


def test_weighted_average_and_composite():
    assert stats.weighted_average([(1.0, 1.0), (3.0, 3.0)]) == pytest.approx(2.5)
    assert stats.weighted_average([(float("nan"), 1.0)]) == 0.0
    assert stats.composite_z_score({"a": 1.0, "b": -1.0}, {"a": 3, "b": 1}) == pytest.approx(0.5)
    assert stats.composite_z_score({"a": 1.0}, {"a": -5}) == 0.0
    assert stats.composite_z_score({"a": 1.0}, {}) == 0.0


def test_normalize_weights_treats_negative_and_junk_as_zero():
    assert stats.normalize_weights({"a": 1, "b": 3, "c": -2, "d": "x"}) == {
        "a": 0.25,
        "b": 0.75,
        "c": 0.0,
        "d": 0.0,
    }
    assert stats.normalize_weights({"a": 0, "b": 0}) == {"a": 0.0, "b": 0.0}


def test_is_finite_number_rejects_booleans():
    assert stats.is_finite_number(1)
    assert not stats.is_finite_number(True)
    assert not stats.is_finite_number(float("inf"))
    assert not stats.is_finite_number("3")
