"""Population statistics helpers used by every scoring category.

The functions here are deliberately domain-free: they accept plain numbers and
return plain numbers. Missing or degenerate inputs resolve to documented
sentinel values rather than exceptions so that a single pathological statistic
never aborts a full ranking run.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
import math

Z_SCORE_LIMIT = 3.0
NEUTRAL_VARIANCE = 1.0

# Abramowitz and Stegun, formula 7.1.26.
_ERF_A1 = 0.254829592
_ERF_A2 = -0.284496736
_ERF_A3 = 1.421413741
_ERF_A4 = -1.453152027
_ERF_A5 = 1.061405429
_ERF_P = 0.3275911


def is_finite_number(value: object) -> bool:
    """Return ``True`` for real, finite numbers (booleans excluded)."""

    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _finite(values: Iterable[object]) -> list[float]:
    return [float(value) for value in values if is_finite_number(value)]


def mean(values: Iterable[object]) -> float:
    """Arithmetic mean of the finite entries; 0 for empty input."""

    valid = _finite(values)
    if not valid:
        return 0.0
    return sum(valid) / len(valid)


def standard_deviation(values: Iterable[object], mean_value: float | None = None) -> float:
    """Population standard deviation of the finite entries; 0 when degenerate."""

    valid = _finite(values)
    if not valid:
        return 0.0
    centre = mean(valid) if mean_value is None or not is_finite_number(mean_value) else mean_value
    squared = [(value - centre) ** 2 for value in valid]
    result = math.sqrt(sum(squared) / len(squared))
    return result if math.isfinite(result) else 0.0


def clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


def z_score(value: object, mean_value: float, std_dev: float, invert: bool = False) -> float:
    """Standardise ``value`` against a population, clamped to ``[-3, 3]``.

    A zero spread or a non-finite value yields ``0`` so the statistic adds no
    differentiation. ``invert`` flips the sign for lower-is-better measures.
    """

    if not is_finite_number(value) or not is_finite_number(std_dev) or std_dev == 0:
        return 0.0
    if not is_finite_number(mean_value):
        return 0.0
    z = (float(value) - mean_value) / std_dev
    if invert:
        z = -z
    return clamp(z, -Z_SCORE_LIMIT, Z_SCORE_LIMIT)


def erf(x: float) -> float:
    """Rational approximation of the error function (max error ~1.5e-7)."""

    sign = -1.0 if x < 0 else 1.0
    x = abs(x)
    t = 1.0 / (1.0 + _ERF_P * x)
    polynomial = ((((_ERF_A5 * t + _ERF_A4) * t) + _ERF_A3) * t + _ERF_A2) * t + _ERF_A1
    y = 1.0 - polynomial * t * math.exp(-x * x)
    return sign * y


def z_score_to_percentile(z: object) -> float:
    """Map a z-score onto ``[0, 100]`` through the normal CDF.

    Non-finite input returns ``0`` rather than the median.
    """

    if not is_finite_number(z):
        return 0.0
    if z == 0:
        return 50.0
    percentile = 50.0 * (1.0 + erf(float(z) / math.sqrt(2.0)))
    return clamp(percentile, 0.0, 100.0)


def variance(z_scores: Iterable[object]) -> float:
    """Population variance of ``z_scores`` with a neutral ``1.0`` sentinel.

    The sentinel is returned for fewer than two finite samples and whenever the
    computed variance is non-positive or non-finite.
    """

    valid = _finite(z_scores)
    if len(valid) < 2:
        return NEUTRAL_VARIANCE
    centre = mean(valid)
    result = mean([(value - centre) ** 2 for value in valid])
    if result <= 0 or not math.isfinite(result):
        return NEUTRAL_VARIANCE
    return result


def normalize_z_score_variance(
    z: object,
    category_variance: object,
    target_variance: float = NEUTRAL_VARIANCE,
) -> float:
    """Rescale ``z`` so its category has ``target_variance``."""

    if not is_finite_number(z):
        return 0.0
    if not is_finite_number(category_variance) or category_variance <= 0:
        return float(z)
    return float(z) * math.sqrt(target_variance / float(category_variance))


def normalize_category_scores(
    raw_scores: Mapping[str, float],
    category_variances: Mapping[str, float],
    target_variance: float = NEUTRAL_VARIANCE,
) -> dict[str, float]:
    """Apply :func:`normalize_z_score_variance` to every category."""

    return {
        category: normalize_z_score_variance(
            raw_scores.get(category, 0.0) or 0.0,
            category_variances.get(category, NEUTRAL_VARIANCE) or NEUTRAL_VARIANCE,
            target_variance,
        )
        for category in raw_scores
    }


def weighted_average(pairs: Iterable[tuple[object, object]]) -> float:
    """Weighted mean of ``(value, weight)`` pairs, skipping non-finite entries."""

    total = 0.0
    total_weight = 0.0
    for value, weight in pairs:
        if not is_finite_number(value) or not is_finite_number(weight):
            continue
        total += float(value) * float(weight)
        total_weight += float(weight)
    if total_weight == 0:
        return 0.0
    return total / total_weight


def composite_z_score(z_scores: Mapping[str, object], weights: Mapping[str, object]) -> float:
    """Blend named z-scores by positive weights; ``0`` if no weight applies."""

    pairs = []
    for key, z in z_scores.items():
        weight = weights.get(key, 0)
        if is_finite_number(weight) and weight > 0:
            pairs.append((z, weight))
    return weighted_average(pairs)


def normalize_weights(weights: Mapping[str, object]) -> dict[str, float]:
    """Return weights scaled to sum to 1; negatives and junk count as zero."""

    cleaned = {
        key: float(value) if is_finite_number(value) and value > 0 else 0.0
        for key, value in weights.items()
    }
    total = sum(cleaned.values())
    if total <= 0:
        return {key: 0.0 for key in cleaned}
    return {key: value / total for key, value in cleaned.items()}


__all__ = [
    "NEUTRAL_VARIANCE",
    "Z_SCORE_LIMIT",
    "clamp",
    "composite_z_score",
    "erf",
    "is_finite_number",
    "mean",
    "normalize_category_scores",
    "normalize_weights",
    "normalize_z_score_variance",
    "standard_deviation",
    "variance",
    "weighted_average",
    "z_score",
    "z_score_to_percentile",
]
