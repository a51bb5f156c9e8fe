"""Durability score: an absolute (not population-relative) 0-100 scale."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import asdict, dataclass
import logging

from qei.core.models import MAX_REGULAR_SEASON_STARTS, SeasonRecord
from qei.core.weights import DEFAULT_DURABILITY_WEIGHTS
from qei.data.reference import ReferenceTables

from .common import resolve_tables, weight_share, weighted_seasons

logger = logging.getLogger(__name__)

AVAILABILITY_POINTS = 80.0
CONSISTENCY_CAP = 20.0
FULL_SEASON_STARTS = 16
NEAR_FULL_SEASON_STARTS = 14
FULL_SEASON_BONUS = 10.0
NEAR_FULL_SEASON_BONUS = 5.0
LONGEVITY_YEARS = 3
LONGEVITY_BONUS = 5.0


@dataclass(frozen=True)
class DurabilityScore:
    availability: float = 0.0
    consistency: float = 0.0
    score: float = 0.0

    def to_dict(self) -> dict[str, float]:
        return asdict(self)


def calculate_durability_score(
    seasons: Sequence[SeasonRecord],
    weights: Mapping[str, float] | None = None,
    *,
    season_year: int | None = None,
    tables: ReferenceTables | None = None,
) -> DurabilityScore:
    """Availability (0-80) plus a consistency bonus (0-20).

    Availability is the weighted mean of ``min(1, starts / 17)``. Consistency
    adds 10 per season with 16+ starts, 5 per season with 14-15 starts and 5
    for three or more active seasons.
    """

    tables = resolve_tables(tables)
    year_weights = tables.weights_for("stability", season_year)
    weights = weights if weights is not None else DEFAULT_DURABILITY_WEIGHTS

    weighted_availability = 0.0
    total_weight = 0.0
    consistency = 0.0
    active_years = 0

    for record, weight in weighted_seasons(seasons, year_weights):
        weighted_availability += min(1.0, record.games_started / MAX_REGULAR_SEASON_STARTS) * weight
        total_weight += weight
        if record.games_started >= FULL_SEASON_STARTS:
            consistency += FULL_SEASON_BONUS
        elif record.games_started >= NEAR_FULL_SEASON_STARTS:
            consistency += NEAR_FULL_SEASON_BONUS
        if record.games_started > 0:
            active_years += 1

    if total_weight == 0:
        return DurabilityScore()

    if active_years >= LONGEVITY_YEARS:
        consistency += LONGEVITY_BONUS
    availability = (weighted_availability / total_weight) * AVAILABILITY_POINTS
    consistency = min(CONSISTENCY_CAP, consistency)

    score = 100.0 * (
        weight_share(weights, "availability") * availability / AVAILABILITY_POINTS
        + weight_share(weights, "consistency") * consistency / CONSISTENCY_CAP
    )
    return DurabilityScore(availability=availability, consistency=consistency, score=score)


__all__ = ["DurabilityScore", "calculate_durability_score"]
