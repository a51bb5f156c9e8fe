"""Contextualisation, penalties and the hierarchical QEI composite."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import asdict, dataclass
import logging
import math

from qei.core.models import Player
from qei.core.stats import (
    NEUTRAL_VARIANCE,
    composite_z_score,
    is_finite_number,
    normalize_category_scores,
    weighted_average,
    z_score_to_percentile,
)
from qei.core.weights import CATEGORIES, WeightConfiguration
from qei.data.reference import ReferenceTables

from .common import weighted_seasons

logger = logging.getLogger(__name__)

DURABILITY_CENTER = 50.0
DURABILITY_SCALE = 25.0

COMPLETED_SEASON_MIN_STARTS = 8
CURRENT_SEASON_MIN_STARTS = 1
PENALTY_FLOOR = 0.05

ROOKIE_MODIFIER = 0.85
SOPHOMORE_MODIFIER = 0.97


@dataclass(frozen=True)
class CategoryScores:
    """Five category outputs for one player in one computation.

    ``durability`` is on its linear 0-100 scale; every other field is a
    population z-score.
    """

    team: float = 0.0
    stats: float = 0.0
    clutch: float = 0.0
    durability: float = 0.0
    support: float = 0.0

    def to_dict(self) -> dict[str, float]:
        return asdict(self)


def durability_to_z(score: float) -> float:
    return (score - DURABILITY_CENTER) / DURABILITY_SCALE


def contextualize(scores: CategoryScores) -> dict[str, float]:
    """Invert the support z-score and linearise durability onto the z scale."""

    return {
        "team": scores.team,
        "stats": scores.stats,
        "clutch": scores.clutch,
        "durability": durability_to_z(scores.durability),
        "support": -scores.support,
    }


def season_penalty(games_started: int, *, current_season: bool = False) -> float:
    """Multiplier for a season with few starts.

    1.0 at or above the threshold (8 starts, or 1 for the in-progress
    season), degrading logarithmically below it and floored at 0.05.
    """

    threshold = CURRENT_SEASON_MIN_STARTS if current_season else COMPLETED_SEASON_MIN_STARTS
    if games_started >= threshold:
        return 1.0
    if games_started <= 0:
        return PENALTY_FLOOR
    return max(PENALTY_FLOOR, math.log(1 + games_started) / math.log(1 + threshold))


def aggregate_season_penalty(
    player: Player,
    tables: ReferenceTables,
    *,
    season_year: int | None = None,
    current_season: int | None = None,
) -> float:
    """Year-weighted mean of per-season penalties (the season's own in single mode).

    Seasons the player has no record for are not counted.
    """

    current = current_season if current_season is not None else tables.current_season
    if season_year is not None:
        record = player.season(season_year)
        games = record.games_started if record else 0
        return season_penalty(games, current_season=season_year == current)

    year_weights = tables.weights_for("performance")
    pairs = [
        (season_penalty(record.games_started, current_season=record.season == current), weight)
        for record, weight in weighted_seasons(player.seasons, year_weights)
    ]
    if not pairs:
        return PENALTY_FLOOR
    return weighted_average(pairs)


def experience_modifier(experience: int) -> float:
    if experience == 1:
        return ROOKIE_MODIFIER
    if experience == 2:
        return SOPHOMORE_MODIFIER
    return 1.0


def composite_score(
    contextual: Mapping[str, float],
    weights: WeightConfiguration,
    *,
    penalty: float = 1.0,
    variances: Mapping[str, float] | None = None,
    target_variance: float = NEUTRAL_VARIANCE,
) -> float:
    """Weighted blend of contextualised z-scores using the raw category weights.

    When ``variances`` is supplied every category is first rescaled to
    ``target_variance`` so the weights act proportionally.
    """

    penalised = {category: contextual.get(category, 0.0) * penalty for category in CATEGORIES}
    if variances is not None:
        penalised = normalize_category_scores(penalised, variances, target_variance)
    return composite_z_score(penalised, weights.category_weights())


def finalize(composite: float, modifier: float = 1.0) -> float:
    """Convert the adjusted composite z-score to the 0-100 QEI."""

    adjusted = composite * modifier
    if not is_finite_number(adjusted):
        return 0.0
    return z_score_to_percentile(adjusted)


def calculate_qei(
    contextual: Mapping[str, float],
    weights: WeightConfiguration,
    *,
    penalty: float = 1.0,
    modifier: float = 1.0,
    variances: Mapping[str, float] | None = None,
    target_variance: float = NEUTRAL_VARIANCE,
    on_composite: Callable[[float], None] | None = None,
) -> float:
    """Full composite-to-percentile pass; 0 when every category weight is 0.

    ``on_composite`` receives the weighted z-score before the experience
    modifier and percentile conversion.
    """

    if weights.total <= 0:
        return 0.0
    composite = composite_score(
        contextual,
        weights,
        penalty=penalty,
        variances=variances,
        target_variance=target_variance,
    )
    if on_composite is not None:
        on_composite(composite)
    return finalize(composite, modifier)


__all__ = [
    "COMPLETED_SEASON_MIN_STARTS",
    "CURRENT_SEASON_MIN_STARTS",
    "CategoryScores",
    "PENALTY_FLOOR",
    "aggregate_season_penalty",
    "calculate_qei",
    "composite_score",
    "contextualize",
    "durability_to_z",
    "experience_modifier",
    "finalize",
    "season_penalty",
]
