"""Supporting cast score: z-scored team quality around the quarterback."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
import logging

from qei.core.models import SeasonRecord
from qei.core.stats import mean, normalize_weights, standard_deviation, z_score
from qei.core.weights import DEFAULT_SUPPORT_WEIGHTS
from qei.data.reference import TEAM_COMPONENTS, ReferenceTables, TeamQualityTables

from .common import resolve_tables, weighted_seasons

logger = logging.getLogger(__name__)

SINGLE_SEASON_MIN_STARTS = 9
MULTI_SEASON_MIN_STARTS = 10


@dataclass(frozen=True)
class SupportScore:
    """Population z-score of the player's supporting cast (higher = better cast)."""

    by_season: Mapping[int, float] = field(default_factory=dict)
    score: float = 0.0


def component_z_scores(
    team: str,
    year: int,
    quality: TeamQualityTables,
) -> dict[str, float] | None:
    """Z-score each component for ``team`` against that season's table.

    Returns ``None`` when the season has no quality tables.
    """

    if year not in quality.seasons:
        return None
    result: dict[str, float] = {}
    for component in TEAM_COMPONENTS:
        table = quality.component_table(year, component) or {}
        population = list(table.values())
        centre = mean(population)
        spread = standard_deviation(population, centre)
        value = table.get(team, quality.missing_team_defaults[component])
        result[component] = z_score(value, centre, spread)
    return result


def team_support_z(
    team: str,
    year: int,
    weights: Mapping[str, float],
    quality: TeamQualityTables,
) -> float | None:
    components = component_z_scores(team, year, quality)
    if components is None:
        return None
    shares = normalize_weights({name: weights.get(name, 0.0) for name in TEAM_COMPONENTS})
    return sum(shares[name] * components[name] for name in TEAM_COMPONENTS)


def calculate_support_score(
    seasons: Sequence[SeasonRecord],
    weights: Mapping[str, float] | None = None,
    *,
    season_year: int | None = None,
    tables: ReferenceTables | None = None,
) -> SupportScore:
    """Year-weighted supporting-cast z-score.

    Seasons below the starts threshold (9 in single-season mode, 10 across
    seasons) are ignored. Multi-team seasons average the per-team values.
    Returns 0 when no season qualifies.
    """

    tables = resolve_tables(tables)
    year_weights = tables.weights_for("performance", season_year)
    weights = weights if weights is not None else DEFAULT_SUPPORT_WEIGHTS
    min_starts = SINGLE_SEASON_MIN_STARTS if season_year is not None else MULTI_SEASON_MIN_STARTS

    by_season: dict[int, float] = {}
    weighted_total = 0.0
    total_weight = 0.0
    for record, weight in weighted_seasons(seasons, year_weights):
        if record.games_started < min_starts or not record.teams:
            continue
        values = [
            value
            for value in (
                team_support_z(team, record.season, weights, tables.team_quality) for team in record.teams
            )
            if value is not None
        ]
        if not values:
            logger.debug("No team quality data for %s; skipping support", record.season)
            continue
        season_value = sum(values) / len(values)
        by_season[record.season] = season_value
        weighted_total += season_value * weight
        total_weight += weight

    if total_weight == 0:
        return SupportScore()
    return SupportScore(by_season=by_season, score=weighted_total / total_weight)


__all__ = [
    "MULTI_SEASON_MIN_STARTS",
    "SINGLE_SEASON_MIN_STARTS",
    "SupportScore",
    "calculate_support_score",
    "component_z_scores",
    "team_support_z",
]
