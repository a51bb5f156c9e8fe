"""Statistical performance score from benchmark tiers and volume scales."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
import logging
from typing import Any

from qei.core.models import SeasonRecord
from qei.core.stats import clamp, weighted_average
from qei.core.weights import DEFAULT_STATS_WEIGHTS
from qei.data.reference import BenchmarkTables, ReferenceTables

from .common import resolve_tables, weight_share, weighted_seasons

logger = logging.getLogger(__name__)

TIER_ORDER = ("p95", "p90", "p75", "p50", "p25", "p10")
STATS_COMPONENTS = ("efficiency", "protection", "volume")


@dataclass(frozen=True)
class PerformanceSeason:
    """Points earned in one season, before year weighting."""

    season: int
    weight: float
    efficiency: float
    protection: float
    volume: float
    adjustment: float
    score: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "season": self.season,
            "weight": self.weight,
            "efficiency": self.efficiency,
            "protection": self.protection,
            "volume": self.volume,
            "adjustment": self.adjustment,
            "score": self.score,
        }


@dataclass(frozen=True)
class PerformanceScore:
    seasons: tuple[PerformanceSeason, ...] = field(default_factory=tuple)
    score: float = 0.0


def _percent(numerator: float, denominator: float) -> float:
    if denominator <= 0:
        return 0.0
    return 100.0 * numerator / denominator


def rate_stats(record: SeasonRecord) -> dict[str, float]:
    """Return the rate statistics looked up in the benchmark table.

    Percentages are on a 0-100 scale. Sack% uses dropbacks (attempts plus
    sacks) and Fumble% uses all plays (dropbacks plus rushing attempts).
    """

    dropbacks = record.attempts + record.sacks
    return {
        "any_a": record.adjusted_net_yards_per_attempt(),
        "td_pct": _percent(record.passing_tds, record.attempts),
        "completion_pct": _percent(record.completions, record.attempts),
        "sack_pct": _percent(record.sacks, dropbacks),
        "int_pct": _percent(record.interceptions, record.attempts),
        "fumble_pct": _percent(record.fumbles, dropbacks + record.rushing_attempts),
    }


def volume_stats(record: SeasonRecord) -> dict[str, float]:
    """Per-start production used by the volume tier."""

    games = record.games_started
    if games <= 0:
        return {key: 0.0 for key in ("pass_yards", "pass_tds", "attempts_per_game", "rush_tds", "rush_yards")}
    return {
        "pass_yards": record.passing_yards / games,
        "pass_tds": record.passing_tds / games,
        "attempts_per_game": record.attempts / games,
        "rush_tds": record.rushing_tds / games,
        "rush_yards": record.rushing_yards / games,
    }


def tier_multiplier(statistic: str, value: float, tables: BenchmarkTables) -> float:
    """Seven-tier step lookup of ``value`` against the benchmark cut points."""

    benchmark = tables.benchmarks[statistic]
    lower_is_better = bool(benchmark.get("lower_is_better", False))
    for tier in TIER_ORDER:
        cut = benchmark[tier]
        reached = value <= cut if lower_is_better else value >= cut
        if reached:
            return float(tables.tier_multipliers[tier])
    return float(tables.tier_multipliers["floor"])


def interpolate_volume(statistic: str, value: float, tables: BenchmarkTables) -> float:
    """Fraction (0-1) of the way from the statistic's floor to its cap."""

    scale = tables.volume_scales[statistic]
    floor, cap = float(scale["floor"]), float(scale["cap"])
    if cap <= floor:
        return 1.0 if value >= cap else 0.0
    return clamp((value - floor) / (cap - floor), 0.0, 1.0)


def turnover_adjustment(turnovers: int, tables: BenchmarkTables) -> float:
    for max_turnovers, adjustment in tables.turnover_steps:
        if turnovers <= max_turnovers:
            return adjustment
    return tables.turnover_otherwise


def _tier_points(values: Mapping[str, float], allocation: Mapping[str, float], tables: BenchmarkTables) -> float:
    return sum(points * tier_multiplier(stat, values[stat], tables) for stat, points in allocation.items())


def score_season(
    record: SeasonRecord,
    weights: Mapping[str, float],
    tables: BenchmarkTables,
    *,
    weight: float = 1.0,
) -> PerformanceSeason:
    """Score a single season on the efficiency/protection/volume tiers."""

    rates = rate_stats(record)
    volumes = volume_stats(record)

    efficiency = _tier_points(rates, tables.points["efficiency"], tables)
    protection = _tier_points(rates, tables.points["protection"], tables)
    volume = sum(
        points * interpolate_volume(stat, volumes[stat], tables)
        for stat, points in tables.points["volume"].items()
    )
    adjustment = turnover_adjustment(record.turnovers, tables)

    earned = {"efficiency": efficiency, "protection": protection, "volume": volume}
    combined = 0.0
    for component in STATS_COMPONENTS:
        available = sum(tables.points[component].values())
        if available > 0:
            combined += weight_share(weights, component) * earned[component] / available
    score = 100.0 * combined + adjustment

    return PerformanceSeason(
        season=record.season,
        weight=weight,
        efficiency=efficiency,
        protection=protection,
        volume=volume,
        adjustment=adjustment,
        score=score,
    )


def calculate_performance_score(
    seasons: Sequence[SeasonRecord],
    weights: Mapping[str, float] | None = None,
    *,
    season_year: int | None = None,
    tables: ReferenceTables | None = None,
) -> PerformanceScore:
    """Year-weighted statistical performance score on ``[0, 100]``.

    At the default sub-weights the season score is the plain point sum:
    efficiency (45) + protection (25) + volume (30) + turnover adjustment.
    Seasons with no attempts are skipped.
    """

    tables = resolve_tables(tables)
    year_weights = tables.weights_for("performance", season_year)
    weights = weights if weights is not None else DEFAULT_STATS_WEIGHTS

    scored: list[PerformanceSeason] = []
    for record, weight in weighted_seasons(seasons, year_weights):
        if record.attempts <= 0:
            logger.debug("Season %s has no attempts; skipping for performance score", record.season)
            continue
        scored.append(score_season(record, weights, tables.performance, weight=weight))

    if not scored:
        return PerformanceScore()
    average = weighted_average((season.score, season.weight) for season in scored)
    return PerformanceScore(seasons=tuple(scored), score=clamp(average, 0.0, 100.0))


__all__ = [
    "PerformanceScore",
    "PerformanceSeason",
    "STATS_COMPONENTS",
    "calculate_performance_score",
    "interpolate_volume",
    "rate_stats",
    "score_season",
    "tier_multiplier",
    "turnover_adjustment",
    "volume_stats",
]
