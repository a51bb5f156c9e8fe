"""Per-player scoring and full-population ranking."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
import logging
from typing import Any

from qei.core.context import ContextFlags
from qei.core.models import MissingDataError, Player, SeasonRecord
from qei.core.tiers import tier_for
from qei.core.weights import WeightConfiguration
from qei.data.reference import ReferenceTables

from .clutch import ClutchScore, calculate_clutch_score
from .common import resolve_tables, weighted_seasons
from .composite import (
    CategoryScores,
    aggregate_season_penalty,
    calculate_qei,
    contextualize,
    experience_modifier,
)
from .durability import DurabilityScore, calculate_durability_score
from .performance import PerformanceScore, calculate_performance_score
from .population import PopulationStatistics, RawCategoryScores, population_pass
from .support import SupportScore, calculate_support_score
from .team import TeamScore, calculate_team_score

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScoreBreakdown:
    """Detailed calculator outputs behind a player's category scores."""

    team: TeamScore
    stats: PerformanceScore
    clutch: ClutchScore
    durability: DurabilityScore
    support: SupportScore


@dataclass(frozen=True)
class RankedPlayer:
    """One row of a ranking: the player, their category scores and QEI."""

    player: Player
    scores: CategoryScores
    qei: float
    raw: RawCategoryScores | None = None
    penalty: float = 1.0
    experience_modifier: float = 1.0
    rejection: str | None = None
    breakdown: ScoreBreakdown | None = None

    @property
    def rejected(self) -> bool:
        return self.rejection is not None

    @property
    def tier(self) -> str:
        return tier_for(self.qei)

    def to_dict(self) -> dict[str, Any]:
        return {
            "player": self.player.name,
            "player_id": self.player.player_id,
            "qei": self.qei,
            "tier": self.tier,
            "scores": self.scores.to_dict(),
            "raw": self.raw.to_dict() if self.raw else None,
            "penalty": self.penalty,
            "experience_modifier": self.experience_modifier,
            "rejection": self.rejection,
        }


def check_eligibility(player: Player, flags: ContextFlags, tables: ReferenceTables) -> None:
    """Raise :class:`MissingDataError` when the player has nothing to score."""

    if flags.season_year is not None:
        record = player.season(flags.season_year)
        if record is None:
            raise MissingDataError(f"no season record for {flags.season_year}")
        if record.is_empty():
            raise MissingDataError(f"{flags.season_year} season has no attempts, starts or yards")
        return

    year_weights = tables.weights_for("performance")
    if not any(not record.is_empty() for record, _ in weighted_seasons(player.seasons, year_weights)):
        years = ", ".join(str(year) for year in sorted(year_weights))
        raise MissingDataError(f"no usable season among {years}")


def _scored_seasons(player: Player, flags: ContextFlags) -> list[SeasonRecord]:
    if flags.include_playoffs:
        return list(player.seasons)
    return [record.without_playoffs() for record in player.seasons]


def compute_raw_scores(
    player: Player,
    weights: WeightConfiguration,
    flags: ContextFlags,
    tables: ReferenceTables,
) -> tuple[RawCategoryScores, ScoreBreakdown]:
    """Run the five category calculators for one player."""

    seasons = _scored_seasons(player, flags)
    year = flags.season_year
    breakdown = ScoreBreakdown(
        team=calculate_team_score(
            seasons,
            weights.team_weights,
            include_playoffs=flags.include_playoffs,
            season_year=year,
            tables=tables,
        ),
        stats=calculate_performance_score(seasons, weights.stats_weights, season_year=year, tables=tables),
        clutch=calculate_clutch_score(
            seasons,
            weights.clutch_weights,
            include_playoffs=flags.include_playoffs,
            season_year=year,
            tables=tables,
        ),
        durability=calculate_durability_score(
            seasons, weights.durability_weights, season_year=year, tables=tables
        ),
        support=calculate_support_score(seasons, weights.support_weights, season_year=year, tables=tables),
    )
    raw = RawCategoryScores(
        team=breakdown.team.score,
        stats=breakdown.stats.score,
        clutch=breakdown.clutch.score,
        durability=breakdown.durability.score,
        support=breakdown.support.score,
    )
    flags.emit(player.name, "raw", raw.to_dict())
    return raw, breakdown


def _reject(player: Player, reason: str, flags: ContextFlags) -> RankedPlayer:
    logger.info("Rejecting %s: %s", player.name, reason)
    flags.emit(player.name, "rejected", {"reason": reason})
    return RankedPlayer(player=player, scores=CategoryScores(), qei=0.0, penalty=0.0, rejection=reason)


def _evaluate(
    player: Player,
    raw: RawCategoryScores,
    breakdown: ScoreBreakdown | None,
    weights: WeightConfiguration,
    flags: ContextFlags,
    population: PopulationStatistics,
    tables: ReferenceTables,
) -> RankedPlayer:
    scores = population.standardize(raw)
    flags.emit(player.name, "standardized", scores.to_dict())

    contextual = contextualize(scores)
    flags.emit(player.name, "contextualized", contextual)

    penalty = aggregate_season_penalty(
        player,
        tables,
        season_year=flags.season_year,
        current_season=flags.current_season,
    )
    flags.emit(player.name, "penalty", {"multiplier": penalty})

    modifier = 1.0
    if flags.season_year is not None:
        modifier = experience_modifier(player.experience_through(flags.season_year))

    variances = population.variances if flags.normalize_variance else None
    qei = calculate_qei(
        contextual,
        weights,
        penalty=penalty,
        modifier=modifier,
        variances=variances,
        target_variance=flags.target_variance,
        on_composite=lambda z: flags.emit(
            player.name, "composite", {"z": z, "normalized": variances is not None}
        ),
    )
    flags.emit(player.name, "final", {"qei": qei, "experience_modifier": modifier})

    return RankedPlayer(
        player=player,
        scores=scores,
        qei=qei,
        raw=raw,
        penalty=penalty,
        experience_modifier=modifier,
        breakdown=breakdown,
    )


def score_player(
    player: Player,
    weights: WeightConfiguration | None = None,
    flags: ContextFlags | None = None,
    *,
    population: PopulationStatistics | None = None,
    tables: ReferenceTables | None = None,
) -> CategoryScores:
    """Return the five category scores for one player.

    Without a ``population`` the 0-100 calculator outputs are mapped onto the
    z scale linearly. Players with no usable data get all-zero scores.
    """

    tables = resolve_tables(tables)
    weights = weights or WeightConfiguration()
    flags = flags or ContextFlags()
    try:
        check_eligibility(player, flags, tables)
    except MissingDataError as exc:
        return _reject(player, str(exc), flags).scores
    raw, _ = compute_raw_scores(player, weights, flags, tables)
    return (population or PopulationStatistics()).standardize(raw)


def evaluate_player(
    player: Player,
    weights: WeightConfiguration | None = None,
    flags: ContextFlags | None = None,
    *,
    population: PopulationStatistics | None = None,
    tables: ReferenceTables | None = None,
) -> RankedPlayer:
    """Score one player all the way to a QEI."""

    tables = resolve_tables(tables)
    weights = weights or WeightConfiguration()
    flags = flags or ContextFlags()
    try:
        check_eligibility(player, flags, tables)
    except MissingDataError as exc:
        return _reject(player, str(exc), flags)
    raw, breakdown = compute_raw_scores(player, weights, flags, tables)
    return _evaluate(player, raw, breakdown, weights, flags, population or PopulationStatistics(), tables)


def _sort_key(entry: RankedPlayer) -> tuple[bool, float, str, str]:
    return (entry.rejected, -entry.qei, entry.player.name, entry.player.key)


def rank_players(
    players: Iterable[Player],
    weights: WeightConfiguration | None = None,
    flags: ContextFlags | None = None,
    *,
    tables: ReferenceTables | None = None,
) -> list[RankedPlayer]:
    """Score every player against the population and sort by QEI descending.

    Rejected players score 0, are left out of the population statistics and
    sort after every scored player.
    """

    tables = resolve_tables(tables)
    weights = weights or WeightConfiguration()
    flags = flags or ContextFlags()

    rejected: list[RankedPlayer] = []
    scored: list[tuple[Player, RawCategoryScores, ScoreBreakdown]] = []
    for player in players:
        try:
            check_eligibility(player, flags, tables)
        except MissingDataError as exc:
            rejected.append(_reject(player, str(exc), flags))
            continue
        raw, breakdown = compute_raw_scores(player, weights, flags, tables)
        scored.append((player, raw, breakdown))

    population = population_pass([raw for _, raw, _ in scored])
    results = [
        _evaluate(player, raw, breakdown, weights, flags, population, tables)
        for player, raw, breakdown in scored
    ]
    results.extend(rejected)
    results.sort(key=_sort_key)
    logger.debug("Ranked %d players (%d rejected)", len(results), len(rejected))
    return results


__all__ = [
    "RankedPlayer",
    "ScoreBreakdown",
    "check_eligibility",
    "compute_raw_scores",
    "evaluate_player",
    "rank_players",
    "score_player",
]
