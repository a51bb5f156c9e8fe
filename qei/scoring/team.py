"""Team success score: regular-season winning, availability and playoff résumé."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import asdict, dataclass
import logging

from qei.core.models import MAX_REGULAR_SEASON_STARTS, PlayoffRecord, SeasonRecord
from qei.core.weights import DEFAULT_TEAM_WEIGHTS
from qei.data.reference import PlayoffTables, ReferenceTables

from .common import playoff_for, resolve_tables, weight_share, weighted_seasons

logger = logging.getLogger(__name__)

WIN_CURVE_EXPONENT = 0.8
REGULAR_SEASON_POINTS = 50.0
AVAILABILITY_POINTS = 15.0
MAX_TEAM_SCORE = 100.0

_DEFAULT_TOTAL = sum(DEFAULT_TEAM_WEIGHTS.values())
DEFAULT_REGULAR_SHARE = DEFAULT_TEAM_WEIGHTS["regular_season"] / _DEFAULT_TOTAL
DEFAULT_PLAYOFF_SHARE = DEFAULT_TEAM_WEIGHTS["playoff"] / _DEFAULT_TOTAL


@dataclass(frozen=True)
class TeamScore:
    """Components of the team success score."""

    win_percentage: float = 0.0
    regular_season: float = 0.0
    availability: float = 0.0
    playoff_achievement: float = 0.0
    score: float = 0.0

    def to_dict(self) -> dict[str, float]:
        return asdict(self)


def playoff_weighted_wins(
    playoff: PlayoffRecord,
    team: str | None,
    year: int,
    playoffs: PlayoffTables,
) -> float:
    """Convert a playoff win-loss line into round-weighted wins.

    The round path is inferred from the win-loss pattern; known champions
    disambiguate the 2-1 case.
    """

    rounds = playoffs.round_weights
    wc, div = rounds["wild_card"], rounds["divisional"]
    conf, sb = rounds["conference"], rounds["super_bowl"]
    wins, losses = playoff.wins, playoff.losses

    if wins + losses == 0:
        return 0.0
    if (wins, losses) == (4, 0):
        return wc["win"] + div["win"] + conf["win"] + sb["win"]
    if (wins, losses) == (3, 1):
        return wc["win"] + div["win"] + conf["win"] + sb["loss"]
    if (wins, losses) == (3, 0):
        return div["win"] + conf["win"] + sb["win"]
    if (wins, losses) == (2, 1):
        if playoffs.is_known_champion(team, year):
            return div["win"] + conf["win"] + sb["win"]
        return div["win"] + conf["win"] + sb["loss"]
    if (wins, losses) == (2, 0):
        return div["win"] + conf["win"]
    if (wins, losses) == (1, 1):
        return wc["win"] + div["loss"]
    if (wins, losses) == (1, 0):
        return wc["win"]
    if (wins, losses) == (0, 1):
        return wc["loss"]

    win_weight = div["win"] if wins > losses else wc["win"]
    return wins * win_weight + losses * wc["loss"]


def bye_bonus(playoff: PlayoffRecord, team: str | None, year: int, playoffs: PlayoffTables) -> float:
    """Bonus for a known top seed that won at least once in three or fewer games."""

    if playoff.games <= 3 and playoff.wins >= 1 and playoffs.had_bye(team, year):
        return playoffs.bye_bonus
    return 0.0


def playoff_achievement_points(
    playoff: PlayoffRecord,
    team: str | None,
    year: int,
    playoffs: PlayoffTables,
) -> float:
    """Unweighted achievement points earned in a single postseason."""

    if playoff.games <= 0:
        return 0.0

    points = playoffs.achievement_points
    super_bowl_win = super_bowl_appearance = False
    conference_win = conference_appearance = False

    progress = playoffs.progress_for(team, year)
    if progress:
        reached = progress.get("reached")
        if reached == "Super Bowl":
            super_bowl_appearance = conference_win = conference_appearance = True
            super_bowl_win = progress.get("result") == "Won"
        elif reached == "Conference":
            conference_win = conference_appearance = True
        elif reached == "Divisional":
            conference_appearance = True

    earned = 0.0
    if super_bowl_win:
        earned += points["super_bowl_win"]
    elif super_bowl_appearance:
        earned += points["super_bowl_appearance"]
    if conference_win:
        earned += points["conference_win"]
    elif conference_appearance:
        earned += points["conference_appearance"]
    earned += playoff.games * points["per_game"]
    return earned


def calculate_team_score(
    seasons: Sequence[SeasonRecord],
    weights: Mapping[str, float] | None = None,
    *,
    include_playoffs: bool = True,
    season_year: int | None = None,
    tables: ReferenceTables | None = None,
) -> TeamScore:
    """Compute the 0-100 team success score.

    Args:
        seasons: The player's season records.
        weights: ``regular_season`` / ``playoff`` sub-weights.
        include_playoffs: Whether playoff sub-records count.
        season_year: Restrict to a single season (weight 1.0).
        tables: Reference tables; the packaged tables when omitted.

    Returns:
        TeamScore: ``win%^0.8 * 50`` plus availability (0-15) scaled by the
        regular-season share, plus career playoff achievement (capped at 45)
        scaled by the playoff share, capped at 100.
    """

    tables = resolve_tables(tables)
    playoffs = tables.playoffs
    year_weights = tables.weights_for("regular_season", season_year)
    weights = weights if weights is not None else DEFAULT_TEAM_WEIGHTS

    weighted_win_pct = 0.0
    weighted_availability = 0.0
    achievement = 0.0
    total_weight = 0.0

    for record, weight in weighted_seasons(seasons, year_weights):
        if not record.has_record:
            logger.debug("Season %s has no win-loss record; skipping for team score", record.season)
            continue
        team = record.team
        playoff = playoff_for(record, include_playoffs)

        effective_wins = float(record.wins)
        playoff_starts = 0
        playoff_games = 0
        if playoff is not None:
            effective_wins += playoff_weighted_wins(playoff, team, record.season, playoffs)
            effective_wins += bye_bonus(playoff, team, record.season, playoffs)
            playoff_starts = playoff.games_started
            playoff_games = playoff.games
            achievement += playoff_achievement_points(playoff, team, record.season, playoffs) * weight

        win_pct = min(1.0, effective_wins / record.regular_season_games)
        availability = min(
            1.0,
            (record.games_started + playoff_starts) / (MAX_REGULAR_SEASON_STARTS + playoff_games),
        )
        weighted_win_pct += win_pct * weight
        weighted_availability += availability * weight
        total_weight += weight

    if total_weight == 0:
        return TeamScore()

    win_pct = weighted_win_pct / total_weight
    regular_season = (win_pct ** WIN_CURVE_EXPONENT) * REGULAR_SEASON_POINTS
    availability = (weighted_availability / total_weight) * AVAILABILITY_POINTS
    playoff_achievement = min(playoffs.achievement_cap, achievement)

    regular_scale = weight_share(weights, "regular_season") / DEFAULT_REGULAR_SHARE
    playoff_scale = weight_share(weights, "playoff") / DEFAULT_PLAYOFF_SHARE
    score = (regular_season + availability) * regular_scale + playoff_achievement * playoff_scale

    return TeamScore(
        win_percentage=win_pct,
        regular_season=regular_season,
        availability=availability,
        playoff_achievement=playoff_achievement,
        score=max(0.0, min(MAX_TEAM_SCORE, score)),
    )


__all__ = [
    "TeamScore",
    "bye_bonus",
    "calculate_team_score",
    "playoff_achievement_points",
    "playoff_weighted_wins",
]
