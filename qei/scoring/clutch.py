"""Clutch performance score from game-winning drives and comebacks."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import asdict, dataclass
import logging

from qei.core.models import PlayoffRecord, SeasonRecord
from qei.core.weights import DEFAULT_CLUTCH_WEIGHTS
from qei.data.reference import PlayoffTables, ReferenceTables

from .common import playoff_for, resolve_tables, weight_share, weighted_seasons

logger = logging.getLogger(__name__)

GWD_CAP = 40.0
COMEBACK_CAP = 25.0
CLUTCH_RATE_CAP = 15.0
PLAYOFF_BONUS_CAP = 20.0

GWD_RATE_SCALE = 120.0
COMEBACK_RATE_SCALE = 100.0
CLUTCH_RATE_SCALE = 50.0

COMPONENT_CAPS = {
    "game_winning_drives": GWD_CAP,
    "fourth_quarter_comebacks": COMEBACK_CAP,
    "clutch_rate": CLUTCH_RATE_CAP,
    "playoff_bonus": PLAYOFF_BONUS_CAP,
}


@dataclass(frozen=True)
class ClutchScore:
    gwd_per_game: float = 0.0
    comebacks_per_game: float = 0.0
    game_winning_drives: float = 0.0
    fourth_quarter_comebacks: float = 0.0
    clutch_rate: float = 0.0
    playoff_bonus: float = 0.0
    score: float = 0.0

    def to_dict(self) -> dict[str, float]:
        return asdict(self)


def playoff_clutch_multiplier(playoff: PlayoffRecord, playoffs: PlayoffTables) -> float:
    """Average round multiplier implied by the number of playoff games played."""

    multipliers = playoffs.clutch_multipliers
    rounds_by_games = {
        4: ("wild_card", "divisional", "conference", "super_bowl"),
        3: ("divisional", "conference", "super_bowl"),
        2: ("divisional", "conference"),
        1: ("wild_card",),
    }
    rounds = rounds_by_games.get(playoff.games)
    if not rounds:
        return float(multipliers["wild_card"])
    return sum(float(multipliers[name]) for name in rounds) / len(rounds)


def calculate_clutch_score(
    seasons: Sequence[SeasonRecord],
    weights: Mapping[str, float] | None = None,
    *,
    include_playoffs: bool = True,
    season_year: int | None = None,
    tables: ReferenceTables | None = None,
) -> ClutchScore:
    """Compute the clutch score (each component capped, sum up to 100).

    Regular-season and playoff GWD/4QC are pooled into per-start rates. When
    playoffs are included, playoff clutch events earn the round multiplier
    and the playoff success component rewards actual postseason wins.
    """

    tables = resolve_tables(tables)
    year_weights = tables.weights_for("performance", season_year)
    weights = weights if weights is not None else DEFAULT_CLUTCH_WEIGHTS

    total_gwd = 0.0
    total_comebacks = 0.0
    total_games = 0.0
    total_playoff_games = 0.0
    playoff_wins = 0.0
    playoff_decisions = 0.0
    multiplier_bonus = 0.0
    total_weight = 0.0

    for record, weight in weighted_seasons(seasons, year_weights):
        gwd = record.game_winning_drives
        comebacks = record.fourth_quarter_comebacks
        games = record.games_started

        playoff = playoff_for(record, include_playoffs)
        if playoff is not None:
            gwd += playoff.game_winning_drives
            comebacks += playoff.fourth_quarter_comebacks
            games += playoff.games_started
            multiplier = playoff_clutch_multiplier(playoff, tables.playoffs)
            multiplier_bonus += playoff.clutch_events * (multiplier - 1.0) * weight
            total_playoff_games += playoff.games_started * weight
            playoff_wins += playoff.wins * weight
            playoff_decisions += playoff.games * weight

        total_gwd += gwd * weight
        total_comebacks += comebacks * weight
        total_games += games * weight
        total_weight += weight

    if total_weight == 0 or total_games == 0:
        return ClutchScore()

    gwd_per_game = total_gwd / total_games
    comebacks_per_game = total_comebacks / total_games

    components = {
        "game_winning_drives": min(GWD_CAP, gwd_per_game * GWD_RATE_SCALE),
        "fourth_quarter_comebacks": min(COMEBACK_CAP, comebacks_per_game * COMEBACK_RATE_SCALE),
        "clutch_rate": min(CLUTCH_RATE_CAP, (gwd_per_game + comebacks_per_game) * CLUTCH_RATE_SCALE),
        "playoff_bonus": 0.0,
    }
    if include_playoffs and total_playoff_games > 0:
        win_rate = playoff_wins / playoff_decisions if playoff_decisions > 0 else 0.0
        components["playoff_bonus"] = min(
            PLAYOFF_BONUS_CAP,
            win_rate * PLAYOFF_BONUS_CAP
            + (total_playoff_games / total_weight) * 2.0
            + multiplier_bonus / total_weight,
        )

    score = 100.0 * sum(
        weight_share(weights, name) * value / COMPONENT_CAPS[name]
        for name, value in components.items()
    )
    return ClutchScore(
        gwd_per_game=gwd_per_game,
        comebacks_per_game=comebacks_per_game,
        score=score,
        **components,
    )


__all__ = ["COMPONENT_CAPS", "ClutchScore", "calculate_clutch_score", "playoff_clutch_multiplier"]
