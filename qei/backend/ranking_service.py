"""Backend facade that loads quarterbacks, filters the field and ranks it."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
import logging
from pathlib import Path

import polars as pl

from qei.core.context import ContextFlags
from qei.core.models import Player, SeasonRecord
from qei.core.weights import WeightConfiguration, preset
from qei.data.ingest import build_players, frame_from_rows, load_players_from_csv
from qei.data.reference import ReferenceTables, load_reference_tables
from qei.data.supabase import PASSING_STATS_TABLE, SupabaseClient
from qei.scoring.engine import RankedPlayer, rank_players

logger = logging.getLogger(__name__)

DEFAULT_MIN_ATTEMPTS = 15
DEFAULT_MIN_GAMES = 2
EARLY_ERA_CUTOFF = 1967

RANKING_SCHEMA: dict[str, pl.DataType] = {
    "rank": pl.Int32,
    "player": pl.Utf8,
    "player_id": pl.Utf8,
    "team": pl.Utf8,
    "team_score": pl.Float64,
    "stats_score": pl.Float64,
    "clutch_score": pl.Float64,
    "durability_score": pl.Float64,
    "support_score": pl.Float64,
    "qei": pl.Float64,
    "tier": pl.Utf8,
    "support_total": pl.Float64,
    "rejection": pl.Utf8,
}


class QBRankingService:
    """Facade used by the CLI to build QEI rankings."""

    def __init__(
        self,
        players: Iterable[Player] | None = None,
        *,
        client: SupabaseClient | None = None,
        tables: ReferenceTables | None = None,
        min_attempts: int = DEFAULT_MIN_ATTEMPTS,
        min_games: int = DEFAULT_MIN_GAMES,
        playoff_table: str | None = None,
    ) -> None:
        self._players: list[Player] = list(players or [])
        self._client = client
        self.tables = tables or load_reference_tables()
        self.min_attempts = min_attempts
        self.min_games = min_games
        self.playoff_table = playoff_table

    @property
    def players(self) -> list[Player]:
        return list(self._players)

    def load_from_csv(self, paths: Sequence[Path], playoff_paths: Sequence[Path] = ()) -> list[Player]:
        """Replace the loaded field with players read from CSV exports."""

        self._players = load_players_from_csv(paths, playoff_paths)
        return self.players

    def load_from_supabase(
        self,
        seasons: Iterable[int] | None = None,
        *,
        table: str = PASSING_STATS_TABLE,
    ) -> list[Player]:
        """Replace the loaded field with players fetched from Supabase."""

        client = self._client or SupabaseClient()
        season_list = sorted(set(seasons)) if seasons is not None else self.default_seasons()
        try:
            regular = frame_from_rows(client.fetch_passing_stats(season_list, table=table))
            playoffs = None
            if self.playoff_table:
                season_filter = f"in.({','.join(str(season) for season in season_list)})"
                playoffs = frame_from_rows(
                    client.fetch_rows(self.playoff_table, filters={"season": season_filter})
                )
        finally:
            if self._client is None:
                client.close()
        self._players = build_players(regular, playoffs)
        return self.players

    def default_seasons(self, season_year: int | None = None) -> list[int]:
        seasons = set(self.tables.year_weights["performance"])
        if season_year is not None:
            seasons.add(season_year)
        return sorted(seasons)

    def minimum_games(self, season_year: int) -> int:
        """Era rule: the in-progress season and pre-1967 seasons need one start."""

        if season_year == self.tables.current_season or season_year < EARLY_ERA_CUTOFF:
            return 1
        return self.min_games

    def _ranked_seasons(self, player: Player, flags: ContextFlags) -> list[SeasonRecord]:
        if flags.season_year is not None:
            record = player.season(flags.season_year)
            return [record] if record else []
        return player.seasons_for(self.tables.year_weights["performance"])

    def is_eligible(self, player: Player, flags: ContextFlags) -> bool:
        """Apply the attempts / games-started filter for the ranked field."""

        seasons = self._ranked_seasons(player, flags)
        if not seasons:
            return False
        attempts = sum(record.attempts for record in seasons)
        games = sum(record.games_started for record in seasons)
        required_games = (
            self.minimum_games(flags.season_year) if flags.season_year is not None else self.min_games
        )
        return attempts >= self.min_attempts and games >= required_games

    def eligible_players(self, flags: ContextFlags | None = None) -> list[Player]:
        flags = flags or ContextFlags()
        eligible = [player for player in self._players if self.is_eligible(player, flags)]
        logger.info("%d of %d players meet the ranking filter", len(eligible), len(self._players))
        return eligible

    def rank(
        self,
        weights: WeightConfiguration | None = None,
        flags: ContextFlags | None = None,
        *,
        preset_name: str | None = None,
    ) -> list[RankedPlayer]:
        """Rank the eligible field with explicit weights or a named preset."""

        if weights is None and preset_name:
            weights = preset(preset_name)
        flags = flags or ContextFlags()
        return rank_players(self.eligible_players(flags), weights, flags, tables=self.tables)

    def _primary_team(self, player: Player, flags: ContextFlags) -> tuple[str | None, int | None]:
        if flags.season_year is not None:
            return player.primary_team(flags.season_year), flags.season_year
        seasons = self._ranked_seasons(player, flags)
        if not seasons:
            return player.primary_team(), None
        latest = seasons[-1]
        return latest.team, latest.season

    def ranking_frame(
        self,
        results: Sequence[RankedPlayer],
        flags: ContextFlags | None = None,
    ) -> pl.DataFrame:
        """Return the ranking as a Polars frame."""

        flags = flags or ContextFlags()
        rows = []
        for position, entry in enumerate(results, start=1):
            team, year = self._primary_team(entry.player, flags)
            support_total = self.tables.team_quality.total_for(year, team) if year is not None else None
            rows.append(
                {
                    "rank": position,
                    "player": entry.player.name,
                    "player_id": entry.player.player_id,
                    "team": team,
                    "team_score": entry.scores.team,
                    "stats_score": entry.scores.stats,
                    "clutch_score": entry.scores.clutch,
                    "durability_score": entry.scores.durability,
                    "support_score": entry.scores.support,
                    "qei": entry.qei,
                    "tier": entry.tier,
                    "support_total": float(support_total) if support_total is not None else None,
                    "rejection": entry.rejection,
                }
            )
        return pl.DataFrame(rows, schema=RANKING_SCHEMA)


__all__ = [
    "DEFAULT_MIN_ATTEMPTS",
    "DEFAULT_MIN_GAMES",
    "QBRankingService",
    "RANKING_SCHEMA",
]
