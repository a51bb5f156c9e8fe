"""Translate source tables (PFR CSV exports, Supabase rows) into canonical players."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
import logging
from pathlib import Path
import re
from typing import Any

import polars as pl

from qei.core.models import InvalidSeasonRecordError, Player, PlayoffRecord, SeasonRecord
from .reference import MULTI_TEAM_PATTERN, ReferenceTables, load_reference_tables

logger = logging.getLogger(__name__)

PLAYOFF_MIN_ATTEMPTS = 15

_SEASON_IN_NAME = re.compile(r"(19|20)\d{2}")
_RECORD_REGEX = r"^\s*(\d+)\s*-\s*(\d+)(?:\s*-\s*(\d+))?\s*$"

COUNT_COLUMNS = (
    "games_started",
    "completions",
    "attempts",
    "passing_yards",
    "passing_tds",
    "interceptions",
    "sacks",
    "sack_yards",
    "rushing_attempts",
    "rushing_yards",
    "rushing_tds",
    "fumbles",
    "game_winning_drives",
    "fourth_quarter_comebacks",
)

CANONICAL_SCHEMA: dict[str, pl.DataType] = {
    "player_name": pl.Utf8,
    "player_id": pl.Utf8,
    "season": pl.Int32,
    "team": pl.Utf8,
    "position": pl.Utf8,
    "qb_record": pl.Utf8,
    **{column: pl.Int64 for column in COUNT_COLUMNS},
    "any_a": pl.Float64,
}

# Pro-Football-Reference passing export headers. The second "Yds" column
# (sack yards) is suffixed by the CSV reader.
PFR_COLUMNS: Mapping[str, str] = {
    "Player": "player_name",
    "Player-additional": "player_id",
    "Season": "season",
    "Year": "season",
    "Team": "team",
    "Tm": "team",
    "Pos": "position",
    "GS": "games_started",
    "QBrec": "qb_record",
    "Cmp": "completions",
    "Att": "attempts",
    "Yds": "passing_yards",
    "PassingYds": "passing_yards",
    "TD": "passing_tds",
    "Int": "interceptions",
    "Sk": "sacks",
    "Yds.1": "sack_yards",
    "Yds_duplicated_0": "sack_yards",
    "SkYds": "sack_yards",
    "ANY/A": "any_a",
    "RushingAtt": "rushing_attempts",
    "RushingYds": "rushing_yards",
    "RushingTDs": "rushing_tds",
    "Fumbles": "fumbles",
    "Fmb": "fumbles",
    "4QC": "fourth_quarter_comebacks",
    "GWD": "game_winning_drives",
}

# Supabase ``qb_passing_stats`` columns.
SUPABASE_COLUMNS: Mapping[str, str] = {
    "player_name": "player_name",
    "pfr_id": "player_id",
    "season": "season",
    "team": "team",
    "pos": "position",
    "gs": "games_started",
    "qb_rec": "qb_record",
    "cmp": "completions",
    "att": "attempts",
    "yds": "passing_yards",
    "td": "passing_tds",
    "int": "interceptions",
    "sk": "sacks",
    "sk_yds": "sack_yards",
    "any_a": "any_a",
    "rush_att": "rushing_attempts",
    "rush_yds": "rushing_yards",
    "rush_td": "rushing_tds",
    "fumbles": "fumbles",
    "four_qc": "fourth_quarter_comebacks",
    "gwd": "game_winning_drives",
}


def season_from_path(path: Path) -> int | None:
    """Return the four-digit season embedded in a file name, if any."""

    match = _SEASON_IN_NAME.search(Path(path).stem)
    return int(match.group(0)) if match else None


def normalize_frame(
    frame: pl.DataFrame,
    *,
    season: int | None = None,
    tables: ReferenceTables | None = None,
) -> pl.DataFrame:
    """Rename, cast and clean a source frame into the canonical schema.

    Args:
        frame: Source rows using PFR or Supabase column names.
        season: Season to assign when the source has no season column.
        tables: Reference tables used for team-code canonicalisation.
    """

    tables = tables or load_reference_tables()
    sources: dict[str, str] = {}
    for mapping in (PFR_COLUMNS, SUPABASE_COLUMNS):
        for source, target in mapping.items():
            if source in frame.columns and target not in sources:
                sources[target] = source
    renamed = frame.select([pl.col(source).alias(target) for target, source in sources.items()])

    missing = [name for name in CANONICAL_SCHEMA if name not in renamed.columns]
    if missing:
        renamed = renamed.with_columns([pl.lit(None).alias(name) for name in missing])
    if season is not None:
        renamed = renamed.with_columns(pl.col("season").fill_null(season))

    casts = []
    for name, dtype in CANONICAL_SCHEMA.items():
        if dtype == pl.Int64:
            casts.append(
                pl.col(name).cast(pl.Float64, strict=False).fill_null(0).cast(pl.Int64).alias(name)
            )
        elif dtype == pl.Int32:
            casts.append(pl.col(name).cast(pl.Float64, strict=False).cast(pl.Int32, strict=False).alias(name))
        elif dtype == pl.Float64:
            casts.append(pl.col(name).cast(pl.Float64, strict=False).alias(name))
        else:
            casts.append(pl.col(name).cast(pl.Utf8, strict=False).str.strip_chars().alias(name))
    cleaned = renamed.with_columns(casts).select(list(CANONICAL_SCHEMA))

    cleaned = cleaned.filter(
        pl.col("player_name").is_not_null()
        & (pl.col("player_name") != "")
        & (pl.col("player_name") != "League Average")
        & pl.col("season").is_not_null()
    )
    cleaned = cleaned.filter(
        pl.col("position").is_null()
        | (pl.col("position") == "")
        | (pl.col("position").str.to_uppercase() == "QB")
    )
    cleaned = cleaned.with_columns(
        pl.col("player_name").str.replace_all(r"[*+]", "").str.strip_chars(),
        pl.col("team").str.to_uppercase().replace(dict(tables.team_aliases)),
    )
    return cleaned


def merge_multi_team_rows(frame: pl.DataFrame) -> pl.DataFrame:
    """Collapse per-team rows into one row per player-season.

    ``2TM``/``3TM`` summary rows are dropped and the individual team rows are
    summed. ANY/A is averaged by dropbacks; teams keep their listed order.
    """

    per_team = frame.filter(
        pl.col("team").is_null() | ~pl.col("team").str.contains(MULTI_TEAM_PATTERN.pattern)
    )
    per_team = per_team.with_columns(
        pl.when(pl.col("player_id").is_null() | (pl.col("player_id") == ""))
        .then(pl.col("player_name"))
        .otherwise(pl.col("player_id"))
        .alias("_key"),
        pl.col("qb_record").str.extract(_RECORD_REGEX, 1).cast(pl.Int64, strict=False).fill_null(0).alias("wins"),
        pl.col("qb_record").str.extract(_RECORD_REGEX, 2).cast(pl.Int64, strict=False).fill_null(0).alias("losses"),
        pl.col("qb_record").str.extract(_RECORD_REGEX, 3).cast(pl.Int64, strict=False).fill_null(0).alias("ties"),
        (pl.col("attempts") + pl.col("sacks")).alias("_dropbacks"),
    )

    summed = [pl.col(column).sum() for column in (*COUNT_COLUMNS, "wins", "losses", "ties")]
    weighted_any_a = (
        pl.when(pl.col("any_a").is_not_null().any())
        .then(
            (pl.col("any_a") * pl.col("_dropbacks")).sum()
            / pl.col("_dropbacks").filter(pl.col("any_a").is_not_null()).sum()
        )
        .otherwise(None)
    )
    merged = per_team.group_by(["_key", "season"], maintain_order=True).agg(
        pl.col("player_name").first(),
        pl.col("player_id").drop_nulls().first(),
        pl.col("team").drop_nulls(),
        pl.col("games_started").alias("team_starts"),
        *summed,
        weighted_any_a.alias("any_a"),
    )
    return merged.rename({"team": "teams"}).drop("_key")


def read_passing_csv(path: Path, *, season: int | None = None) -> pl.DataFrame:
    """Read a PFR passing export; the season defaults to the year in the file name."""

    path = Path(path)
    season = season if season is not None else season_from_path(path)
    frame = pl.read_csv(path, infer_schema_length=0, truncate_ragged_lines=True)
    logger.debug("Read %d rows from %s", frame.height, path)
    return normalize_frame(frame, season=season)


def frame_from_rows(rows: Iterable[Mapping[str, Any]]) -> pl.DataFrame:
    """Build a canonical frame from row dictionaries (e.g. Supabase JSON)."""

    materialized = [dict(row) for row in rows]
    if not materialized:
        return pl.DataFrame(schema=CANONICAL_SCHEMA)
    frame = pl.DataFrame(materialized, infer_schema_length=None)
    return normalize_frame(frame)


def _season_from_row(row: Mapping[str, Any], playoff: PlayoffRecord | None) -> SeasonRecord:
    teams = tuple(row.get("teams") or ())
    starts = row.get("team_starts") or ()
    by_team: dict[str, int] = {}
    for team, games in zip(teams, starts):
        by_team[team] = by_team.get(team, 0) + int(games or 0)
    payload = dict(row)
    payload.update(teams=teams, games_started_by_team=by_team, playoff=playoff)
    return SeasonRecord.from_row(payload)


def _playoff_lookup(playoffs: pl.DataFrame | None) -> dict[tuple[str, int], PlayoffRecord]:
    lookup: dict[tuple[str, int], PlayoffRecord] = {}
    if playoffs is None or playoffs.is_empty():
        return lookup
    for row in merge_multi_team_rows(playoffs).iter_rows(named=True):
        if row["attempts"] < PLAYOFF_MIN_ATTEMPTS:
            continue
        record = PlayoffRecord.from_row(row)
        key = row.get("player_id") or row["player_name"]
        lookup[(key, row["season"])] = record
        lookup.setdefault((row["player_name"], row["season"]), record)
    return lookup


def build_players(regular: pl.DataFrame, playoffs: pl.DataFrame | None = None) -> list[Player]:
    """Group canonical season rows into :class:`Player` objects.

    Playoff records are attached only to player-seasons that also have a
    regular-season row and at least 15 postseason pass attempts.
    """

    playoff_records = _playoff_lookup(playoffs)
    seasons: dict[str, list[SeasonRecord]] = {}
    names: dict[str, str] = {}
    ids: dict[str, str | None] = {}

    for row in merge_multi_team_rows(regular).iter_rows(named=True):
        key = row.get("player_id") or row["player_name"]
        playoff = playoff_records.get((key, row["season"])) or playoff_records.get(
            (row["player_name"], row["season"])
        )
        try:
            record = _season_from_row(row, playoff)
        except InvalidSeasonRecordError as exc:
            logger.warning("Skipping %s: %s", row["player_name"], exc)
            continue
        seasons.setdefault(key, []).append(record)
        names.setdefault(key, row["player_name"])
        ids.setdefault(key, row.get("player_id"))

    players = [
        Player(name=names[key], player_id=ids[key], seasons=tuple(records))
        for key, records in seasons.items()
    ]
    logger.info("Built %d players from %d season rows", len(players), regular.height)
    return players


def load_players_from_csv(
    paths: Sequence[Path],
    playoff_paths: Sequence[Path] = (),
) -> list[Player]:
    """Read regular-season (and optional playoff) CSV exports into players."""

    regular = [read_passing_csv(path) for path in paths]
    playoff = [read_passing_csv(path) for path in playoff_paths]
    regular_frame = pl.concat(regular, how="vertical_relaxed") if regular else pl.DataFrame(schema=CANONICAL_SCHEMA)
    playoff_frame = pl.concat(playoff, how="vertical_relaxed") if playoff else None
    return build_players(regular_frame, playoff_frame)


__all__ = [
    "CANONICAL_SCHEMA",
    "COUNT_COLUMNS",
    "PFR_COLUMNS",
    "PLAYOFF_MIN_ATTEMPTS",
    "SUPABASE_COLUMNS",
    "build_players",
    "frame_from_rows",
    "load_players_from_csv",
    "merge_multi_team_rows",
    "normalize_frame",
    "read_passing_csv",
    "season_from_path",
]
