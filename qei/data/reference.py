"""Loader for the versioned JSON calibration tables shipped with the package."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
import json
import logging
from pathlib import Path
import re
from typing import Any, Mapping

REFERENCE_DIRECTORY = Path(__file__).resolve().parent / "reference"

REFERENCE_FILES = (
    "seasons.json",
    "performance_benchmarks.json",
    "team_quality.json",
    "playoffs.json",
    "teams.json",
)
YEAR_WEIGHT_TABLES = ("performance", "playoff", "regular_season", "stability")
TEAM_COMPONENTS = ("offensive_line", "weapons", "defense")

MULTI_TEAM_PATTERN = re.compile(r"^\d+TM$", re.IGNORECASE)

logger = logging.getLogger(__name__)


class ReferenceDataError(RuntimeError):
    """Raised when a reference table is missing or malformed."""


def _read_json(directory: Path, name: str) -> dict[str, Any]:
    path = directory / name
    try:
        with path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
    except FileNotFoundError as exc:
        raise ReferenceDataError(f"Reference table missing: {path}") from exc
    except json.JSONDecodeError as exc:
        raise ReferenceDataError(f"Reference table {path} is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise ReferenceDataError(f"Reference table {path} must contain a JSON object")
    return payload


def _year_keyed(mapping: Mapping[str, Any], label: str) -> dict[int, Any]:
    try:
        return {int(year): value for year, value in mapping.items()}
    except (TypeError, ValueError) as exc:
        raise ReferenceDataError(f"{label} must be keyed by season year") from exc


def _require(payload: Mapping[str, Any], key: str, source: str) -> Any:
    if key not in payload:
        raise ReferenceDataError(f"{source} is missing the '{key}' section")
    return payload[key]


@dataclass(frozen=True)
class BenchmarkTables:
    """Percentile cut points and point allocation for the performance score."""

    benchmarks: Mapping[str, Mapping[str, Any]]
    tier_multipliers: Mapping[str, float]
    points: Mapping[str, Mapping[str, float]]
    volume_scales: Mapping[str, Mapping[str, float]]
    turnover_steps: tuple[tuple[int, float], ...]
    turnover_otherwise: float


@dataclass(frozen=True)
class TeamQualityTables:
    seasons: Mapping[int, Mapping[str, Mapping[str, float]]]
    totals: Mapping[int, Mapping[str, float]]
    missing_team_defaults: Mapping[str, float]

    def component_table(self, year: int, component: str) -> Mapping[str, float] | None:
        season = self.seasons.get(year)
        if season is None:
            return None
        return season.get(component)

    def total_for(self, year: int, team: str | None) -> float | None:
        if team is None:
            return None
        return self.totals.get(year, {}).get(team)


@dataclass(frozen=True)
class PlayoffTables:
    round_weights: Mapping[str, Mapping[str, float]]
    clutch_multipliers: Mapping[str, float]
    bye_bonus: float
    bye_teams: Mapping[int, frozenset[str]]
    known_champions: Mapping[int, frozenset[str]]
    achievement_points: Mapping[str, float]
    achievement_cap: float
    progress: Mapping[int, Mapping[str, Mapping[str, str]]]

    def had_bye(self, team: str | None, year: int) -> bool:
        return team is not None and team in self.bye_teams.get(year, frozenset())

    def is_known_champion(self, team: str | None, year: int) -> bool:
        return team is not None and team in self.known_champions.get(year, frozenset())

    def progress_for(self, team: str | None, year: int) -> Mapping[str, str] | None:
        if team is None:
            return None
        return self.progress.get(year, {}).get(team)


@dataclass(frozen=True)
class ReferenceTables:
    """Immutable view over every calibration table the engine reads."""

    current_season: int
    year_weights: Mapping[str, Mapping[int, float]]
    performance: BenchmarkTables
    team_quality: TeamQualityTables
    playoffs: PlayoffTables
    franchises: tuple[str, ...]
    team_aliases: Mapping[str, str]

    def weights_for(self, table: str, season_year: int | None = None) -> dict[int, float]:
        """Return the named year-weight table, or ``{season_year: 1.0}``."""

        if season_year is not None:
            return {int(season_year): 1.0}
        try:
            return dict(self.year_weights[table])
        except KeyError:
            raise ReferenceDataError(
                f"Unknown year-weight table '{table}'. Expected one of {YEAR_WEIGHT_TABLES}."
            ) from None

    def normalize_team(self, code: str | None) -> str | None:
        """Map a source team code onto its canonical franchise code.

        Multi-team summary codes (``2TM``) and blanks return ``None``.
        """

        if code is None:
            return None
        cleaned = str(code).strip().upper()
        if not cleaned or MULTI_TEAM_PATTERN.match(cleaned):
            return None
        return self.team_aliases.get(cleaned, cleaned)


def _build_benchmarks(payload: Mapping[str, Any]) -> BenchmarkTables:
    source = "performance_benchmarks.json"
    burden = _require(payload, "turnover_burden", source)
    try:
        steps = tuple(
            (int(step["max_turnovers"]), float(step["adjustment"]))
            for step in burden["steps"]
        )
        otherwise = float(burden["otherwise"])
    except (KeyError, TypeError, ValueError) as exc:
        raise ReferenceDataError(f"{source} has a malformed turnover_burden table") from exc
    return BenchmarkTables(
        benchmarks=_require(payload, "benchmarks", source),
        tier_multipliers=_require(payload, "tier_multipliers", source),
        points=_require(payload, "points", source),
        volume_scales=_require(payload, "volume_scales", source),
        turnover_steps=tuple(sorted(steps)),
        turnover_otherwise=otherwise,
    )


def _build_team_quality(payload: Mapping[str, Any]) -> TeamQualityTables:
    source = "team_quality.json"
    seasons = _year_keyed(_require(payload, "seasons", source), "team_quality.seasons")
    maximums = _require(payload, "component_maximums", source)
    for year, tables in seasons.items():
        missing = [component for component in TEAM_COMPONENTS if component not in tables]
        if missing:
            raise ReferenceDataError(f"{source} season {year} lacks components {missing}")
        for component in TEAM_COMPONENTS:
            out_of_range = sorted(
                team
                for team, value in tables[component].items()
                if not 0 <= value <= maximums[component]
            )
            if out_of_range:
                raise ReferenceDataError(
                    f"{source} season {year} {component} scores outside 0-{maximums[component]}: {out_of_range}"
                )
    return TeamQualityTables(
        seasons=seasons,
        totals=_year_keyed(_require(payload, "totals", source), "team_quality.totals"),
        missing_team_defaults=_require(payload, "missing_team_defaults", source),
    )


def _build_playoffs(payload: Mapping[str, Any]) -> PlayoffTables:
    source = "playoffs.json"
    bye_teams = _year_keyed(_require(payload, "bye_teams", source), "playoffs.bye_teams")
    champions = _year_keyed(payload.get("known_champions", {}), "playoffs.known_champions")
    return PlayoffTables(
        round_weights=_require(payload, "round_weights", source),
        clutch_multipliers=_require(payload, "clutch_multipliers", source),
        bye_bonus=float(_require(payload, "bye_bonus", source)),
        bye_teams={year: frozenset(teams) for year, teams in bye_teams.items()},
        known_champions={year: frozenset(teams) for year, teams in champions.items()},
        achievement_points=_require(payload, "achievement_points", source),
        achievement_cap=float(_require(payload, "achievement_cap", source)),
        progress=_year_keyed(payload.get("progress", {}), "playoffs.progress"),
    )


def load_reference_tables_from(directory: Path) -> ReferenceTables:
    """Load and validate the reference tables stored in ``directory``."""

    payloads = {name: _read_json(directory, name) for name in REFERENCE_FILES}
    seasons = payloads["seasons.json"]
    year_weights_raw = _require(seasons, "year_weights", "seasons.json")
    year_weights: dict[str, dict[int, float]] = {}
    for table in YEAR_WEIGHT_TABLES:
        weights = _year_keyed(_require(year_weights_raw, table, "seasons.json"), f"year_weights.{table}")
        year_weights[table] = {year: float(value) for year, value in weights.items()}
        total = sum(year_weights[table].values())
        if abs(total - 1.0) > 1e-6:
            logger.warning("Year-weight table '%s' sums to %.4f rather than 1.0", table, total)

    teams = payloads["teams.json"]
    tables = ReferenceTables(
        current_season=int(_require(seasons, "current_season", "seasons.json")),
        year_weights=year_weights,
        performance=_build_benchmarks(payloads["performance_benchmarks.json"]),
        team_quality=_build_team_quality(payloads["team_quality.json"]),
        playoffs=_build_playoffs(payloads["playoffs.json"]),
        franchises=tuple(_require(teams, "franchises", "teams.json")),
        team_aliases={
            str(alias).upper(): str(code).upper()
            for alias, code in _require(teams, "aliases", "teams.json").items()
        },
    )
    logger.debug("Loaded reference tables from %s", directory)
    return tables


@lru_cache(maxsize=1)
def load_reference_tables() -> ReferenceTables:
    """Return the packaged reference tables (loaded once per process)."""

    return load_reference_tables_from(REFERENCE_DIRECTORY)


__all__ = [
    "MULTI_TEAM_PATTERN",
    "REFERENCE_DIRECTORY",
    "REFERENCE_FILES",
    "TEAM_COMPONENTS",
    "YEAR_WEIGHT_TABLES",
    "BenchmarkTables",
    "PlayoffTables",
    "ReferenceDataError",
    "ReferenceTables",
    "TeamQualityTables",
    "load_reference_tables",
    "load_reference_tables_from",
]
