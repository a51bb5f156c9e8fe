"""Canonical player and season records consumed by the scoring engine."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass, field, replace
import logging
import re
from typing import Any

logger = logging.getLogger(__name__)

MAX_REGULAR_SEASON_STARTS = 17

_RECORD_PATTERN = re.compile(r"^\s*(\d+)\s*-\s*(\d+)(?:\s*-\s*(\d+))?\s*$")


class MissingDataError(RuntimeError):
    """Raised when a player has no usable season data for a computation."""


class InvalidSeasonRecordError(ValueError):
    """Raised when a season record violates the canonical invariants."""


def parse_qb_record(value: Any) -> tuple[int, int, int]:
    """Parse a ``"W-L-T"`` record string into ``(wins, losses, ties)``.

    Ties are optional and blanks parse as ``0-0-0``.
    """

    if value is None:
        return 0, 0, 0
    match = _RECORD_PATTERN.match(str(value))
    if not match:
        if str(value).strip():
            logger.debug("Unable to parse QB record '%s'", value)
        return 0, 0, 0
    wins, losses, ties = match.groups()
    return int(wins), int(losses), int(ties or 0)


def _parse_int(value: Any) -> int:
    if value is None or value == "":
        return 0
    try:
        return int(float(value))
    except (TypeError, ValueError):
        logger.debug("Unable to parse integer value '%s'", value)
        return 0


def _parse_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.debug("Unable to parse float value '%s'", value)
        return None


@dataclass(frozen=True)
class PlayoffRecord:
    """Postseason sub-record for one player-year."""

    wins: int = 0
    losses: int = 0
    games_started: int = 0
    attempts: int = 0
    game_winning_drives: int = 0
    fourth_quarter_comebacks: int = 0

    @property
    def games(self) -> int:
        return self.wins + self.losses

    @property
    def clutch_events(self) -> int:
        return self.game_winning_drives + self.fourth_quarter_comebacks

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "PlayoffRecord":
        """Create a playoff record from a canonical row."""

        wins = row.get("wins")
        losses = row.get("losses")
        if wins is None and losses is None and row.get("qb_record") is not None:
            wins, losses, _ = parse_qb_record(row.get("qb_record"))
        return cls(
            wins=_parse_int(wins),
            losses=_parse_int(losses),
            games_started=_parse_int(row.get("games_started")),
            attempts=_parse_int(row.get("attempts")),
            game_winning_drives=_parse_int(row.get("game_winning_drives")),
            fourth_quarter_comebacks=_parse_int(row.get("fourth_quarter_comebacks")),
        )


@dataclass(frozen=True)
class SeasonRecord:
    """One regular season for one quarterback in the canonical schema."""

    season: int
    teams: tuple[str, ...] = ()
    games_started_by_team: Mapping[str, int] = field(default_factory=dict)
    games_started: int = 0
    wins: int = 0
    losses: int = 0
    ties: int = 0
    attempts: int = 0
    completions: int = 0
    passing_yards: int = 0
    passing_tds: int = 0
    interceptions: int = 0
    sacks: int = 0
    sack_yards: int = 0
    any_a: float | None = None
    rushing_attempts: int = 0
    rushing_yards: int = 0
    rushing_tds: int = 0
    fumbles: int = 0
    game_winning_drives: int = 0
    fourth_quarter_comebacks: int = 0
    playoff: PlayoffRecord | None = None

    def __post_init__(self) -> None:
        if self.completions > self.attempts:
            raise InvalidSeasonRecordError(
                f"{self.season}: completions ({self.completions}) exceed attempts ({self.attempts})"
            )
        if not 0 <= self.games_started <= MAX_REGULAR_SEASON_STARTS:
            raise InvalidSeasonRecordError(
                f"{self.season}: games started must be within 0-{MAX_REGULAR_SEASON_STARTS}, "
                f"got {self.games_started}"
            )
        object.__setattr__(self, "teams", tuple(self.teams))
        object.__setattr__(self, "games_started_by_team", dict(self.games_started_by_team))

    @property
    def team(self) -> str | None:
        """Team with the most starts (first listed wins ties)."""

        if not self.teams:
            return None
        if not self.games_started_by_team:
            return self.teams[0]
        return max(self.teams, key=lambda code: self.games_started_by_team.get(code, 0))

    @property
    def regular_season_games(self) -> int:
        return self.wins + self.losses + self.ties

    @property
    def has_record(self) -> bool:
        return self.regular_season_games > 0

    @property
    def turnovers(self) -> int:
        return self.interceptions + self.fumbles

    def is_empty(self) -> bool:
        """``True`` when the season has no attempts, starts, or yards."""

        return self.attempts <= 0 or self.games_started <= 0 or self.passing_yards == 0

    def adjusted_net_yards_per_attempt(self) -> float:
        """Recorded ANY/A, or the value derived from the box-score counts."""

        if self.any_a is not None:
            return self.any_a
        dropbacks = self.attempts + self.sacks
        if dropbacks <= 0:
            return 0.0
        return (
            self.passing_yards + 20 * self.passing_tds - 45 * self.interceptions - self.sack_yards
        ) / dropbacks

    def without_playoffs(self) -> "SeasonRecord":
        if self.playoff is None:
            return self
        return replace(self, playoff=None)

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["teams"] = list(self.teams)
        return payload

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "SeasonRecord":
        """Create a season from a canonical snake_case row."""

        wins = row.get("wins")
        losses = row.get("losses")
        ties = row.get("ties")
        if wins is None and losses is None:
            wins, losses, ties = parse_qb_record(row.get("qb_record"))

        teams = row.get("teams")
        if teams is None:
            team = row.get("team")
            teams = (team,) if team else ()
        by_team = row.get("games_started_by_team") or {}
        playoff = row.get("playoff")
        if isinstance(playoff, Mapping):
            playoff = PlayoffRecord.from_row(playoff)

        return cls(
            season=_parse_int(row.get("season")),
            teams=tuple(teams),
            games_started_by_team=dict(by_team),
            games_started=_parse_int(row.get("games_started")),
            wins=_parse_int(wins),
            losses=_parse_int(losses),
            ties=_parse_int(ties),
            attempts=_parse_int(row.get("attempts")),
            completions=_parse_int(row.get("completions")),
            passing_yards=_parse_int(row.get("passing_yards")),
            passing_tds=_parse_int(row.get("passing_tds")),
            interceptions=_parse_int(row.get("interceptions")),
            sacks=_parse_int(row.get("sacks")),
            sack_yards=_parse_int(row.get("sack_yards")),
            any_a=_parse_float(row.get("any_a")),
            rushing_attempts=_parse_int(row.get("rushing_attempts")),
            rushing_yards=_parse_int(row.get("rushing_yards")),
            rushing_tds=_parse_int(row.get("rushing_tds")),
            fumbles=_parse_int(row.get("fumbles")),
            game_winning_drives=_parse_int(row.get("game_winning_drives")),
            fourth_quarter_comebacks=_parse_int(row.get("fourth_quarter_comebacks")),
            playoff=playoff,
        )


@dataclass(frozen=True)
class Player:
    """Quarterback identity plus an ordered collection of seasons."""

    name: str
    player_id: str | None = None
    seasons: tuple[SeasonRecord, ...] = ()
    experience: int | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "name", self.name.strip())
        ordered = tuple(sorted(self.seasons, key=lambda record: record.season))
        object.__setattr__(self, "seasons", ordered)

    @property
    def key(self) -> str:
        """Stable identifier: the id when known, otherwise the name."""

        return self.player_id or self.name

    def season(self, year: int) -> SeasonRecord | None:
        for record in self.seasons:
            if record.season == year:
                return record
        return None

    def seasons_for(self, years: Iterable[int]) -> list[SeasonRecord]:
        wanted = set(years)
        return [record for record in self.seasons if record.season in wanted]

    def seasons_through(self, year: int) -> list[SeasonRecord]:
        return [record for record in self.seasons if record.season <= year]

    def experience_through(self, year: int) -> int:
        """Seasons on record up to ``year`` (or the explicit override)."""

        if self.experience is not None:
            return self.experience
        return len(self.seasons_through(year))

    def primary_team(self, year: int | None = None) -> str | None:
        record = self.season(year) if year is not None else (self.seasons[-1] if self.seasons else None)
        return record.team if record else None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "player_id": self.player_id,
            "experience": self.experience,
            "seasons": [record.to_dict() for record in self.seasons],
        }


__all__ = [
    "MAX_REGULAR_SEASON_STARTS",
    "InvalidSeasonRecordError",
    "MissingDataError",
    "Player",
    "PlayoffRecord",
    "SeasonRecord",
    "parse_qb_record",
]
