"""Tests for CSV and Supabase row ingestion."""

from __future__ import annotations

import logging
import unittest
from pathlib import Path

import polars as pl
import pytest

from qei.data.ingest import (
    build_players,
    frame_from_rows,
    load_players_from_csv,
    merge_multi_team_rows,
    read_passing_csv,
    season_from_path,
)

DATA_DIR = Path(__file__).parent / "data"
REGULAR_CSV = DATA_DIR / "passing_2024.csv"
PLAYOFF_CSV = DATA_DIR / "playoffs_2024.csv"

SUPABASE_ROW = {
    "player_name": "Jalen Hurts",
    "pfr_id": "HurtJa00",
    "season": 2024,
    "team": "PHI",
    "pos": "QB",
    "gs": 15,
    "qb_rec": "14-1-0",
    "cmp": 248,
    "att": 361,
    "yds": 2903,
    "td": 18,
    "int": 5,
    "sk": 38,
    "sk_yds": 246,
    "any_a": 6.53,
    "four_qc": 1,
    "gwd": 2,
}


def test_season_from_path():
    assert season_from_path(Path("exports/passing_2024.csv")) == 2024
    assert season_from_path(Path("exports/passing.csv")) is None


def test_read_passing_csv_normalises_the_export():
    frame = read_passing_csv(REGULAR_CSV)
    names = frame.get_column("player_name").to_list()
    assert "League Average" not in names
    assert "Trick Receiver" not in names
    assert "Joe Burrow" in names
    assert set(frame.get_column("season").unique().to_list()) == {2024}
    assert "KC" in frame.get_column("team").to_list()
    burrow = frame.filter(pl.col("player_name") == "Joe Burrow").row(0, named=True)
    assert burrow["sack_yards"] == 278
    assert burrow["passing_yards"] == 4918
    assert burrow["any_a"] == pytest.approx(7.07)


def test_merge_multi_team_rows_drops_summary_and_sums_teams():
    merged = merge_multi_team_rows(read_passing_csv(REGULAR_CSV))
    journeyman = merged.filter(pl.col("player_name") == "Test Journeyman")
    assert journeyman.height == 1
    row = journeyman.row(0, named=True)
    assert row["teams"] == ["CLE", "NYJ"]
    assert row["team_starts"] == [5, 2]
    assert row["games_started"] == 7
    assert (row["wins"], row["losses"]) == (4, 3)
    assert row["attempts"] == 250
    assert row["any_a"] == pytest.approx((6.0 * 200 + 4.0 * 100) / 300)


def test_frame_from_supabase_rows():
    frame = frame_from_rows([SUPABASE_ROW])
    row = frame.row(0, named=True)
    assert row["player_id"] == "HurtJa00"
    assert row["games_started"] == 15
    assert row["qb_record"] == "14-1-0"
    assert row["rushing_yards"] == 0
    assert frame_from_rows([]).is_empty()


class BuildPlayersTests(unittest.TestCase):
    def setUp(self) -> None:
        players = load_players_from_csv([REGULAR_CSV], [PLAYOFF_CSV])
        self.players = {player.name: player for player in players}

    def test_one_player_per_quarterback(self) -> None:
        self.assertEqual(
            set(self.players),
            {"Joe Burrow", "Sam Darnold", "Patrick Mahomes", "Test Journeyman"},
        )

    def test_season_fields(self) -> None:
        burrow = self.players["Joe Burrow"].season(2024)
        self.assertEqual(self.players["Joe Burrow"].player_id, "BurrJo01")
        self.assertEqual(burrow.teams, ("CIN",))
        self.assertEqual((burrow.wins, burrow.losses, burrow.ties), (9, 8, 0))
        self.assertEqual(burrow.game_winning_drives, 3)
        self.assertEqual(burrow.fourth_quarter_comebacks, 2)
        self.assertIsNone(burrow.playoff)

    def test_multi_team_season(self) -> None:
        season = self.players["Test Journeyman"].season(2024)
        self.assertEqual(season.teams, ("CLE", "NYJ"))
        self.assertEqual(season.games_started_by_team, {"CLE": 5, "NYJ": 2})
        self.assertEqual(season.team, "CLE")

    def test_playoff_records_attach_by_player_id(self) -> None:
        mahomes = self.players["Patrick Mahomes"].season(2024)
        self.assertEqual(mahomes.team, "KC")
        self.assertEqual((mahomes.playoff.wins, mahomes.playoff.losses), (2, 1))
        self.assertEqual(mahomes.playoff.games_started, 3)
        darnold = self.players["Sam Darnold"].season(2024)
        self.assertEqual(darnold.playoff.games, 1)

    def test_invalid_rows_are_skipped_with_warning(self) -> None:
        bad = dict(SUPABASE_ROW, pfr_id="BadRo00", player_name="Bad Row", cmp=400, att=300)
        with self.assertLogs("qei.data.ingest", level=logging.WARNING):
            players = build_players(frame_from_rows([SUPABASE_ROW, bad]))
        self.assertEqual([player.name for player in players], ["Jalen Hurts"])


if __name__ == "__main__":
    unittest.main()
