"""Tests for the canonical season and player records."""

from __future__ import annotations

import unittest

import pytest

from qei.core.models import (
    InvalidSeasonRecordError,
    Player,
    PlayoffRecord,
    SeasonRecord,
    parse_qb_record,
)

from factories import make_player, make_season


@pytest.mark.parametrize(
    "value, expected",
    [
        ("12-5-0", (12, 5, 0)),
        ("9-8", (9, 8, 0)),
        (" 1 - 1 - 1 ", (1, 1, 1)),
        ("", (0, 0, 0)),
        (None, (0, 0, 0)),
        ("n/a", (0, 0, 0)),
    ],
)
def test_parse_qb_record(value, expected):
    assert parse_qb_record(value) == expected


def test_season_rejects_more_completions_than_attempts():
    with pytest.raises(InvalidSeasonRecordError):
        SeasonRecord(season=2024, attempts=10, completions=11)


def test_season_rejects_impossible_start_count():
    with pytest.raises(InvalidSeasonRecordError):
        SeasonRecord(season=2024, games_started=18)
    with pytest.raises(ValueError):
        SeasonRecord(season=2024, games_started=-1)


def test_primary_team_is_team_with_most_starts():
    record = SeasonRecord(
        season=2024,
        teams=("NYJ", "CLE"),
        games_started_by_team={"NYJ": 2, "CLE": 5},
        games_started=7,
    )
    assert record.team == "CLE"
    assert SeasonRecord(season=2024, teams=("PIT",)).team == "PIT"
    assert SeasonRecord(season=2024).team is None


def test_any_a_falls_back_to_box_score_formula():
    record = make_season(
        passing_yards=4000,
        passing_tds=30,
        interceptions=10,
        sack_yards=200,
        attempts=560,
        sacks=40,
        any_a=None,
    )
    expected = (4000 + 20 * 30 - 45 * 10 - 200) / 600
    assert record.adjusted_net_yards_per_attempt() == pytest.approx(expected)
    assert make_season(any_a=7.5).adjusted_net_yards_per_attempt() == 7.5


def test_is_empty_flags_missing_attempts_starts_or_yards():
    assert not make_season().is_empty()
    assert make_season(attempts=0, completions=0).is_empty()
    assert make_season(games_started=0).is_empty()
    assert make_season(passing_yards=0).is_empty()


def test_from_row_parses_record_string_and_playoff_mapping():
    record = SeasonRecord.from_row(
        {
            "season": "2023",
            "team": "BUF",
            "qb_record": "11-6-0",
            "games_started": "17",
            "attempts": "579",
            "completions": "385",
            "any_a": "",
            "playoff": {"wins": 1, "losses": 1, "games_started": 2, "attempts": 70},
        }
    )
    assert record.season == 2023
    assert record.teams == ("BUF",)
    assert (record.wins, record.losses, record.ties) == (11, 6, 0)
    assert record.any_a is None
    assert record.playoff == PlayoffRecord(wins=1, losses=1, games_started=2, attempts=70)
    assert record.without_playoffs().playoff is None


class PlayerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.player = make_player(
            " Test Passer ",
            make_season(2024, team="DET"),
            make_season(2022, team="LAR"),
            make_season(2023, team="DET"),
            player_id="PassTe00",
        )

    def test_seasons_are_sorted_and_name_stripped(self) -> None:
        self.assertEqual(self.player.name, "Test Passer")
        self.assertEqual([record.season for record in self.player.seasons], [2022, 2023, 2024])

    def test_lookup_helpers(self) -> None:
        self.assertEqual(self.player.season(2023).team, "DET")
        self.assertIsNone(self.player.season(2019))
        self.assertEqual([r.season for r in self.player.seasons_for([2024, 2022])], [2022, 2024])
        self.assertEqual(self.player.primary_team(2022), "LAR")
        self.assertEqual(self.player.primary_team(), "DET")

    def test_experience_counts_seasons_through_year(self) -> None:
        self.assertEqual(self.player.experience_through(2022), 1)
        self.assertEqual(self.player.experience_through(2024), 3)
        override = Player(name="Vet", seasons=self.player.seasons, experience=9)
        self.assertEqual(override.experience_through(2022), 9)

    def test_key_prefers_player_id(self) -> None:
        self.assertEqual(self.player.key, "PassTe00")
        self.assertEqual(Player(name="No Id").key, "No Id")

    def test_to_dict_is_plain(self) -> None:
        payload = self.player.to_dict()
        self.assertEqual(payload["player_id"], "PassTe00")
        self.assertEqual(payload["seasons"][0]["teams"], ["LAR"])


if __name__ == "__main__":
    unittest.main()
