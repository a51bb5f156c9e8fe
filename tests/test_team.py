import pytest

from qei.data.reference import load_reference_tables
from qei.scoring.team import (
    bye_bonus,
    calculate_team_score,
    playoff_achievement_points,
    playoff_weighted_wins,
)

from factories import make_playoff, make_season

TABLES = load_reference_tables()
PLAYOFFS = TABLES.playoffs


@pytest.mark.parametrize(
    "wins, losses, team, year, expected",
    [
        (4, 0, "PHI", 2024, 0.21 + 0.30 + 0.42 + 0.60),
        (3, 1, "PHI", 2024, 0.21 + 0.30 + 0.42 + 0.30),
        (3, 0, "PHI", 2024, 0.30 + 0.42 + 0.60),
        (2, 1, "KC", 2023, 0.30 + 0.42 + 0.60),
        (2, 1, "KC", 2024, 0.30 + 0.42 + 0.30),
        (2, 0, "BUF", 2024, 0.30 + 0.42),
        (1, 1, "BUF", 2024, 0.21 + 0.15),
        (1, 0, "BUF", 2024, 0.21),
        (0, 1, "BUF", 2024, 0.12),
        (0, 0, "BUF", 2024, 0.0),
        (5, 2, "BUF", 2024, 5 * 0.30 + 2 * 0.12),
        (1, 2, "BUF", 2024, 1 * 0.21 + 2 * 0.12),
    ],
)
def test_playoff_round_inference(wins, losses, team, year, expected):
    weighted = playoff_weighted_wins(make_playoff(wins, losses), team, year, PLAYOFFS)
    assert weighted == pytest.approx(expected)


def test_bye_bonus_requires_known_top_seed_and_a_win():
    assert bye_bonus(make_playoff(2, 1), "KC", 2024, PLAYOFFS) == pytest.approx(0.21)
    assert bye_bonus(make_playoff(0, 1), "KC", 2024, PLAYOFFS) == 0.0
    assert bye_bonus(make_playoff(2, 1), "BUF", 2024, PLAYOFFS) == 0.0
    assert bye_bonus(make_playoff(3, 1), "KC", 2024, PLAYOFFS) == 0.0


def test_achievement_points_follow_progress_table():
    champion = playoff_achievement_points(make_playoff(4, 0), "KC", 2023, PLAYOFFS)
    assert champion == pytest.approx(15.0 + 6.0 + 4 * 1.5)
    conference_loser = playoff_achievement_points(make_playoff(2, 1), "BUF", 2024, PLAYOFFS)
    assert conference_loser == pytest.approx(6.0 + 3 * 1.5)
    divisional = playoff_achievement_points(make_playoff(1, 1), "BAL", 2024, PLAYOFFS)
    assert divisional == pytest.approx(3.0 + 2 * 1.5)
    assert playoff_achievement_points(make_playoff(0, 0), "KC", 2023, PLAYOFFS) == 0.0


def test_regular_season_only_score():
    record = make_season(2024, team="MIN", wins=12, losses=5)
    result = calculate_team_score([record], season_year=2024, tables=TABLES)
    win_pct = 12 / 17
    assert result.win_percentage == pytest.approx(win_pct)
    assert result.availability == pytest.approx(15.0)
    assert result.playoff_achievement == 0.0
    assert result.score == pytest.approx(win_pct ** 0.8 * 50 + 15.0)


def test_playoffs_raise_team_score_only_when_included():
    record = make_season(2024, team="PHI", wins=16, losses=1, playoff=make_playoff(4, 0))
    with_playoffs = calculate_team_score([record], season_year=2024, tables=TABLES)
    without = calculate_team_score([record], season_year=2024, include_playoffs=False, tables=TABLES)
    assert with_playoffs.score > without.score
    assert with_playoffs.win_percentage == 1.0
    assert with_playoffs.playoff_achievement == pytest.approx(15.0 + 6.0 + 4 * 1.5)


def test_team_score_is_capped():
    record = make_season(2024, team="PHI", wins=17, losses=0, playoff=make_playoff(4, 0))
    result = calculate_team_score(
        [record],
        {"regular_season": 0, "playoff": 100},
        season_year=2024,
        tables=TABLES,
    )
    assert 0.0 <= result.score <= 100.0


def test_season_without_record_is_ignored():
    record = make_season(2024, wins=0, losses=0)
    assert calculate_team_score([record], season_year=2024, tables=TABLES).score == 0.0


def test_year_weights_blend_seasons():
    seasons = [
        make_season(2024, wins=17, losses=0),
        make_season(2023, wins=0, losses=17),
    ]
    result = calculate_team_score(seasons, tables=TABLES)
    assert result.win_percentage == pytest.approx(0.75 / 0.95)


def test_zero_sub_weights_score_zero():
    record = make_season(2024, wins=12, losses=5)
    result = calculate_team_score([record], {"regular_season": 0, "playoff": 0}, season_year=2024, tables=TABLES)
    assert result.score == 0.0
