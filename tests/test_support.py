import pytest

from qei.data.reference import load_reference_tables
from qei.scoring.support import calculate_support_score, component_z_scores, team_support_z

from factories import make_season

TABLES = load_reference_tables()
QUALITY = TABLES.team_quality
EVEN = {"offensive_line": 1, "weapons": 1, "defense": 1}


def test_strong_cast_has_positive_z_and_weak_cast_negative():
    strong = calculate_support_score([make_season(2024, team="PHI")], season_year=2024, tables=TABLES)
    weak = calculate_support_score([make_season(2024, team="CLE")], season_year=2024, tables=TABLES)
    assert strong.score > 0 > weak.score
    assert strong.by_season == {2024: pytest.approx(strong.score)}


def test_missing_team_uses_component_defaults():
    components = component_z_scores("XYZ", 2024, QUALITY)
    assert set(components) == {"offensive_line", "weapons", "defense"}
    assert all(-3.0 <= value <= 3.0 for value in components.values())


def test_season_without_table_is_skipped():
    assert component_z_scores("PHI", 2019, QUALITY) is None
    assert calculate_support_score([make_season(2019, team="PHI")], season_year=2019, tables=TABLES).score == 0.0


def test_starts_threshold_depends_on_mode():
    nine = make_season(2024, team="PHI", games_started=9)
    assert calculate_support_score([nine], season_year=2024, tables=TABLES).score != 0.0
    assert calculate_support_score([nine], tables=TABLES).score == 0.0
    eight = make_season(2024, team="PHI", games_started=8)
    assert calculate_support_score([eight], season_year=2024, tables=TABLES).score == 0.0


def test_multi_team_season_averages_teams():
    record = make_season(
        2024,
        teams=("PHI", "CLE"),
        games_started=12,
        games_started_by_team={"PHI": 6, "CLE": 6},
    )
    result = calculate_support_score([record], EVEN, season_year=2024, tables=TABLES)
    expected = (team_support_z("PHI", 2024, EVEN, QUALITY) + team_support_z("CLE", 2024, EVEN, QUALITY)) / 2
    assert result.score == pytest.approx(expected)


def test_zero_sub_weights_give_zero_support():
    record = make_season(2024, team="PHI")
    zero = {"offensive_line": 0, "weapons": 0, "defense": 0}
    assert calculate_support_score([record], zero, season_year=2024, tables=TABLES).score == 0.0
