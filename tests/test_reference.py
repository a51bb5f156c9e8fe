"""Tests for the packaged reference tables."""

from __future__ import annotations

import json
import logging
import shutil
import unittest
from pathlib import Path
from tempfile import TemporaryDirectory

from qei.data.reference import (
    REFERENCE_DIRECTORY,
    REFERENCE_FILES,
    ReferenceDataError,
    load_reference_tables,
    load_reference_tables_from,
)


class ReferenceTablesTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tables = load_reference_tables()

    def test_packaged_tables_load(self) -> None:
        self.assertEqual(self.tables.current_season, 2025)
        self.assertEqual(len(self.tables.franchises), 32)
        for table in ("performance", "playoff", "regular_season", "stability"):
            weights = self.tables.weights_for(table)
            self.assertAlmostEqual(sum(weights.values()), 1.0)

    def test_single_season_weights(self) -> None:
        self.assertEqual(self.tables.weights_for("performance", 2019), {2019: 1.0})

    def test_unknown_weight_table(self) -> None:
        with self.assertRaises(ReferenceDataError):
            self.tables.weights_for("vibes")

    def test_normalize_team(self) -> None:
        self.assertEqual(self.tables.normalize_team("gnb"), "GB")
        self.assertEqual(self.tables.normalize_team("KC"), "KC")
        self.assertIsNone(self.tables.normalize_team("2TM"))
        self.assertIsNone(self.tables.normalize_team(" "))
        self.assertIsNone(self.tables.normalize_team(None))

    def test_playoff_lookups(self) -> None:
        playoffs = self.tables.playoffs
        self.assertTrue(playoffs.is_known_champion("KC", 2023))
        self.assertFalse(playoffs.is_known_champion("KC", 2024))
        self.assertTrue(playoffs.had_bye("DET", 2024))
        self.assertEqual(playoffs.progress_for("PHI", 2024)["result"], "Won")
        self.assertIsNone(playoffs.progress_for(None, 2024))

    def test_team_quality_lookups(self) -> None:
        quality = self.tables.team_quality
        self.assertEqual(quality.total_for(2024, "PHI"), 94)
        self.assertIsNone(quality.total_for(2024, None))
        self.assertIsNone(quality.component_table(1999, "defense"))
        self.assertEqual(quality.component_table(2024, "defense")["PHI"], 25)

    def test_turnover_steps_are_sorted(self) -> None:
        steps = self.tables.performance.turnover_steps
        self.assertEqual(list(steps), sorted(steps))


class ReferenceValidationTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = TemporaryDirectory()
        self.directory = Path(self._tmp.name)
        for name in REFERENCE_FILES:
            shutil.copy(REFERENCE_DIRECTORY / name, self.directory / name)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_missing_file_raises(self) -> None:
        (self.directory / "playoffs.json").unlink()
        with self.assertRaises(ReferenceDataError):
            load_reference_tables_from(self.directory)

    def test_invalid_json_raises(self) -> None:
        (self.directory / "teams.json").write_text("{not json", encoding="utf-8")
        with self.assertRaises(ReferenceDataError):
            load_reference_tables_from(self.directory)

    def test_missing_component_raises(self) -> None:
        path = self.directory / "team_quality.json"
        payload = json.loads(path.read_text(encoding="utf-8"))
        del payload["seasons"]["2024"]["weapons"]
        path.write_text(json.dumps(payload), encoding="utf-8")
        with self.assertRaises(ReferenceDataError):
            load_reference_tables_from(self.directory)

    def test_component_score_above_maximum_raises(self) -> None:
        path = self.directory / "team_quality.json"
        payload = json.loads(path.read_text(encoding="utf-8"))
        payload["seasons"]["2024"]["defense"]["PHI"] = payload["component_maximums"]["defense"] + 1
        path.write_text(json.dumps(payload), encoding="utf-8")
        with self.assertRaisesRegex(ReferenceDataError, "PHI"):
            load_reference_tables_from(self.directory)

    def test_unbalanced_year_weights_warn(self) -> None:
        path = self.directory / "seasons.json"
        payload = json.loads(path.read_text(encoding="utf-8"))
        payload["year_weights"]["performance"] = {"2024": 0.5}
        path.write_text(json.dumps(payload), encoding="utf-8")
        with self.assertLogs("qei.data.reference", level=logging.WARNING):
            tables = load_reference_tables_from(self.directory)
        self.assertEqual(tables.weights_for("performance"), {2024: 0.5})


if __name__ == "__main__":
    unittest.main()
