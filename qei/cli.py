"""Rank quarterbacks by QEI from PFR CSV exports or the hosted Supabase tables."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

import polars as pl
from rich.console import Console
from rich.table import Table

from qei.backend import QBRankingService
from qei.core.context import ContextFlags, TraceRecord
from qei.core.weights import PRESETS, WeightConfiguration, preset
from qei.data.supabase import PASSING_STATS_TABLE, SupabaseClient

logger = logging.getLogger(__name__)

DISPLAY_COLUMNS = (
    ("rank", "#"),
    ("player", "Player"),
    ("team", "Team"),
    ("qei", "QEI"),
    ("tier", "Tier"),
    ("team_score", "Team"),
    ("stats_score", "Stats"),
    ("clutch_score", "Clutch"),
    ("durability_score", "Dur."),
    ("support_score", "Support"),
)


def configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--csv",
        type=Path,
        action="append",
        dest="csv_paths",
        help="Regular-season PFR passing export (repeat for multiple seasons).",
    )
    source.add_argument(
        "--supabase",
        action="store_true",
        help="Read passing rows from Supabase (SUPABASE_URL / SUPABASE_ANON_KEY).",
    )
    parser.add_argument(
        "--playoffs-csv",
        type=Path,
        action="append",
        default=[],
        dest="playoff_paths",
        help="Postseason PFR passing export (repeat for multiple seasons).",
    )
    parser.add_argument(
        "--passing-table",
        default=PASSING_STATS_TABLE,
        help=f"Supabase regular-season table (default: {PASSING_STATS_TABLE}).",
    )
    parser.add_argument("--playoff-table", help="Supabase postseason table, when available.")
    parser.add_argument("--season", type=int, help="Rank a single season instead of the weighted window.")
    parser.add_argument("--no-playoffs", action="store_true", help="Ignore postseason data.")
    parser.add_argument(
        "--normalize",
        action="store_true",
        help="Rescale category z-scores to unit variance before weighting.",
    )
    parser.add_argument(
        "--preset",
        choices=sorted(PRESETS),
        help="Use a named philosophy preset instead of the default weights.",
    )
    parser.add_argument("--limit", type=int, default=32, help="Rows to display (default: 32).")
    parser.add_argument("--min-attempts", type=int, default=15, help="Minimum pass attempts (default: 15).")
    parser.add_argument("--min-games", type=int, default=2, help="Minimum games started (default: 2).")
    parser.add_argument("--output", type=Path, help="Write the full ranking to this CSV path.")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging and per-player trace output.",
    )
    return parser.parse_args(argv)


def _log_trace(record: TraceRecord) -> None:
    logger.debug("%s [%s] %s", record.player, record.stage, record.values)


def render_table(frame: pl.DataFrame, *, title: str, limit: int, caption: str | None = None) -> Table:
    table = Table(title=title, caption=caption, show_lines=False)
    for _, header in DISPLAY_COLUMNS:
        table.add_column(header, justify="left" if header in {"Player", "Team", "Tier"} else "right")
    for row in frame.head(limit).iter_rows(named=True):
        cells = []
        for column, _ in DISPLAY_COLUMNS:
            value = row[column]
            if value is None:
                cells.append("")
            elif isinstance(value, float):
                cells.append(f"{value:.1f}" if column == "qei" else f"{value:.2f}")
            else:
                cells.append(str(value))
        table.add_row(*cells)
    return table


def main(argv: Sequence[str] | None = None, *, console: Console | None = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    configure_logging(args.verbose)
    console = console or Console()

    weights = preset(args.preset) if args.preset else WeightConfiguration()
    flags = ContextFlags(
        include_playoffs=not args.no_playoffs,
        season_year=args.season,
        normalize_variance=args.normalize,
        trace=_log_trace if args.verbose else None,
        verbose=args.verbose,
    )

    try:
        if args.supabase:
            with SupabaseClient() as client:
                service = QBRankingService(
                    client=client,
                    min_attempts=args.min_attempts,
                    min_games=args.min_games,
                    playoff_table=args.playoff_table,
                )
                service.load_from_supabase(
                    service.default_seasons(args.season), table=args.passing_table
                )
        else:
            service = QBRankingService(min_attempts=args.min_attempts, min_games=args.min_games)
            service.load_from_csv(args.csv_paths, args.playoff_paths)

        results = service.rank(weights, flags)
        frame = service.ranking_frame(results, flags)
    except Exception as exc:  # pragma: no cover - CLI surface
        logger.exception("Failed to rank quarterbacks: %s", exc)
        return 1

    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        frame.write_csv(args.output)
        logger.info("Wrote %d ranked players to %s", frame.height, args.output)

    scope = str(args.season) if args.season is not None else "weighted window"
    title = f"QB Excellence Index ({scope}, {args.preset or 'custom'} weights)"
    caption = PRESETS[args.preset].description if args.preset else None
    console.print(render_table(frame, title=title, limit=args.limit, caption=caption))
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI hook
    raise SystemExit(main())
