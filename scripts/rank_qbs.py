"""Rank quarterbacks by QEI from PFR CSV exports or the hosted Supabase tables."""

from __future__ import annotations

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from qei.cli import main  # noqa: E402


if __name__ == "__main__":  # pragma: no cover - CLI hook
    raise SystemExit(main())
