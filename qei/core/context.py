"""Per-computation options and the structured tracing hook."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
import logging
from typing import Any

logger = logging.getLogger(__name__)

TRACE_STAGES = (
    "raw",
    "standardized",
    "contextualized",
    "penalty",
    "composite",
    "final",
    "rejected",
)


@dataclass(frozen=True)
class TraceRecord:
    """Intermediate values emitted for one player at one pipeline stage."""

    player: str
    stage: str
    values: Mapping[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"player": self.player, "stage": self.stage, "values": dict(self.values)}


TraceCallback = Callable[[TraceRecord], None]


@dataclass(frozen=True)
class ContextFlags:
    """Options shared by every calculator during one ranking computation."""

    include_playoffs: bool = True
    season_year: int | None = None
    normalize_variance: bool = False
    current_season: int | None = None
    target_variance: float = 1.0
    trace: TraceCallback | None = None
    verbose: bool = False

    @property
    def single_season(self) -> bool:
        return self.season_year is not None

    def emit(self, player: str, stage: str, values: Mapping[str, Any]) -> None:
        """Forward a trace record to the installed callback when verbose."""

        if stage not in TRACE_STAGES:
            raise ValueError(f"Unknown trace stage '{stage}'. Expected one of {TRACE_STAGES}.")
        if not self.verbose or self.trace is None:
            return
        self.trace(TraceRecord(player=player, stage=stage, values=dict(values)))


__all__ = ["TRACE_STAGES", "ContextFlags", "TraceCallback", "TraceRecord"]
