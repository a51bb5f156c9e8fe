"""Core value objects and statistics helpers for the QEI engine."""

from .context import ContextFlags, TraceRecord
from .models import (
    InvalidSeasonRecordError,
    MissingDataError,
    Player,
    PlayoffRecord,
    SeasonRecord,
    parse_qb_record,
)
from .tiers import tier_for
from .weights import PRESETS, UnknownPresetError, WeightConfiguration, preset

__all__ = [
    "ContextFlags",
    "InvalidSeasonRecordError",
    "MissingDataError",
    "PRESETS",
    "Player",
    "PlayoffRecord",
    "SeasonRecord",
    "TraceRecord",
    "UnknownPresetError",
    "WeightConfiguration",
    "parse_qb_record",
    "preset",
    "tier_for",
]
