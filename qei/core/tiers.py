"""Descriptive labels for QEI percentiles."""

from __future__ import annotations

TIERS: tuple[tuple[float, str], ...] = (
    (90.0, "Elite"),
    (77.3, "Excellent"),
    (59.9, "Good"),
    (40.1, "Average"),
    (22.7, "Below Average"),
)
FLOOR_TIER = "Poor"


def tier_for(qei: float) -> str:
    """Return the tier label for a 0-100 QEI value."""

    for threshold, label in TIERS:
        if qei >= threshold:
            return label
    return FLOOR_TIER


__all__ = ["FLOOR_TIER", "TIERS", "tier_for"]
