"""Helpers shared by the category calculators."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping

from qei.core.models import PlayoffRecord, SeasonRecord
from qei.core.stats import is_finite_number, normalize_weights
from qei.data.reference import ReferenceTables, load_reference_tables


def resolve_tables(tables: ReferenceTables | None) -> ReferenceTables:
    return tables if tables is not None else load_reference_tables()


def weighted_seasons(
    seasons: Iterable[SeasonRecord],
    year_weights: Mapping[int, float],
) -> Iterator[tuple[SeasonRecord, float]]:
    """Yield ``(season, weight)`` for seasons carrying a positive year weight."""

    for record in seasons:
        weight = year_weights.get(record.season, 0.0)
        if is_finite_number(weight) and weight > 0:
            yield record, float(weight)


def playoff_for(record: SeasonRecord, include_playoffs: bool) -> PlayoffRecord | None:
    """Return the playoff sub-record when playoffs are part of the computation."""

    if not include_playoffs or record.playoff is None:
        return None
    return record.playoff


def weight_share(weights: Mapping[str, float], key: str) -> float:
    """Normalised share of ``key`` among the positive sub-weights."""

    return normalize_weights(weights).get(key, 0.0)


__all__ = ["playoff_for", "resolve_tables", "weight_share", "weighted_seasons"]
