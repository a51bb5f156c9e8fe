"""User-facing weight configuration and the built-in philosophy presets."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
import logging
from typing import Any

from .stats import is_finite_number, normalize_weights

logger = logging.getLogger(__name__)

CATEGORIES = ("team", "stats", "clutch", "durability", "support")

DEFAULT_TEAM_WEIGHTS = {"regular_season": 65.0, "playoff": 35.0}
DEFAULT_STATS_WEIGHTS = {"efficiency": 45.0, "protection": 25.0, "volume": 30.0}
DEFAULT_CLUTCH_WEIGHTS = {
    "game_winning_drives": 40.0,
    "fourth_quarter_comebacks": 25.0,
    "clutch_rate": 15.0,
    "playoff_bonus": 20.0,
}
DEFAULT_DURABILITY_WEIGHTS = {"availability": 80.0, "consistency": 20.0}
DEFAULT_SUPPORT_WEIGHTS = {"offensive_line": 34.0, "weapons": 33.0, "defense": 33.0}


class UnknownPresetError(KeyError):
    """Raised when a philosophy preset name is not recognised."""


def _coerce(value: Any) -> float:
    """Negative, non-numeric and non-finite weights contribute nothing."""

    if is_finite_number(value) and value > 0:
        return float(value)
    if value not in (None, 0, 0.0):
        logger.debug("Coercing invalid weight %r to zero", value)
    return 0.0


def _merge(defaults: Mapping[str, float], overrides: Mapping[str, Any] | None) -> dict[str, float]:
    """Overlay ``overrides`` on ``defaults``; keys outside ``defaults`` are dropped."""

    merged = dict(defaults)
    if overrides:
        for key, value in overrides.items():
            if key not in defaults:
                logger.warning("Ignoring unknown sub-weight '%s'; expected one of %s", key, sorted(defaults))
                continue
            merged[key] = _coerce(value)
    return merged


@dataclass(frozen=True)
class WeightConfiguration:
    """Top-level category weights plus per-category sub-weights.

    Top-level weights are raw percentages and need not sum to 100; the
    composite step divides by their total. Sub-weights are normalised inside
    each category.
    """

    team: float = 30.0
    stats: float = 40.0
    clutch: float = 15.0
    durability: float = 10.0
    support: float = 5.0
    team_weights: Mapping[str, float] = field(default_factory=lambda: dict(DEFAULT_TEAM_WEIGHTS))
    stats_weights: Mapping[str, float] = field(default_factory=lambda: dict(DEFAULT_STATS_WEIGHTS))
    clutch_weights: Mapping[str, float] = field(default_factory=lambda: dict(DEFAULT_CLUTCH_WEIGHTS))
    durability_weights: Mapping[str, float] = field(
        default_factory=lambda: dict(DEFAULT_DURABILITY_WEIGHTS)
    )
    support_weights: Mapping[str, float] = field(default_factory=lambda: dict(DEFAULT_SUPPORT_WEIGHTS))

    def __post_init__(self) -> None:
        for category in CATEGORIES:
            object.__setattr__(self, category, _coerce(getattr(self, category)))
        object.__setattr__(self, "team_weights", _merge(DEFAULT_TEAM_WEIGHTS, self.team_weights))
        object.__setattr__(self, "stats_weights", _merge(DEFAULT_STATS_WEIGHTS, self.stats_weights))
        object.__setattr__(self, "clutch_weights", _merge(DEFAULT_CLUTCH_WEIGHTS, self.clutch_weights))
        object.__setattr__(
            self, "durability_weights", _merge(DEFAULT_DURABILITY_WEIGHTS, self.durability_weights)
        )
        object.__setattr__(self, "support_weights", _merge(DEFAULT_SUPPORT_WEIGHTS, self.support_weights))

    def category_weights(self) -> dict[str, float]:
        return {category: getattr(self, category) for category in CATEGORIES}

    @property
    def total(self) -> float:
        return sum(self.category_weights().values())

    def normalized_sub_weights(self, category: str) -> dict[str, float]:
        return normalize_weights(getattr(self, f"{category}_weights"))

    def with_weights(self, **changes: Any) -> "WeightConfiguration":
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = self.category_weights()
        for category in CATEGORIES:
            payload[f"{category}_weights"] = dict(getattr(self, f"{category}_weights"))
        return payload

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "WeightConfiguration":
        """Build a configuration from a plain mapping (e.g. decoded JSON)."""

        kwargs: dict[str, Any] = {}
        for category in CATEGORIES:
            if category in data:
                kwargs[category] = data[category]
            sub_key = f"{category}_weights"
            if isinstance(data.get(sub_key), Mapping):
                kwargs[sub_key] = data[sub_key]
        return cls(**kwargs)


@dataclass(frozen=True)
class PhilosophyPreset:
    name: str
    description: str
    weights: WeightConfiguration


def _preset(name: str, description: str, **weights: Any) -> PhilosophyPreset:
    values = {category: 0.0 for category in CATEGORIES}
    values.update(weights)
    return PhilosophyPreset(name=name, description=description, weights=WeightConfiguration(**values))


PRESETS: dict[str, PhilosophyPreset] = {
    preset.name: preset
    for preset in (
        _preset(
            "default",
            "Pure QB quality focus: statistical evaluation isolating individual talent.",
            stats=100,
            stats_weights={"efficiency": 45, "protection": 30, "volume": 25},
        ),
        _preset(
            "winner",
            "Winning is everything: results-focused with elite QB recognition.",
            team=70,
            stats=30,
            support_weights={"offensive_line": 34, "weapons": 33, "defense": 33},
            stats_weights={"efficiency": 45, "protection": 30, "volume": 25},
            team_weights={"regular_season": 75, "playoff": 0},
            clutch_weights={
                "game_winning_drives": 30,
                "fourth_quarter_comebacks": 20,
                "clutch_rate": 20,
                "playoff_bonus": 30,
            },
            durability_weights={"availability": 80, "consistency": 20},
        ),
        _preset(
            "volume_hero",
            "Volume hero: filling up the stat sheet is everything.",
            stats=100,
            stats_weights={"efficiency": 10, "protection": 5, "volume": 85},
        ),
        _preset(
            "efficiency_purist",
            "Efficiency purist: minimise mistakes, maximise per-play value.",
            stats=100,
            stats_weights={"efficiency": 70, "protection": 25, "volume": 5},
        ),
        _preset(
            "balanced_attack",
            "Balanced attack: complete evaluation across all statistical categories.",
            stats=100,
            stats_weights={"efficiency": 40, "protection": 30, "volume": 30},
        ),
        _preset(
            "scotts_preset",
            "Balanced team success and statistical performance evaluation.",
            team=33,
            stats=67,
            stats_weights={"efficiency": 45, "protection": 10, "volume": 45},
        ),
    )
}


def preset(name: str) -> WeightConfiguration:
    """Return the weight configuration for a named preset."""

    key = name.strip().lower().replace("-", "_")
    try:
        return PRESETS[key].weights
    except KeyError:
        raise UnknownPresetError(f"Unknown preset '{name}'. Expected one of {sorted(PRESETS)}.") from None


__all__ = [
    "CATEGORIES",
    "DEFAULT_CLUTCH_WEIGHTS",
    "DEFAULT_DURABILITY_WEIGHTS",
    "DEFAULT_STATS_WEIGHTS",
    "DEFAULT_SUPPORT_WEIGHTS",
    "DEFAULT_TEAM_WEIGHTS",
    "PRESETS",
    "PhilosophyPreset",
    "UnknownPresetError",
    "WeightConfiguration",
    "preset",
]
