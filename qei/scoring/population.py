"""Population pass: category distributions and variances across a ranked set."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import asdict, dataclass, field
import logging

from qei.core.stats import NEUTRAL_VARIANCE, mean, standard_deviation, variance, z_score
from qei.core.weights import CATEGORIES

from .composite import CategoryScores, contextualize, durability_to_z

logger = logging.getLogger(__name__)

STANDARDIZED_CATEGORIES = ("team", "stats", "clutch")


@dataclass(frozen=True)
class RawCategoryScores:
    """Calculator outputs before population standardisation.

    ``team``, ``stats``, ``clutch`` and ``durability`` are on 0-100 scales;
    ``support`` is already a z-score.
    """

    team: float = 0.0
    stats: float = 0.0
    clutch: float = 0.0
    durability: float = 0.0
    support: float = 0.0

    def to_dict(self) -> dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class CategoryDistribution:
    mean: float
    std_dev: float


def standardize_linear(raw: RawCategoryScores) -> CategoryScores:
    """Map 0-100 scores onto the z scale without a population (``(s - 50) / 25``)."""

    return CategoryScores(
        team=durability_to_z(raw.team),
        stats=durability_to_z(raw.stats),
        clutch=durability_to_z(raw.clutch),
        durability=raw.durability,
        support=raw.support,
    )


@dataclass(frozen=True)
class PopulationStatistics:
    """Distribution of each category across the non-rejected players."""

    distributions: Mapping[str, CategoryDistribution] = field(default_factory=dict)
    variances: Mapping[str, float] = field(default_factory=dict)
    size: int = 0

    def standardize(self, raw: RawCategoryScores) -> CategoryScores:
        """Convert raw calculator outputs into the stored category scores."""

        if self.size == 0:
            return standardize_linear(raw)
        values = raw.to_dict()
        for category in STANDARDIZED_CATEGORIES:
            distribution = self.distributions[category]
            values[category] = z_score(values[category], distribution.mean, distribution.std_dev)
        return CategoryScores(**values)

    def variance_for(self, category: str) -> float:
        return self.variances.get(category, NEUTRAL_VARIANCE)


def population_pass(raw_scores: Sequence[RawCategoryScores]) -> PopulationStatistics:
    """Measure every category across ``raw_scores``.

    Team, stats and clutch are standardised against their population mean
    and standard deviation; the variance of each contextualised category is
    then recorded for the optional normalisation step.
    """

    if not raw_scores:
        return PopulationStatistics(variances={category: NEUTRAL_VARIANCE for category in CATEGORIES})

    distributions: dict[str, CategoryDistribution] = {}
    for category in STANDARDIZED_CATEGORIES:
        values = [getattr(raw, category) for raw in raw_scores]
        centre = mean(values)
        distributions[category] = CategoryDistribution(mean=centre, std_dev=standard_deviation(values, centre))

    partial = PopulationStatistics(distributions=distributions, size=len(raw_scores))
    contextual = [contextualize(partial.standardize(raw)) for raw in raw_scores]
    variances = {category: variance([row[category] for row in contextual]) for category in CATEGORIES}
    logger.debug("Population of %d players; category variances %s", len(raw_scores), variances)
    return PopulationStatistics(distributions=distributions, variances=variances, size=len(raw_scores))


__all__ = [
    "CategoryDistribution",
    "PopulationStatistics",
    "RawCategoryScores",
    "STANDARDIZED_CATEGORIES",
    "population_pass",
    "standardize_linear",
]
