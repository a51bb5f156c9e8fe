"""Category calculators, population pass and the QEI composite."""

from .composite import CategoryScores, calculate_qei
from .engine import RankedPlayer, ScoreBreakdown, evaluate_player, rank_players, score_player
from .population import PopulationStatistics, RawCategoryScores, population_pass

__all__ = [
    "CategoryScores",
    "PopulationStatistics",
    "RankedPlayer",
    "RawCategoryScores",
    "ScoreBreakdown",
    "calculate_qei",
    "evaluate_player",
    "population_pass",
    "rank_players",
    "score_player",
]
