"""QB Excellence Index: population-relative quarterback rankings.

The package is split into ``core`` (records, weights, statistics helpers),
``data`` (reference tables and ingestion), ``scoring`` (the category
calculators and the composite) and ``backend`` (the ranking service used by
the CLI).
"""

from qei.core import ContextFlags, Player, PlayoffRecord, SeasonRecord, WeightConfiguration, preset
from qei.scoring import CategoryScores, RankedPlayer, evaluate_player, rank_players, score_player

__version__ = "0.1.0"

__all__ = [
    "CategoryScores",
    "ContextFlags",
    "Player",
    "PlayoffRecord",
    "RankedPlayer",
    "SeasonRecord",
    "WeightConfiguration",
    "__version__",
    "evaluate_player",
    "preset",
    "rank_players",
    "score_player",
]
