"""Backend services for loading and ranking quarterbacks."""

from .ranking_service import QBRankingService

__all__ = ["QBRankingService"]
