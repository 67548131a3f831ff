"""Rating-algorithm domain modules."""

from league_rankings.domain.ratings.ledger import (
    Ledger,
    PlayerRatingState,
    PlayerSeasonStats,
    RatingPoint,
)

__all__ = ["Ledger", "PlayerRatingState", "PlayerSeasonStats", "RatingPoint"]
