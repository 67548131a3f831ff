"""ORM models."""

from league_rankings.models.base import Base, JSONType
from league_rankings.models.league import Game, Player, Season, Team, TeamRosterEntry
from league_rankings.models.rankings import (
    PlayerRankingRow,
    RankingCalculatedRound,
    RankingCalculation,
    RankingHistoryRow,
)

__all__ = [
    "Base",
    "Game",
    "JSONType",
    "Player",
    "PlayerRankingRow",
    "RankingCalculatedRound",
    "RankingCalculation",
    "RankingHistoryRow",
    "Season",
    "Team",
    "TeamRosterEntry",
]
