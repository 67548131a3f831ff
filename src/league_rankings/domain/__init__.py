"""Ranking domain modules."""

from league_rankings.domain.common import (
    CalculatedRound,
    GameRecord,
    GameType,
    LeagueData,
    Round,
    SeasonRecord,
)
from league_rankings.domain.errors import (
    CalculationTimeout,
    ConcurrencyConflict,
    MissingDataError,
    RankingError,
    ValidationError,
)
from league_rankings.domain.protocol import CalculationStatus, RunPhase, RunType

__all__ = [
    "CalculatedRound",
    "CalculationStatus",
    "CalculationTimeout",
    "ConcurrencyConflict",
    "GameRecord",
    "GameType",
    "LeagueData",
    "MissingDataError",
    "RankingError",
    "Round",
    "RunPhase",
    "RunType",
    "SeasonRecord",
    "ValidationError",
]
