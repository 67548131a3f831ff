"""Elo ranking modules."""

from league_rankings.domain.ratings.elo.calculator import (
    EloParameters,
    PlayerEloCalculator,
    calculate_expected_score,
)
from league_rankings.domain.ratings.elo.config import EloSystemConfig, load_elo_system_configs

__all__ = [
    "EloParameters",
    "EloSystemConfig",
    "PlayerEloCalculator",
    "calculate_expected_score",
    "load_elo_system_configs",
]
