"""TrueSkill-style mu/sigma ranking modules."""

from league_rankings.domain.ratings.trueskill.calculator import (
    PlayerTrueSkillCalculator,
    TrueSkillParameters,
    information_gain_sigma,
)
from league_rankings.domain.ratings.trueskill.config import (
    TrueSkillSystemConfig,
    load_trueskill_system_configs,
)

__all__ = [
    "PlayerTrueSkillCalculator",
    "TrueSkillParameters",
    "TrueSkillSystemConfig",
    "information_gain_sigma",
    "load_trueskill_system_configs",
]
