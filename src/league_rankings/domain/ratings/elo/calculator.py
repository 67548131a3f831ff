"""Player-level Elo logic with team strength as the roster mean."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from league_rankings.domain.ratings.base import RatingLookup, RoundRatingCalculator


@dataclass(frozen=True)
class EloParameters:
    initial_rating: float = 1200.0
    k_factor: float = 36.0
    scale_factor: float = 400.0
    season_decay_factor: float = 0.82
    playoff_multiplier: float = 1.8
    default_team_strength: float = 1200.0


def calculate_expected_score(rating: float, opponent_rating: float, scale_factor: float) -> float:
    """Compute the Elo expected score for one side."""
    return 1.0 / (1.0 + 10.0 ** ((opponent_rating - rating) / scale_factor))


class PlayerEloCalculator(RoundRatingCalculator):
    """Scalar player Elo; sigma is never tracked."""

    def __init__(self, params: EloParameters) -> None:
        super().__init__(
            initial_rating=params.initial_rating,
            base_rate=params.k_factor,
            season_decay_factor=params.season_decay_factor,
            playoff_multiplier=params.playoff_multiplier,
            default_team_strength=params.default_team_strength,
        )
        self.params = params

    def expected_home_score(
        self,
        *,
        home_roster: Sequence[str],
        away_roster: Sequence[str],
        home_strength: float,
        away_strength: float,
        lookup: RatingLookup,
    ) -> float:
        return calculate_expected_score(
            rating=home_strength,
            opponent_rating=away_strength,
            scale_factor=self.params.scale_factor,
        )


__all__ = ["EloParameters", "PlayerEloCalculator", "calculate_expected_score"]
