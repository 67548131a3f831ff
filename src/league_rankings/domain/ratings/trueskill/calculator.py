"""Player-level mu/sigma ratings using the OpenSkill Plackett-Luce win model."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from math import sqrt

from openskill.models import PlackettLuce

from league_rankings.domain.ratings.base import RatingLookup, RoundRatingCalculator


@dataclass(frozen=True)
class TrueSkillParameters:
    initial_mu: float = 1200.0
    initial_sigma: float = 200.0
    beta: float = 200.0
    min_sigma: float = 50.0
    base_rate: float = 36.0
    season_decay_factor: float = 0.82
    playoff_multiplier: float = 1.8
    default_team_strength: float = 1200.0


def information_gain_sigma(sigma: float, expected_score: float, *, beta: float, min_sigma: float) -> float:
    """Shrink ``sigma`` by the information one binary outcome carries.

    The result never exceeds ``sigma`` and never falls below ``min_sigma``.
    """
    variance = expected_score * (1.0 - expected_score)
    updated = 1.0 / sqrt((1.0 / (sigma**2)) + (variance / (beta**2)))
    return min(sigma, max(min_sigma, updated))


class PlayerTrueSkillCalculator(RoundRatingCalculator):
    """Mu/sigma player ratings; expected score comes from ``PlackettLuce.predict_win``."""

    def __init__(self, params: TrueSkillParameters) -> None:
        super().__init__(
            initial_rating=params.initial_mu,
            base_rate=params.base_rate,
            season_decay_factor=params.season_decay_factor,
            playoff_multiplier=params.playoff_multiplier,
            default_team_strength=params.default_team_strength,
        )
        self.params = params
        self._model = PlackettLuce(
            mu=self.params.initial_mu,
            sigma=self.params.initial_sigma,
            beta=self.params.beta,
        )

    def initial_sigma(self) -> float | None:
        return self.params.initial_sigma

    def updated_sigma(self, sigma: float | None, expected_score: float) -> float | None:
        if sigma is None:
            sigma = self.params.initial_sigma
        return information_gain_sigma(
            sigma,
            expected_score,
            beta=self.params.beta,
            min_sigma=self.params.min_sigma,
        )

    def team_sigma(self, roster: Sequence[str], lookup: RatingLookup) -> float:
        sigmas = []
        for player_id in roster:
            point = lookup(player_id)
            if point is None:
                continue
            sigmas.append(point.sigma if point.sigma is not None else self.params.initial_sigma)
        if not sigmas:
            return self.params.initial_sigma
        return sum(sigmas) / float(len(sigmas))

    def expected_home_score(
        self,
        *,
        home_roster: Sequence[str],
        away_roster: Sequence[str],
        home_strength: float,
        away_strength: float,
        lookup: RatingLookup,
    ) -> float:
        home = self._model.rating(
            mu=home_strength,
            sigma=self.team_sigma(home_roster, lookup),
            name="home",
        )
        away = self._model.rating(
            mu=away_strength,
            sigma=self.team_sigma(away_roster, lookup),
            name="away",
        )
        predicted = self._model.predict_win([[home], [away]])
        return float(predicted[0])


__all__ = ["PlayerTrueSkillCalculator", "TrueSkillParameters", "information_gain_sigma"]
