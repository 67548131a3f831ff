"""Per-round gravity pulling every tracked player toward the baseline."""

from __future__ import annotations

from collections.abc import Collection
from dataclasses import dataclass
from math import sqrt
from typing import Any

from league_rankings.domain.ratings.ledger import Ledger


@dataclass(frozen=True)
class DecayParameters:
    baseline: float = 1200.0
    # Factors multiply the distance to baseline, so closer to 1.0 means slower drift.
    active_above_factor: float = 0.998
    inactive_above_factor: float = 0.992
    active_below_factor: float = 0.992
    inactive_below_factor: float = 0.998
    sigma_growth: float = 10.0
    max_sigma: float = 200.0

    def as_config_json(self) -> dict[str, Any]:
        return {
            "baseline": self.baseline,
            "active_above_factor": self.active_above_factor,
            "inactive_above_factor": self.inactive_above_factor,
            "active_below_factor": self.active_below_factor,
            "inactive_below_factor": self.inactive_below_factor,
            "sigma_growth": self.sigma_growth,
            "max_sigma": self.max_sigma,
        }


def decay_factor(rating: float, *, is_active: bool, params: DecayParameters) -> float:
    if rating >= params.baseline:
        return params.active_above_factor if is_active else params.inactive_above_factor
    return params.active_below_factor if is_active else params.inactive_below_factor


def decay_rating(rating: float, *, is_active: bool, params: DecayParameters) -> float:
    factor = decay_factor(rating, is_active=is_active, params=params)
    return params.baseline + ((rating - params.baseline) * factor)


def grow_sigma(sigma: float, params: DecayParameters) -> float:
    if sigma >= params.max_sigma:
        return sigma
    return min(params.max_sigma, sqrt((sigma**2) + (params.sigma_growth**2)))


def apply_round_decay(
    ledger: Ledger,
    active_player_ids: Collection[str],
    params: DecayParameters,
) -> None:
    """Decay every ledger player once; ``active_player_ids`` played this round."""
    for player_id, state in ledger.items():
        is_active = player_id in active_player_ids
        state.mu = decay_rating(state.mu, is_active=is_active, params=params)

        if is_active:
            state.rounds_since_last_game = 0
            continue

        state.rounds_since_last_game += 1
        if state.sigma is not None:
            state.sigma = grow_sigma(state.sigma, params)


def validate_decay_parameters(params: DecayParameters, *, source: str) -> None:
    for key in (
        "active_above_factor",
        "inactive_above_factor",
        "active_below_factor",
        "inactive_below_factor",
    ):
        value = getattr(params, key)
        if value <= 0.0 or value > 1.0:
            raise ValueError(f"{source}: [decay].{key} must be in (0, 1]")
    if params.sigma_growth < 0.0:
        raise ValueError(f"{source}: [decay].sigma_growth must be >= 0")
    if params.max_sigma <= 0.0:
        raise ValueError(f"{source}: [decay].max_sigma must be > 0")


__all__ = [
    "DecayParameters",
    "apply_round_decay",
    "decay_factor",
    "decay_rating",
    "grow_sigma",
    "validate_decay_parameters",
]
