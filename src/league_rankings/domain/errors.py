"""Exceptions raised by the player ranking engine."""

from __future__ import annotations


class RankingError(Exception):
    """Base class for ranking calculation failures."""


class MissingDataError(RankingError, LookupError):
    """A referenced team, player, or season is absent from the loaded league data."""


class ValidationError(RankingError, ValueError):
    """A single game is malformed and cannot be rated."""

    def __init__(self, game_id: str, reason: str) -> None:
        super().__init__(f"game_id={game_id}: {reason}")
        self.game_id = game_id
        self.reason = reason


class ConcurrencyConflict(RankingError):
    """Another calculation is already pending or running."""


class CalculationTimeout(RankingError):
    """The calculation was cancelled at a round boundary."""


__all__ = [
    "CalculationTimeout",
    "ConcurrencyConflict",
    "MissingDataError",
    "RankingError",
    "ValidationError",
]
