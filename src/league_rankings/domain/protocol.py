"""Shared protocols and enums for ranking calculations."""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from typing import Protocol, runtime_checkable

from league_rankings.domain.common import GameRecord
from league_rankings.domain.ratings.base import (
    GameOutcome,
    PlayerNameLookup,
    PlayerRatingEvent,
    RatingLookup,
)
from league_rankings.domain.ratings.ledger import Ledger, PlayerRatingState


class RunType(str, Enum):
    """Whether a calculation starts from scratch or continues prior rankings."""

    FULL = "full"
    INCREMENTAL = "incremental"


class CalculationStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (CalculationStatus.COMPLETED, CalculationStatus.FAILED)


class RunPhase(str, Enum):
    """Round processor lifecycle."""

    LOADED = "loaded"
    PROCESSING = "processing"
    EXPORTED = "exported"
    FAILED = "failed"


@runtime_checkable
class RatingCalculator(Protocol):
    """Contract the round processor needs from a rating algorithm."""

    def new_player_state(self, player_id: str, player_name: str) -> PlayerRatingState: ...

    def evaluate_game(
        self,
        game: GameRecord,
        home_roster: Sequence[str],
        away_roster: Sequence[str],
        lookup: RatingLookup,
    ) -> GameOutcome: ...

    def apply_outcome(
        self,
        outcome: GameOutcome,
        ledger: Ledger,
        player_name: PlayerNameLookup,
        *,
        counted: bool = True,
    ) -> list[PlayerRatingEvent]: ...


__all__ = ["CalculationStatus", "RatingCalculator", "RunPhase", "RunType"]
