"""Per-round leaderboard snapshots for rating history views."""

from __future__ import annotations

from collections.abc import Collection, Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from league_rankings.domain.common import Round
from league_rankings.domain.export import competition_ranks, ordered_states
from league_rankings.domain.ratings.ledger import Ledger, RatingPoint


@dataclass(frozen=True)
class RoundStanding:
    """One player's place on the leaderboard right after a round."""

    player_id: str
    player_name: str
    rating: float
    sigma: float | None
    previous_rating: float | None
    rank: int
    total_games: int
    is_active: bool

    @property
    def change(self) -> float | None:
        """Rating movement over the round; ``None`` on a player's first round."""
        if self.previous_rating is None:
            return None
        return self.rating - self.previous_rating

    def to_dict(self) -> dict[str, Any]:
        return {
            "player_id": self.player_id,
            "player_name": self.player_name,
            "rating": self.rating,
            "sigma": self.sigma,
            "previous_rating": self.previous_rating,
            "change": self.change,
            "rank": self.rank,
            "total_games": self.total_games,
            "is_active": self.is_active,
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> RoundStanding:
        sigma = payload.get("sigma")
        previous_rating = payload.get("previous_rating")
        return cls(
            player_id=str(payload["player_id"]),
            player_name=str(payload.get("player_name", "")),
            rating=float(payload["rating"]),
            sigma=None if sigma is None else float(sigma),
            previous_rating=None if previous_rating is None else float(previous_rating),
            rank=int(payload["rank"]),
            total_games=int(payload.get("total_games", 0)),
            is_active=bool(payload.get("is_active", False)),
        )


@dataclass(frozen=True)
class RoundSnapshot:
    round_id: str
    season_id: str
    round_start_time: datetime
    calculation_id: str
    calculated_at: datetime
    game_ids: tuple[str, ...]
    standings: tuple[RoundStanding, ...]

    @property
    def active_player_count(self) -> int:
        return sum(1 for standing in self.standings if standing.is_active)

    @property
    def avg_rating(self) -> float | None:
        """Mean rating of the players who took part in the round."""
        active = [standing.rating for standing in self.standings if standing.is_active]
        if not active:
            return None
        return sum(active) / float(len(active))

    def standing(self, player_id: str) -> RoundStanding | None:
        for standing in self.standings:
            if standing.player_id == player_id:
                return standing
        return None


def build_round_snapshot(
    round_: Round,
    ledger: Ledger,
    previous: Mapping[str, RatingPoint],
    active_player_ids: Collection[str],
    *,
    game_ids: Iterable[str],
    calculation_id: str,
    calculated_at: datetime,
    precision: int = 2,
) -> RoundSnapshot:
    """Rank the whole ledger after ``round_``; ``previous`` is the round-start view."""
    ordered = ordered_states(ledger)
    ranks = competition_ranks((state.mu for state in ordered), precision)

    standings = []
    for state, rank in zip(ordered, ranks):
        before = previous.get(state.player_id)
        standings.append(
            RoundStanding(
                player_id=state.player_id,
                player_name=state.player_name,
                rating=state.mu,
                sigma=state.sigma,
                previous_rating=None if before is None else before.mu,
                rank=rank,
                total_games=state.total_games,
                is_active=state.player_id in active_player_ids,
            )
        )

    return RoundSnapshot(
        round_id=round_.round_id,
        season_id=round_.season_id,
        round_start_time=round_.start_time,
        calculation_id=calculation_id,
        calculated_at=calculated_at,
        game_ids=tuple(game_ids),
        standings=tuple(standings),
    )


def player_history(
    snapshots: Iterable[RoundSnapshot],
    player_id: str,
) -> list[tuple[RoundSnapshot, RoundStanding]]:
    """Every snapshot that lists ``player_id``, in the given order."""
    history = []
    for snapshot in snapshots:
        standing = snapshot.standing(player_id)
        if standing is not None:
            history.append((snapshot, standing))
    return history


__all__ = [
    "RoundSnapshot",
    "RoundStanding",
    "build_round_snapshot",
    "player_history",
]
